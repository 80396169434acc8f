"""Shared fixtures for the launcher tests."""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path

import pytest
import structlog

from freecol.services.directories import BUNDLED_DATA_DIRECTORY
from freecol.services.messages import MessageCatalog

INSTALLED_HANDLERS = (logging.StreamHandler, logging.handlers.RotatingFileHandler, logging.NullHandler)


@pytest.fixture
def catalog() -> MessageCatalog:
    """The bundled English message catalog."""
    return MessageCatalog.load(BUNDLED_DATA_DIRECTORY, "en")


@pytest.fixture
def user_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the XDG base directories at a temporary directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    return home


@pytest.fixture(autouse=True)
def restore_process_hooks():
    """Undo the logging handlers and exception hooks a bootstrap installs."""
    root = logging.getLogger()
    level = root.level
    hooks = (sys.excepthook, threading.excepthook)
    yield
    # pytest's own capture handlers are subclasses and stay in place
    for handler in list(root.handlers):
        if type(handler) in INSTALLED_HANDLERS:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    structlog.reset_defaults()
    sys.excepthook, threading.excepthook = hooks
