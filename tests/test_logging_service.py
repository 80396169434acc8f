"""Tests for the logging service."""

import json
import logging
import logging.handlers
import sys
import threading
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

from freecol.services.logging import LoggingService, setup_logging


def read_events(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


class TestLoggingService:
    """Test cases for LoggingService."""

    def test_console_logging_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Console output is human-readable, not JSON."""
        service = LoggingService(log_level="INFO", console=True)
        service.configure()

        service.get_logger("test").info("test message", key="value")

        err = capsys.readouterr().err
        assert "test message" in err
        assert "key=value" in err
        assert not err.strip().startswith("{")

    def test_file_logging_is_json(self, tmp_path: Path) -> None:
        """File output is one JSON object per line."""
        log_file = tmp_path / "logs" / "FreeCol.log"
        service = LoggingService(log_level="INFO", log_file=log_file, console=False)
        service.configure()

        service.get_logger("test").info("test file message", data="test")

        events = read_events(log_file)
        assert events[-1]["event"] == "test file message"
        assert events[-1]["data"] == "test"
        assert events[-1]["level"] == "info"
        assert "timestamp" in events[-1]

    def test_level_filters_events(self, tmp_path: Path) -> None:
        log_file = tmp_path / "FreeCol.log"
        service = LoggingService(log_level="WARNING", log_file=log_file, console=False)
        service.configure()

        logger = service.get_logger("test")
        logger.info("hidden")
        logger.warning("shown")

        assert [event["event"] for event in read_events(log_file)] == ["shown"]

    def test_configure_replaces_handlers(self, tmp_path: Path) -> None:
        """A second configure leaves exactly the handlers it asked for."""
        LoggingService(log_level="WARNING", console=True).configure()
        LoggingService(log_level="INFO", log_file=tmp_path / "a.log", console=False).configure()

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)

    def test_no_console_without_request(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        service = LoggingService(log_level="INFO", log_file=tmp_path / "a.log", console=False)
        service.configure()
        service.get_logger("test").info("quiet")
        assert "quiet" not in capsys.readouterr().err

    def test_silent_without_file_or_console(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Warnings are not echoed by the last-resort handler either."""
        service = LoggingService(log_level="WARNING", console=False)
        service.configure()
        service.get_logger("test").warning("Advisory", message="bad europeans")
        captured = capsys.readouterr()
        assert "bad europeans" not in captured.err
        assert "bad europeans" not in captured.out


class TestExceptionHooks:
    """Uncaught exceptions are logged instead of crashing."""

    def test_uncaught_exception_is_logged(self, tmp_path: Path) -> None:
        log_file = tmp_path / "FreeCol.log"
        service = LoggingService(log_level="INFO", log_file=log_file, console=False)
        service.configure()
        service.install_exception_hooks()
        try:
            error = RuntimeError("boom")
            sys.excepthook(RuntimeError, error, None)
        finally:
            service.restore_exception_hooks()

        event = read_events(log_file)[-1]
        assert event["event"] == "Uncaught exception"
        assert event["level"] == "warning"
        assert "boom" in event["exception"]

    def test_thread_exception_is_logged(self, tmp_path: Path) -> None:
        log_file = tmp_path / "FreeCol.log"
        service = LoggingService(log_level="INFO", log_file=log_file, console=False)
        service.configure()
        service.install_exception_hooks()

        def fail() -> None:
            raise ValueError("thread failure")

        try:
            thread = threading.Thread(target=fail, name="worker")
            thread.start()
            thread.join()
        finally:
            service.restore_exception_hooks()

        event = read_events(log_file)[-1]
        assert event["event"] == "Uncaught exception from thread"
        assert "thread failure" in event["exception"]

    def test_restore_puts_back_previous_hooks(self) -> None:
        before = (sys.excepthook, threading.excepthook)
        service = LoggingService(console=False)
        service.install_exception_hooks()
        assert sys.excepthook is not before[0]
        service.restore_exception_hooks()
        assert (sys.excepthook, threading.excepthook) == before


class TestStructuredLoggingProperties:
    """Property-based tests for structured logging consistency."""

    @given(
        log_level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
        message=st.text(min_size=1, max_size=100, alphabet=st.characters(blacklist_categories=("Cs", "Cc"))),
        context_data=st.dictionaries(
            keys=st.text(min_size=1, max_size=20).filter(lambda x: x.isidentifier() and x not in {
                "event", "level", "logger", "timestamp", "exc_info", "stack_info", "positional_args",
            }),
            values=st.one_of(st.text(max_size=50), st.integers(), st.booleans()),
            max_size=4,
        ),
    )
    @settings(max_examples=25, deadline=None)
    def test_structured_logging_consistency(
        self,
        tmp_path_factory: pytest.TempPathFactory,
        log_level: str,
        message: str,
        context_data: dict[str, str | int | bool],
    ) -> None:
        """Every event keeps its level, message and context in the log file."""
        log_file = tmp_path_factory.mktemp("logs") / "FreeCol.log"
        service = LoggingService(log_level="DEBUG", log_file=log_file, console=False)
        service.configure()

        getattr(service.get_logger("freecol.test"), log_level.lower())(message, **context_data)

        parsed = read_events(log_file)[-1]
        assert parsed["event"] == message
        assert parsed["level"] == log_level.lower()
        assert parsed["logger"] == "freecol.test"
        for key, value in context_data.items():
            assert parsed[key] == value


def test_setup_logging_function(tmp_path: Path) -> None:
    """Test the setup_logging convenience function."""
    log_file = tmp_path / "FreeCol.log"
    service = setup_logging(log_level="debug", log_file=log_file, console=False)

    assert isinstance(service, LoggingService)
    assert service.log_level == "DEBUG"

    service.get_logger("test_setup").debug("setup test", component="test")
    assert read_events(log_file)[-1]["component"] == "test"
