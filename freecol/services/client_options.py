"""Stored client preferences read during start-up."""

import json
from pathlib import Path

import structlog

log = structlog.stdlib.get_logger()

LANGUAGE_OPTION = "language"


def read_language_option(path: Path | None) -> str | None:
    """The stored language preference, or None if there is none.

    A missing or unreadable options file is not an error; the user simply
    has no stored preference yet.
    """
    if path is None or not path.is_file():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Could not read client options", path=str(path), error=str(e))
        return None
    if not isinstance(data, dict):
        log.warning("Client options file is not a JSON object", path=str(path))
        return None
    language = data.get(LANGUAGE_OPTION)
    return language if isinstance(language, str) and language else None
