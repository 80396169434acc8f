"""Message catalog: localized strings loaded from the data directory.

Catalog files are flat JSON objects mapping message keys to templates.
``strings/messages.json`` is the base catalog; ``messages_<lang>.json`` and
``messages_<lang>_<COUNTRY>.json`` overlay it for the active locale.
Templates use ``%name%`` placeholders.
"""

import json
import locale as _locale
import os
from pathlib import Path

import structlog

from ..models.messages import MessageTemplate

log = structlog.stdlib.get_logger()

AUTOMATIC = "automatic"
FALLBACK_LOCALE = "en"
STRINGS_DIRECTORY = "strings"
CATALOG_PREFIX = "messages"


def strip_encoding(locale_arg: str) -> str:
    """Drop an encoding suffix such as ``.UTF-8`` from a locale name."""
    index = locale_arg.find(".")
    return locale_arg[:index] if index > 0 else locale_arg


def normalize_locale(name: str) -> str:
    """Canonical ``lang`` or ``lang_COUNTRY`` form of a locale name."""
    name = strip_encoding(name.strip()).replace("-", "_")
    name = name.split("@", 1)[0]
    parts = [part for part in name.split("_") if part]
    if not parts:
        return FALLBACK_LOCALE
    language = parts[0].lower()
    if len(parts) == 1:
        return language
    return f"{language}_{parts[1].upper()}"


def platform_locale() -> str:
    """The locale the process environment asks for."""
    name, _ = _locale.getlocale()
    if not name or name in ("C", "POSIX"):
        name = os.environ.get("LC_ALL") or os.environ.get("LANG") or ""
    if not name or name.startswith(("C.", "POSIX")) or name in ("C", "POSIX"):
        return FALLBACK_LOCALE
    return normalize_locale(name)


def locale_chain(locale: str) -> list[str]:
    """Overlay suffixes for a locale, most general first."""
    locale = normalize_locale(locale)
    language = locale.split("_", 1)[0]
    return [language] if language == locale else [language, locale]


def _read_catalog_file(path: Path) -> dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected JSON object in {path}, got {type(data).__name__}")
    return {str(key): str(value) for key, value in data.items()}


class MessageCatalog:
    """Localized message lookup with template substitution."""

    def __init__(self, messages: dict[str, str] | None = None, locale: str = FALLBACK_LOCALE) -> None:
        self._messages: dict[str, str] = dict(messages or {})
        self.locale = locale

    @classmethod
    def load(cls, data_directory: Path, locale: str) -> "MessageCatalog":
        """Load the base catalog and the overlays for ``locale``.

        Raises:
            FileNotFoundError: If the base catalog is missing
            ValueError: If a catalog file is not a JSON object
        """
        catalog = cls(locale=normalize_locale(locale))
        strings = data_directory / STRINGS_DIRECTORY
        catalog.merge(_read_catalog_file(strings / f"{CATALOG_PREFIX}.json"))
        catalog.merge_directory(strings, catalog.locale, include_base=False)
        log.info("Message catalog loaded", locale=catalog.locale, size=len(catalog))
        return catalog

    def merge(self, fragment: dict[str, str]) -> None:
        self._messages.update(fragment)

    def merge_directory(self, strings: Path, locale: str, include_base: bool = True) -> int:
        """Merge every catalog file in ``strings`` that applies to ``locale``.

        Returns:
            Number of files merged
        """
        names = [f"{CATALOG_PREFIX}.json"] if include_base else []
        names.extend(f"{CATALOG_PREFIX}_{suffix}.json" for suffix in locale_chain(locale))
        merged = 0
        for name in names:
            path = strings / name
            if not path.is_file():
                continue
            self.merge(_read_catalog_file(path))
            merged += 1
            log.debug("Merged message fragment", path=str(path))
        return merged

    def has(self, key: str) -> bool:
        return key in self._messages

    def message(self, template: MessageTemplate | str) -> str:
        """Localize a key or template. Unknown keys come back unchanged."""
        if isinstance(template, str):
            template = MessageTemplate(template)
        text = self._messages.get(template.key, template.key)
        for placeholder, value in template.names.items():
            text = text.replace(placeholder, value)
        return text

    def get_name(self, key: str) -> str:
        """Display name of a model object key."""
        return self.message(f"{key}.name")

    def __len__(self) -> int:
        return len(self._messages)
