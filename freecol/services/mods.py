"""Content mod discovery and loading.

A mod is a directory holding a ``mod.json`` manifest and, optionally, a
``strings/`` directory of message catalog fragments.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from .messages import MessageCatalog

log = structlog.stdlib.get_logger()

MANIFEST_FILE = "mod.json"
MODS_DIRECTORY = "mods"


@dataclass(frozen=True)
class ModValidationResult:
    valid: bool
    errors: list[str]


@dataclass(frozen=True)
class ModInfo:
    id: str
    name: str
    version: str
    path: Path


class ModManifestValidator:
    REQUIRED_MANIFEST_KEYS = {"id", "name", "version"}

    def validate(self, manifest: Any) -> ModValidationResult:
        if not isinstance(manifest, dict):
            return ModValidationResult(valid=False, errors=["manifest must be a JSON object"])
        errors: list[str] = []
        missing = sorted(self.REQUIRED_MANIFEST_KEYS - set(manifest.keys()))
        if missing:
            errors.append(f"manifest missing required keys: {', '.join(missing)}")
        mod_id = manifest.get("id")
        if mod_id is not None and (not isinstance(mod_id, str) or not mod_id.strip()):
            errors.append("id must be a non-empty string")
        return ModValidationResult(valid=not errors, errors=errors)


class ModLoader:
    """Finds mods in the data and user mod directories.

    User mods replace data mods with the same id.
    """

    def __init__(self) -> None:
        self.validator = ModManifestValidator()

    def load(self, pack_dir: Path) -> ModInfo:
        """Read and validate one mod.

        Raises:
            ValueError: If the manifest is missing or invalid
        """
        manifest_path = pack_dir / MANIFEST_FILE
        if not manifest_path.is_file():
            raise ValueError(f"mod missing {MANIFEST_FILE}")
        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"unreadable {MANIFEST_FILE}: {e}") from e
        check = self.validator.validate(manifest)
        if not check.valid:
            raise ValueError("; ".join(check.errors))
        return ModInfo(
            id=manifest["id"],
            name=str(manifest["name"]),
            version=str(manifest["version"]),
            path=pack_dir,
        )

    def discover(self, *roots: Path | None) -> list[ModInfo]:
        """Load every valid mod under ``roots``; invalid mods are skipped."""
        found: dict[str, ModInfo] = {}
        for root in roots:
            if root is None or not root.is_dir():
                continue
            for pack_dir in sorted(p for p in root.iterdir() if p.is_dir()):
                try:
                    mod = self.load(pack_dir)
                except ValueError as e:
                    log.warning("Skipping invalid mod", path=str(pack_dir), error=str(e))
                    continue
                if mod.id in found:
                    log.info("Mod overridden", id=mod.id, path=str(pack_dir))
                found[mod.id] = mod
        mods = sorted(found.values(), key=lambda mod: mod.id)
        log.info("Mods loaded", count=len(mods), ids=[mod.id for mod in mods])
        return mods


def load_mod_messages(catalog: MessageCatalog, mods: list[ModInfo]) -> int:
    """Merge each mod's message fragments into ``catalog``.

    Returns:
        Number of fragment files merged
    """
    merged = 0
    for mod in mods:
        strings = mod.path / "strings"
        if not strings.is_dir():
            continue
        try:
            merged += catalog.merge_directory(strings, catalog.locale)
        except (OSError, ValueError) as e:
            log.warning("Skipping mod messages", id=mod.id, error=str(e))
    return merged
