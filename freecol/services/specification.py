"""Ruleset (total conversion) lookup and specification loading."""

import json
from pathlib import Path
from typing import Any

import structlog

from ..models.config import Advantages
from ..models.specification import Specification

log = structlog.stdlib.get_logger()

RULES_DIRECTORY = "rules"
SPECIFICATION_FILE = "specification.json"


class SpecificationResolver:
    """Finds rulesets under the data directory and prepares them for play."""

    def __init__(self, data_directory: Path) -> None:
        self.data_directory = data_directory

    def tc_file(self, tc: str) -> Path | None:
        """Specification file of the named ruleset, or None if there is none."""
        if not tc or "/" in tc or "\\" in tc or tc in (".", ".."):
            return None
        path = self.data_directory / RULES_DIRECTORY / tc / SPECIFICATION_FILE
        return path if path.is_file() else None

    def available(self) -> list[str]:
        rules = self.data_directory / RULES_DIRECTORY
        if not rules.is_dir():
            return []
        return sorted(p.parent.name for p in rules.glob(f"*/{SPECIFICATION_FILE}"))

    def load_specification(
        self,
        tc: str,
        advantages: Advantages | None = None,
        difficulty: str | None = None,
    ) -> Specification | None:
        """Load and prepare a ruleset.

        Read failures are logged and reported as None; deciding whether that
        is fatal is up to the caller.
        """
        path = self.tc_file(tc)
        if path is None:
            log.warning("Ruleset not found", tc=tc, available=self.available())
            return None
        try:
            spec = read_specification(path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.error("Specification read failed", tc=tc, path=str(path), error=str(e))
            return None
        prepare(spec, advantages, difficulty)
        log.info("Specification loaded", id=spec.id, difficulty=spec.difficulty)
        return spec


def read_specification(path: Path) -> Specification:
    """Parse a specification document.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the document is malformed
    """
    with open(path, "r", encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected JSON object, got {type(data).__name__}")
    levels = data.get("difficultyLevels", [])
    if not isinstance(levels, list) or not all(isinstance(level, str) for level in levels):
        raise ValueError("difficultyLevels must be a list of strings")
    return Specification(
        id=str(data["id"]),
        name=str(data.get("name", data["id"])),
        version=str(data.get("version", "")),
        difficulty_levels=levels,
        default_difficulty=str(data.get("defaultDifficulty", levels[0] if levels else "")),
        options=data.get("options", {}),
        source=path,
    )


def prepare(spec: Specification, advantages: Advantages | None, difficulty: str | None) -> None:
    """Apply the advantages setting and difficulty level to a specification."""
    spec.advantages = advantages or Advantages.SELECTABLE
    if difficulty is not None and difficulty not in spec.difficulty_levels:
        log.warning(
            "Unknown difficulty level, using ruleset default",
            difficulty=difficulty,
            default=spec.default_difficulty,
        )
        difficulty = None
    spec.difficulty = difficulty or spec.default_difficulty
