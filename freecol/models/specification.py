"""Ruleset specification and savegame documents."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import Advantages


@dataclass
class Specification:
    """A loaded ruleset.

    Only the parts the launcher needs are modelled; everything else in the
    ruleset document is kept verbatim in ``options``.
    """
    id: str
    name: str
    version: str
    difficulty_levels: list[str]
    default_difficulty: str
    options: dict[str, Any] = field(default_factory=dict)
    source: Path | None = None
    advantages: Advantages | None = None
    difficulty: str | None = None

    @property
    def prepared(self) -> bool:
        return self.advantages is not None and self.difficulty is not None


@dataclass(frozen=True)
class IntegrityReport:
    """Outcome of a savegame integrity check."""
    score: int  # positive when the game is usable
    problems: list[str]

    @property
    def ok(self) -> bool:
        return self.score > 0


@dataclass
class Savegame:
    """A saved game document."""
    path: Path
    version: str
    specification_id: str
    turn: int
    players: list[dict[str, Any]]
    data: dict[str, Any] = field(default_factory=dict)

    def check_integrity(self) -> IntegrityReport:
        problems: list[str] = []
        if not self.specification_id:
            problems.append("savegame does not name its specification")
        if self.turn < 1:
            problems.append(f"invalid turn number {self.turn}")
        if not self.players:
            problems.append("savegame has no players")
        seen: set[str] = set()
        for index, player in enumerate(self.players):
            name = player.get("name")
            if not isinstance(name, str) or not name:
                problems.append(f"player {index} has no name")
            elif name in seen:
                problems.append(f"duplicate player name {name!r}")
            else:
                seen.add(name)
            if not player.get("nation"):
                problems.append(f"player {index} has no nation")
        return IntegrityReport(score=-1 if problems else 1, problems=problems)
