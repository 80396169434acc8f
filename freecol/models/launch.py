"""Client hand-off model."""

from dataclasses import dataclass
from pathlib import Path

from .specification import Specification


@dataclass(frozen=True)
class ClientLaunch:
    """Everything the client needs from the launcher."""
    name: str
    window_size: tuple[int, int] | None  # None means full screen
    user_message: str | None
    sound: bool
    intro_video: bool
    savegame: Path | None = None
    specification: Specification | None = None
    splash: Path | None = None
    font_name: str | None = None
    gui_scale: float = 1.0
    headless: bool = False

    @property
    def start_action(self) -> str:
        if self.savegame is not None:
            return f"Load {self.savegame.name}"
        if self.specification is not None:
            return f"New game: {self.specification.name} ({self.specification.difficulty})"
        return "New game"
