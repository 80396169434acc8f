"""Textual client shell started by the launcher."""

from typing import ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.containers import Vertical
from textual.widgets import Footer, Header, Static

import structlog

from freecol.models.launch import ClientLaunch

log = structlog.stdlib.get_logger()


class FreeColClientApp(App[None]):
    """Client window.

    Shows how the session is about to start and hands over to the game
    flow selected by the launcher.
    """

    CSS: ClassVar[str] = """
    Screen {
        background: $surface;
        align: center middle;
    }

    #launch-summary {
        width: 70;
        height: auto;
        padding: 1 2;
        border: solid $primary;
    }

    .title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    .notice {
        color: $warning;
        margin-top: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True, priority=True),
        Binding("enter", "start_game", "Start", show=True),
    ]

    def __init__(self, launch: ClientLaunch) -> None:
        super().__init__()
        self.launch = launch
        self.title = "FreeCol"  # type: ignore[assignment]
        self.sub_title = launch.name  # type: ignore[assignment]
        self.started = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="launch-summary"):
            yield Static("FreeCol", classes="title")
            for line in self.summary_lines():
                yield Static(line)
            if self.launch.user_message:
                yield Static(self.launch.user_message, classes="notice")
        yield Footer()

    def summary_lines(self) -> list[str]:
        window = self.launch.window_size
        if window is None:
            display = "full screen"
        elif window == (-1, -1):
            display = "windowed"
        else:
            display = f"{window[0]}x{window[1]}"
        return [
            f"Player: {self.launch.name}",
            f"Display: {display}, scale {self.launch.gui_scale:.2f}",
            f"Sound: {'on' if self.launch.sound else 'off'}",
            f"Start: {self.launch.start_action}",
        ]

    async def action_start_game(self) -> None:
        self.started = True
        log.info("Game start requested", action=self.launch.start_action)
        self.notify(self.launch.start_action)


def start_client(launch: ClientLaunch) -> int:
    """Run the client until the user quits.

    Returns:
        Process exit status
    """
    log.info(
        "Starting client",
        headless=launch.headless,
        savegame=str(launch.savegame) if launch.savegame else None,
        specification=launch.specification.id if launch.specification else None,
    )
    if launch.headless:
        # Nothing to draw; the game flow runs without a window
        log.info("Headless client ready", action=launch.start_action)
        return 0
    FreeColClientApp(launch).run()
    log.info("Client exited normally")
    return 0
