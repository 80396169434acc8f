"""Launch configuration models.

`ConfigurationStore` is the mutable builder filled in while the command line
is handled. Every field starts unset; defaults are applied by the accessors
and once more by `resolve()`, which produces the frozen `LaunchConfig` that
every later bootstrap phase reads.
"""

import getpass
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog

log = structlog.stdlib.get_logger()


class Advantages(Enum):
    """How national advantages are assigned to European players."""
    NONE = "none"
    FIXED = "fixed"
    SELECTABLE = "selectable"

    @property
    def message_key(self) -> str:
        return f"model.option.advantages.{self.value}"


class DebugMode(Enum):
    """Debug facilities that can be switched on from the command line."""
    COMMS = "comms"
    DESYNC = "desync"
    INIT = "init"
    MENUS = "menus"
    PATHS = "paths"


# Difficulty level identifiers, easiest first.
DIFFICULTIES: tuple[str, ...] = ("veryEasy", "easy", "medium", "hard", "veryHard")
DIFFICULTY_PREFIX = "model.difficulty."

ADVANTAGES_DEFAULT = Advantages.SELECTABLE
DIFFICULTY_DEFAULT = DIFFICULTY_PREFIX + "medium"
EUROPEANS_DEFAULT = 4
EUROPEANS_MIN = 1
GUI_SCALE_DEFAULT = 1.0
GUI_SCALE_MIN_PCT = 100
GUI_SCALE_MAX_PCT = 200
GUI_SCALE_STEP_PCT = 25
GUI_SCALE_MIN = GUI_SCALE_MIN_PCT / 100.0
GUI_SCALE_MAX = GUI_SCALE_MAX_PCT / 100.0
GUI_SCALE_STEP = GUI_SCALE_STEP_PCT / 100.0
LOG_LEVEL_DEFAULT = "INFO"
PLAYER_NAME_DEFAULT = "Player"
PORT_DEFAULT = 3541
PORT_MAX = 65535
TC_DEFAULT = "freecol"
TIMEOUT_DEFAULT = 60  # seconds, multiplayer
TIMEOUT_MIN = 10

# Window size meaning "windowed, as large as the screen allows".
WINDOW_BEST_FIT: tuple[int, int] = (-1, -1)


def _platform_user_name() -> str | None:
    try:
        return getpass.getuser() or None
    except (KeyError, OSError):
        return None


@dataclass(frozen=True)
class LaunchConfig:
    """Fully resolved launch configuration. Read-only after phase 4."""
    advantages: Advantages
    check_integrity: bool
    client_options_file: Path | None
    console_logging: bool
    debug_modes: frozenset[DebugMode]
    debug_run_save: str | None
    debug_run_turns: int | None
    debug_start: bool
    difficulty: str
    european_count: int
    fast_start: bool
    font_name: str | None
    gui_scale: float
    headless: bool
    intro_video: bool
    log_file: Path | None
    log_level: str
    memory_check: bool
    name: str
    public_server: bool
    runtime_check: bool
    savegame_file: Path | None
    seed: int | None
    server_name: str | None
    server_port: int
    sound: bool
    splash: Path | None
    standalone_server: bool
    tc: str
    timeout: int | None
    user_cache_directory: Path | None
    user_config_directory: Path | None
    user_data_directory: Path | None
    window_size: tuple[int, int] | None  # None means full screen

    def get_timeout(self, single_player: bool) -> int:
        """Game turn timeout; see `ConfigurationStore.get_timeout`."""
        if self.timeout is not None and self.timeout >= TIMEOUT_MIN:
            return self.timeout
        return sys.maxsize if single_player else TIMEOUT_DEFAULT

    @property
    def debug(self) -> bool:
        return bool(self.debug_modes)


class ConfigurationStore:
    """Mutable launch settings collected from the command line.

    Fields hold ``None`` until something sets them. Callers go through the
    getters, which substitute the documented default for an unset field.
    """

    def __init__(self) -> None:
        self._advantages: Advantages | None = None
        self._check_integrity: bool | None = None
        self._client_options_file: Path | None = None
        self._console_logging: bool | None = None
        self._debug_modes: set[DebugMode] = set()
        self._debug_run_save: str | None = None
        self._debug_run_turns: int | None = None
        self._debug_start: bool | None = None
        self._difficulty: str | None = None
        self._european_count: int | None = None
        self._fast_start: bool | None = None
        self._font_name: str | None = None
        self._full_screen: bool | None = None
        self._gui_scale: float | None = None
        self._headless: bool | None = None
        self._intro_video: bool | None = None
        self._log_file: Path | None = None
        self._log_level: str | None = None
        self._memory_check: bool | None = None
        self._name: str | None = None
        self._public_server: bool | None = None
        self._runtime_check: bool | None = None
        self._savegame_file: Path | None = None
        self._seed: int | None = None
        self._server_name: str | None = None
        self._server_port: int | None = None
        self._sound: bool | None = None
        self._splash: Path | None = None
        self._splash_disabled: bool | None = None
        self._standalone_server: bool | None = None
        self._tc: str | None = None
        self._timeout: int | None = None
        self._user_cache_directory: Path | None = None
        self._user_config_directory: Path | None = None
        self._user_data_directory: Path | None = None
        self._window_size: tuple[int, int] | None = None

    # Rules and players

    def set_advantages(self, advantages: Advantages | None) -> None:
        self._advantages = advantages

    def get_advantages(self) -> Advantages:
        return self._advantages if self._advantages is not None else ADVANTAGES_DEFAULT

    def set_difficulty(self, difficulty: str | None) -> None:
        self._difficulty = difficulty

    def get_difficulty(self) -> str:
        return self._difficulty if self._difficulty is not None else DIFFICULTY_DEFAULT

    def set_european_count(self, count: int) -> None:
        self._european_count = count

    def get_european_count(self) -> int:
        return self._european_count if self._european_count is not None else EUROPEANS_DEFAULT

    def set_name(self, name: str | None) -> None:
        self._name = name or None
        log.info("Player name set", name=self._name)

    def get_name(self) -> str:
        """Player name, falling back to the login name, then a fixed default."""
        if self._name:
            return self._name
        return _platform_user_name() or PLAYER_NAME_DEFAULT

    def set_tc(self, tc: str | None) -> None:
        self._tc = tc or None

    def get_tc(self) -> str:
        return self._tc if self._tc is not None else TC_DEFAULT

    def set_seed(self, seed: int) -> None:
        self._seed = seed

    def get_seed(self) -> int | None:
        return self._seed

    # Server

    def set_server_port(self, port: int) -> None:
        self._server_port = port

    def get_server_port(self) -> int:
        return self._server_port if self._server_port is not None else PORT_DEFAULT

    def set_server_name(self, name: str | None) -> None:
        self._server_name = name or None

    def get_server_name(self) -> str | None:
        return self._server_name

    def set_public_server(self, public: bool) -> None:
        self._public_server = public

    def is_public_server(self) -> bool:
        return self._public_server if self._public_server is not None else True

    def set_standalone_server(self, standalone: bool) -> None:
        self._standalone_server = standalone

    def is_standalone_server(self) -> bool:
        return bool(self._standalone_server)

    def set_check_integrity(self, check: bool) -> None:
        self._check_integrity = check

    def is_check_integrity(self) -> bool:
        return bool(self._check_integrity)

    def set_timeout(self, timeout: int) -> bool:
        """Store a game turn timeout. Values below the minimum are refused."""
        if timeout < TIMEOUT_MIN:
            return False
        self._timeout = timeout
        return True

    def get_timeout(self, single_player: bool) -> int:
        """Game turn timeout in seconds.

        Uses the command line value when one was accepted, otherwise an
        effectively infinite wait for single player and `TIMEOUT_DEFAULT`
        for multiplayer games.
        """
        if self._timeout is not None and self._timeout >= TIMEOUT_MIN:
            return self._timeout
        return sys.maxsize if single_player else TIMEOUT_DEFAULT

    # Display and sound

    def set_gui_scale(self, scale: float) -> None:
        self._gui_scale = scale

    def get_gui_scale(self) -> float:
        return self._gui_scale if self._gui_scale is not None else GUI_SCALE_DEFAULT

    def set_window_size(self, size: tuple[int, int]) -> None:
        self._window_size = size
        self._full_screen = False

    def set_full_screen(self) -> None:
        self._full_screen = True

    def get_window_size(self) -> tuple[int, int] | None:
        """Requested window size, or None for full screen."""
        if self._full_screen:
            return None
        return self._window_size if self._window_size is not None else WINDOW_BEST_FIT

    def set_font_name(self, font_name: str | None) -> None:
        self._font_name = font_name or None

    def get_font_name(self) -> str | None:
        return self._font_name

    def set_headless(self, headless: bool) -> None:
        self._headless = headless

    def is_headless(self) -> bool:
        return bool(self._headless)

    def set_intro_video(self, intro_video: bool) -> None:
        self._intro_video = intro_video

    def is_intro_video(self) -> bool:
        return self._intro_video if self._intro_video is not None else True

    def set_sound(self, sound: bool) -> None:
        self._sound = sound

    def is_sound(self) -> bool:
        return self._sound if self._sound is not None else True

    def set_splash(self, splash: Path) -> None:
        self._splash = splash
        self._splash_disabled = False

    def disable_splash(self) -> None:
        self._splash_disabled = True

    def get_splash(self, data_directory: Path | None = None) -> Path | None:
        """Splash image path; the data directory's splash.jpg when unset."""
        if self._splash_disabled:
            return None
        if self._splash is not None:
            return self._splash
        if data_directory is not None:
            default = data_directory / "splash.jpg"
            if default.is_file():
                return default
        return None

    # Start-up behaviour

    def set_fast_start(self, fast: bool) -> None:
        self._fast_start = fast

    def is_fast_start(self) -> bool:
        return bool(self._fast_start)

    def set_debug_start(self, debug_start: bool) -> None:
        self._debug_start = debug_start

    def is_debug_start(self) -> bool:
        return bool(self._debug_start)

    def enable_debug_mode(self, mode: DebugMode) -> None:
        self._debug_modes.add(mode)

    def get_debug_modes(self) -> frozenset[DebugMode]:
        return frozenset(self._debug_modes)

    def set_debug_run(self, turns: int | None, save: str | None) -> None:
        self._debug_run_turns = turns
        self._debug_run_save = save

    def set_runtime_check(self, check: bool) -> None:
        self._runtime_check = check

    def is_runtime_check(self) -> bool:
        return self._runtime_check if self._runtime_check is not None else True

    def set_memory_check(self, check: bool) -> None:
        self._memory_check = check

    def is_memory_check(self) -> bool:
        return self._memory_check if self._memory_check is not None else True

    # Logging

    def set_console_logging(self, console: bool) -> None:
        self._console_logging = console

    def is_console_logging(self) -> bool:
        return bool(self._console_logging)

    def set_log_level(self, level: str) -> None:
        self._log_level = level

    def has_log_level(self) -> bool:
        return self._log_level is not None

    def get_log_level(self) -> str:
        return self._log_level if self._log_level is not None else LOG_LEVEL_DEFAULT

    def set_log_file(self, path: Path) -> None:
        self._log_file = path

    def get_log_file(self) -> Path | None:
        return self._log_file

    # Files and directories

    def set_savegame_file(self, path: Path) -> None:
        self._savegame_file = path

    def get_savegame_file(self) -> Path | None:
        return self._savegame_file

    def set_client_options_file(self, path: Path) -> None:
        self._client_options_file = path

    def get_client_options_file(self) -> Path | None:
        return self._client_options_file

    def set_user_cache_directory(self, path: Path) -> None:
        self._user_cache_directory = path

    def set_user_config_directory(self, path: Path) -> None:
        self._user_config_directory = path

    def set_user_data_directory(self, path: Path) -> None:
        self._user_data_directory = path

    def resolve(self, data_directory: Path | None = None) -> LaunchConfig:
        """Apply every default and freeze the result."""
        return LaunchConfig(
            advantages=self.get_advantages(),
            check_integrity=self.is_check_integrity(),
            client_options_file=self._client_options_file,
            console_logging=self.is_console_logging(),
            debug_modes=self.get_debug_modes(),
            debug_run_save=self._debug_run_save,
            debug_run_turns=self._debug_run_turns,
            debug_start=self.is_debug_start(),
            difficulty=self.get_difficulty(),
            european_count=self.get_european_count(),
            fast_start=self.is_fast_start(),
            font_name=self.get_font_name(),
            gui_scale=self.get_gui_scale(),
            headless=self.is_headless(),
            intro_video=self.is_intro_video(),
            log_file=self._log_file,
            log_level=self.get_log_level(),
            memory_check=self.is_memory_check(),
            name=self.get_name(),
            public_server=self.is_public_server(),
            runtime_check=self.is_runtime_check(),
            savegame_file=self._savegame_file,
            seed=self._seed,
            server_name=self.get_server_name(),
            server_port=self.get_server_port(),
            sound=self.is_sound(),
            splash=self.get_splash(data_directory),
            standalone_server=self.is_standalone_server(),
            tc=self.get_tc(),
            timeout=self._timeout,
            user_cache_directory=self._user_cache_directory,
            user_config_directory=self._user_config_directory,
            user_data_directory=self._user_data_directory,
            window_size=self.get_window_size(),
        )
