"""Per-option validation and coercion.

Each ``handle_*`` function receives the configuration store, the raw option
value (None when the option was given without one) and a `HandlerContext`.
It either updates the store and returns None, or returns a
`MessageTemplate` describing why the value was refused. Whether a refusal
is fatal or advisory is declared on the option descriptor, not here.

The ``select_*``/``set_*`` helpers hold the coercion rules on their own so
they can be reused and tested without a parsed command line.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from .. import __version__
from ..models.config import (
    DIFFICULTIES,
    DIFFICULTY_PREFIX,
    EUROPEANS_MIN,
    GUI_SCALE_MAX,
    GUI_SCALE_MAX_PCT,
    GUI_SCALE_MIN_PCT,
    GUI_SCALE_STEP,
    GUI_SCALE_STEP_PCT,
    PORT_MAX,
    TIMEOUT_MIN,
    WINDOW_BEST_FIT,
    Advantages,
    ConfigurationStore,
    DebugMode,
)
from ..models.messages import MessageTemplate
from ..models.options import OptionHandler, ParseResult
from .directories import check_user_directory, resolve_savegame_file
from .errors import EXIT_OK, ExitRequest
from .messages import MessageCatalog

log = structlog.stdlib.get_logger()

_INTEGER = re.compile(r"[+-]?\d+")

# Accepted --log-level names, including the legacy level names.
LOG_LEVELS: dict[str, str] = {
    "ALL": "DEBUG",
    "FINEST": "DEBUG",
    "FINER": "DEBUG",
    "FINE": "DEBUG",
    "DEBUG": "DEBUG",
    "CONFIG": "INFO",
    "INFO": "INFO",
    "WARN": "WARNING",
    "WARNING": "WARNING",
    "SEVERE": "ERROR",
    "ERROR": "ERROR",
    "CRITICAL": "CRITICAL",
    "OFF": "CRITICAL",
}


@dataclass(frozen=True)
class HandlerContext:
    """Read-only state the handlers may consult."""
    catalog: MessageCatalog
    parsed: ParseResult = field(default_factory=dict)


def parse_int(text: str | None) -> int | None:
    """Strict decimal integer parse; None for anything else."""
    if text is None or not _INTEGER.fullmatch(text):
        return None
    return int(text)


# Valid value listings, used in help and error messages

def valid_advantages(catalog: MessageCatalog) -> str:
    return ",".join(catalog.get_name(a.message_key) for a in Advantages)


def valid_difficulties(catalog: MessageCatalog) -> str:
    return ",".join(catalog.get_name(DIFFICULTY_PREFIX + d) for d in DIFFICULTIES)


def valid_gui_scales() -> str:
    return ",".join(
        str(pct) for pct in range(GUI_SCALE_MIN_PCT, GUI_SCALE_MAX_PCT + 1, GUI_SCALE_STEP_PCT)
    )


def valid_debug_modes() -> str:
    return ",".join(mode.value for mode in DebugMode)


# Coercion rules

def select_advantages(store: ConfigurationStore, catalog: MessageCatalog, arg: str | None) -> Advantages | None:
    """Set the advantages whose localized name is ``arg``."""
    for advantages in Advantages:
        if catalog.get_name(advantages.message_key) == arg:
            store.set_advantages(advantages)
            return advantages
    return None


def select_difficulty(store: ConfigurationStore, catalog: MessageCatalog, arg: str | None) -> str | None:
    """Set the difficulty whose localized name is ``arg``.

    Returns:
        The difficulty key, or None if no level has that name
    """
    for key in (DIFFICULTY_PREFIX + d for d in DIFFICULTIES):
        if catalog.get_name(key) == arg:
            store.set_difficulty(key)
            return key
    return None


def select_european_count(store: ConfigurationStore, arg: str | None) -> int:
    """Set the number of European nations.

    Returns:
        The accepted count, or -1 if ``arg`` is not an integer >= 1
    """
    n = parse_int(arg)
    if n is None or n < EUROPEANS_MIN:
        return -1
    store.set_european_count(n)
    return n


def set_gui_scale(store: ConfigurationStore, arg: str | None) -> bool:
    """Set the GUI scale from a percentage.

    A missing value selects the maximum scale. Out of range values are
    clamped and values off the 25% grid are truncated onto it; both are
    applied but reported as invalid.

    Returns:
        True if the argument was a valid scale
    """
    if arg is None:
        store.set_gui_scale(GUI_SCALE_MAX)
        return True
    n = parse_int(arg)
    if n is None:
        store.set_gui_scale(GUI_SCALE_MAX)
        return False
    valid = True
    if n < GUI_SCALE_MIN_PCT:
        valid = False
        n = GUI_SCALE_MIN_PCT
    elif n > GUI_SCALE_MAX_PCT:
        valid = False
        n = GUI_SCALE_MAX_PCT
    elif n % GUI_SCALE_STEP_PCT != 0:
        valid = False
    store.set_gui_scale((n // GUI_SCALE_STEP_PCT) * GUI_SCALE_STEP)
    return valid


def set_timeout(store: ConfigurationStore, arg: str | None) -> bool:
    n = parse_int(arg)
    return n is not None and store.set_timeout(n)


def set_server_port(store: ConfigurationStore, arg: str | None) -> bool:
    n = parse_int(arg)
    if n is None or not 0 <= n <= PORT_MAX:
        return False
    store.set_server_port(n)
    return True


def set_window_size(store: ConfigurationStore, arg: str | None) -> None:
    """Set the window size from ``WIDTHxHEIGHT``.

    Any separator other than a digit works. Anything unparsable selects a
    best-fit window; this never fails.
    """
    size = WINDOW_BEST_FIT
    if arg is not None:
        parts = re.split(r"[^0-9]", arg)
        while parts and not parts[-1]:
            parts.pop()
        if len(parts) == 2 and all(parts):
            size = (int(parts[0]), int(parts[1]))
    store.set_window_size(size)


def set_log_level(store: ConfigurationStore, arg: str | None) -> bool:
    level = LOG_LEVELS.get((arg or "").upper())
    if level is None:
        return False
    store.set_log_level(level)
    return True


def set_debug_modes(store: ConfigurationStore, arg: str) -> bool:
    """Enable a comma separated list of debug modes.

    Recognised modes are enabled even when others are not.
    """
    valid = True
    for name in arg.split(","):
        try:
            store.enable_debug_mode(DebugMode(name.strip().lower()))
        except ValueError:
            valid = False
    return valid


def configure_debug_run(store: ConfigurationStore, arg: str | None) -> None:
    """Configure an automated debug run from ``turns[,savegame]``."""
    arg = arg or ""
    turns_text, _, save = arg.partition(",")
    turns = parse_int(turns_text) if turns_text else None
    store.set_debug_run(turns if turns is not None else -1, save or None)


# Handlers

def handle_advantages(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    if select_advantages(store, ctx.catalog, value) is None:
        return MessageTemplate.template(
            "cli.error.advantages", advantages=valid_advantages(ctx.catalog), arg=value
        )
    return None


def handle_check_savegame(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    path = resolve_savegame_file(value or "")
    if path is None:
        return MessageTemplate.template("cli.error.save", string=value)
    store.set_savegame_file(path)
    store.set_check_integrity(True)
    store.set_standalone_server(True)
    return None


def handle_client_options(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    path = Path(value or "").expanduser()
    if not value or not path.is_file():
        return MessageTemplate.template("cli.error.clientOptions", string=value)
    store.set_client_options_file(path)
    return None


def handle_debug(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    valid = set_debug_modes(store, value or DebugMode.MENUS.value)
    # An explicit --log-level wins
    if "log-level" not in ctx.parsed:
        store.set_log_level("DEBUG")
    if not valid:
        return MessageTemplate.template("cli.error.debug", modes=valid_debug_modes())
    return None


def handle_debug_run(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.enable_debug_mode(DebugMode.MENUS)
    configure_debug_run(store, value)
    return None


def handle_debug_start(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_debug_start(True)
    store.enable_debug_mode(DebugMode.MENUS)
    return None


def handle_difficulty(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    if select_difficulty(store, ctx.catalog, value) is None:
        return MessageTemplate.template(
            "cli.error.difficulties", difficulties=valid_difficulties(ctx.catalog), arg=value
        )
    return None


def handle_europeans(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    if select_european_count(store, value) < 0:
        return MessageTemplate.template("cli.error.europeans", min=EUROPEANS_MIN)
    return None


def handle_fast(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_fast_start(True)
    store.set_intro_video(False)
    return None


def handle_font(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_font_name(value)
    return None


def handle_full_screen(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_full_screen()
    return None


def handle_gui_scale(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    if not set_gui_scale(store, value):
        return MessageTemplate.template("cli.error.gui-scale", scales=valid_gui_scales(), arg=value)
    return None


def handle_headless(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_headless(True)
    return None


def handle_load_savegame(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    path = resolve_savegame_file(value or "")
    if path is None:
        return MessageTemplate.template("cli.error.save", string=value)
    store.set_savegame_file(path)
    return None


def handle_log_console(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_console_logging(True)
    return None


def handle_log_file(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_log_file(Path(value or "").expanduser())
    return None


def handle_log_level(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    if not set_log_level(store, value):
        return MessageTemplate.template(
            "cli.error.logLevel", arg=value, levels=",".join(LOG_LEVELS)
        )
    return None


def handle_name(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_name(value)
    return None


def handle_no_intro(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_intro_video(False)
    return None


def handle_no_runtime_check(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_runtime_check(False)
    return None


def handle_no_memory_check(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_memory_check(False)
    return None


def handle_no_sound(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_sound(False)
    return None


def handle_no_splash(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.disable_splash()
    return None


def handle_private(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_public_server(False)
    return None


def handle_seed(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    seed = parse_int(value)
    if seed is None:
        return MessageTemplate.template("cli.error.seed", string=value)
    store.set_seed(seed)
    return None


def handle_server(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_standalone_server(True)
    return None


def handle_server_name(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    store.set_server_name(value)
    return None


def handle_server_port(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    if not set_server_port(store, value):
        return MessageTemplate.template("cli.error.serverPort", string=value)
    return None


def handle_splash(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    if value is None:
        return None
    path = Path(value).expanduser()
    try:
        with open(path, "rb"):
            pass
    except OSError as e:
        log.debug("Splash image unreadable", path=str(path), error=str(e))
        return MessageTemplate.template("cli.error.splash", name=value)
    store.set_splash(path)
    return None


def handle_tc(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    # An unknown ruleset is only detected when the specification is loaded
    store.set_tc(value)
    return None


def handle_timeout(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    if not set_timeout(store, value):
        return MessageTemplate.template("cli.error.timeout", string=value, minimum=TIMEOUT_MIN)
    return None


def _user_directory_handler(setter_name: str) -> OptionHandler:
    def handler(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
        path, error_key = check_user_directory(value or "")
        if path is None:
            return MessageTemplate.template(error_key or "cli.error.home.notExists", string=value)
        getattr(store, setter_name)(path)
        return None
    handler.__name__ = f"handle_{setter_name.removeprefix('set_')}"
    return handler


handle_user_cache_directory = _user_directory_handler("set_user_cache_directory")
handle_user_config_directory = _user_directory_handler("set_user_config_directory")
handle_user_data_directory = _user_directory_handler("set_user_data_directory")


def handle_version(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    raise ExitRequest(EXIT_OK, f"FreeCol {__version__}")


def handle_windowed(store: ConfigurationStore, value: str | None, ctx: HandlerContext) -> MessageTemplate | None:
    set_window_size(store, value)
    return None
