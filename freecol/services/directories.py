"""Directory discovery and validation for the launcher."""

import os
from dataclasses import dataclass
from pathlib import Path

import structlog

from ..models.config import LaunchConfig
from ..models.messages import MessageTemplate

log = structlog.stdlib.get_logger()

APP_DIRECTORY_NAME = "freecol"
BUNDLED_DATA_DIRECTORY = Path(__file__).resolve().parent.parent / "data"
REQUIRED_DATA_ENTRIES = ("strings", "rules")
SAVE_EXTENSION = "fsg"
CLIENT_OPTIONS_FILE = "options.json"
LOG_FILE = "FreeCol.log"


class DataDirectoryError(Exception):
    """The data directory is missing or incomplete.

    Raised before the message catalog exists, so the message is plain text.
    """


class UserDirectoryError(Exception):
    """A user directory could not be created or written."""

    def __init__(self, template: MessageTemplate) -> None:
        super().__init__(template.key)
        self.template = template


@dataclass(frozen=True)
class UserDirectories:
    """Per-user directories established during start-up."""
    cache: Path | None
    config: Path | None
    data: Path
    save: Path
    autosave: Path
    mods: Path
    log_file: Path
    client_options_file: Path | None


def resolve_data_directory(arg: str | None) -> Path:
    """Locate the game data directory.

    Args:
        arg: The ``--freecol-data`` value, or None for the bundled data

    Raises:
        DataDirectoryError: If the directory lacks the required entries
    """
    path = Path(arg).expanduser() if arg else BUNDLED_DATA_DIRECTORY
    if not path.is_dir():
        raise DataDirectoryError(f"Data directory not found: {path}")
    missing = [name for name in REQUIRED_DATA_ENTRIES if not (path / name).is_dir()]
    if missing:
        raise DataDirectoryError(
            f"Data directory {path} is missing: {', '.join(missing)}"
        )
    log.debug("Data directory resolved", path=str(path))
    return path


def ensure_directory(path: Path) -> None:
    """Ensure that a directory exists, creating it if necessary.

    Raises:
        OSError: If the path is not a directory or cannot be created
    """
    try:
        if path.exists():
            if not path.is_dir():
                log.error("Path exists but is not a directory", path=str(path))
                raise NotADirectoryError(f"Path exists but is not a directory: {path}")
            return
        log.debug("Creating directory", path=str(path))
        path.mkdir(parents=True, exist_ok=True)
        log.info("Directory created successfully", path=str(path))
    except OSError as e:
        log.error("Failed to create directory", path=str(path), error=str(e))
        raise


def check_user_directory(arg: str) -> tuple[Path | None, str | None]:
    """Validate a user directory given on the command line.

    Returns:
        The usable path and None, or None and an error message key
    """
    path = Path(arg).expanduser()
    try:
        ensure_directory(path)
    except NotADirectoryError:
        return None, "cli.error.home.notDir"
    except OSError:
        return None, "cli.error.home.notExists"
    if not os.access(path, os.W_OK | os.X_OK):
        return None, "cli.error.home.notWritable"
    return path, None


def resolve_savegame_file(arg: str) -> Path | None:
    """Find a readable savegame for ``arg``, trying the save extension too."""
    candidates = [Path(arg).expanduser()]
    if candidates[0].suffix != f".{SAVE_EXTENSION}":
        candidates.append(candidates[0].with_name(f"{candidates[0].name}.{SAVE_EXTENSION}"))
    for candidate in candidates:
        if candidate.is_file() and os.access(candidate, os.R_OK):
            return candidate
    return None


def _xdg_base(variable: str, *fallback: str) -> Path:
    value = os.environ.get(variable)
    if value:
        return Path(value)
    return Path.home().joinpath(*fallback)


def default_user_config_directory() -> Path:
    return _xdg_base("XDG_CONFIG_HOME", ".config") / APP_DIRECTORY_NAME


def default_user_data_directory() -> Path:
    return _xdg_base("XDG_DATA_HOME", ".local", "share") / APP_DIRECTORY_NAME


def default_user_cache_directory() -> Path:
    return _xdg_base("XDG_CACHE_HOME", ".cache") / APP_DIRECTORY_NAME


def establish_user_directories(config: LaunchConfig) -> tuple[UserDirectories, MessageTemplate | None]:
    """Create the user directories, preferring command line overrides.

    Returns:
        The directories, plus a message for the user when an optional
        directory could not be set up

    Raises:
        UserDirectoryError: If the user data directory is unusable
    """
    data = config.user_data_directory or default_user_data_directory()
    save = data / "save"
    autosave = save / "autosave"
    mods = data / "mods"
    try:
        for path in (data, save, autosave, mods):
            ensure_directory(path)
    except OSError:
        raise UserDirectoryError(MessageTemplate.template("main.userDir.fail", string=data))
    if not os.access(data, os.W_OK):
        raise UserDirectoryError(MessageTemplate.template("cli.error.home.notWritable", string=data))

    failed: list[Path] = []
    optional: dict[str, Path | None] = {}
    for kind, path in (
        ("config", config.user_config_directory or default_user_config_directory()),
        ("cache", config.user_cache_directory or default_user_cache_directory()),
    ):
        try:
            ensure_directory(path)
            optional[kind] = path
        except OSError:
            failed.append(path)
            optional[kind] = None

    config_dir = optional["config"]
    client_options = config.client_options_file
    if client_options is None and config_dir is not None:
        client_options = config_dir / CLIENT_OPTIONS_FILE

    directories = UserDirectories(
        cache=optional["cache"],
        config=config_dir,
        data=data,
        save=save,
        autosave=autosave,
        mods=mods,
        log_file=config.log_file or data / LOG_FILE,
        client_options_file=client_options,
    )
    message = None
    if failed:
        message = MessageTemplate.template(
            "main.userDir.partial", string=", ".join(str(path) for path in failed)
        )
    log.debug("User directories established", data=str(data), config=str(config_dir))
    return directories, message


def find_last_savegame(directories: UserDirectories) -> Path | None:
    """Most recently modified savegame in the save or autosave directory."""
    candidates: list[Path] = []
    for directory in (directories.save, directories.autosave):
        if directory.is_dir():
            candidates.extend(p for p in directory.glob(f"*.{SAVE_EXTENSION}") if p.is_file())
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)
