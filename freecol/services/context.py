"""State carried from one bootstrap phase to the next."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from ..models.config import ConfigurationStore, LaunchConfig
from ..models.messages import MessageTemplate
from .directories import UserDirectories
from .errors import ErrorReportingService
from .logging import LoggingService
from .messages import MessageCatalog
from .mods import ModInfo
from .system import SystemProbe


@dataclass
class LaunchContext:
    """Container for everything the bootstrap phases produce.

    Each phase fills in its own fields and reads only fields filled in by
    earlier phases. The accessors raise if a phase asks for state that has
    not been produced yet.
    """
    args: Sequence[str]
    reporter: ErrorReportingService
    probe: SystemProbe
    data_directory: Path | None = None
    locale_arg: str | None = None
    locale: str | None = None
    catalog: MessageCatalog | None = None
    store: ConfigurationStore = field(default_factory=ConfigurationStore)
    config: LaunchConfig | None = None
    directories: UserDirectories | None = None
    user_message: str | None = None
    mods: list[ModInfo] = field(default_factory=list)
    logging_service: LoggingService | None = None

    def require_data_directory(self) -> Path:
        if self.data_directory is None:
            raise RuntimeError("Data directory not resolved yet")
        return self.data_directory

    def require_catalog(self) -> MessageCatalog:
        if self.catalog is None:
            raise RuntimeError("Message catalog not loaded yet")
        return self.catalog

    def require_config(self) -> LaunchConfig:
        if self.config is None:
            raise RuntimeError("Configuration not resolved yet")
        return self.config

    def require_directories(self) -> UserDirectories:
        if self.directories is None:
            raise RuntimeError("User directories not established yet")
        return self.directories

    def localize(self, template: MessageTemplate | str) -> str:
        return self.require_catalog().message(template)
