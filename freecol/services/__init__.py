"""Service layer: option handling, start-up phases and run modes."""

from .bootstrap import BootstrapSequencer, Phase
from .context import LaunchContext
from .dispatcher import ModeDispatcher
from .errors import (
    AppError,
    ErrorCategory,
    ErrorReportingService,
    ErrorSeverity,
    ExitRequest,
    FatalError,
    UsageError,
)
from .logging import LoggingService, setup_logging
from .messages import MessageCatalog
from .options import OPTION_TABLE, CommandLineOptions
from .scanner import find_arg
from .server import GameServer, MetaServerClient
from .specification import SpecificationResolver

__all__ = [
    "AppError",
    "BootstrapSequencer",
    "CommandLineOptions",
    "ErrorCategory",
    "ErrorReportingService",
    "ErrorSeverity",
    "ExitRequest",
    "FatalError",
    "GameServer",
    "LaunchContext",
    "LoggingService",
    "MessageCatalog",
    "MetaServerClient",
    "ModeDispatcher",
    "OPTION_TABLE",
    "Phase",
    "SpecificationResolver",
    "UsageError",
    "find_arg",
    "setup_logging",
]
