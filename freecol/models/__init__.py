"""Data models for the FreeCol launcher."""

from .config import Advantages, ConfigurationStore, DebugMode, LaunchConfig
from .launch import ClientLaunch
from .messages import MessageTemplate
from .options import Arity, FailureTier, OptionDescriptor, ParseResult
from .specification import IntegrityReport, Savegame, Specification

__all__ = [
    "Advantages",
    "Arity",
    "ClientLaunch",
    "ConfigurationStore",
    "DebugMode",
    "FailureTier",
    "IntegrityReport",
    "LaunchConfig",
    "MessageTemplate",
    "OptionDescriptor",
    "ParseResult",
    "Savegame",
    "Specification",
]
