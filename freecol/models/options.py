"""Command line option descriptors."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .config import ConfigurationStore
from .messages import MessageTemplate

if TYPE_CHECKING:
    from ..services.handlers import HandlerContext
    from ..services.messages import MessageCatalog


class Arity(Enum):
    """Whether an option takes a value."""
    NONE = "none"
    REQUIRED = "required"
    OPTIONAL = "optional"


class FailureTier(Enum):
    """What happens when an option handler rejects its value."""
    FATAL = "fatal"        # report and terminate with status 1
    ADVISORY = "advisory"  # report and keep the default
    NEVER = "never"        # the handler cannot fail


# Option name -> value. A missing key means the option was not given,
# None means it was given without a value.
ParseResult = Mapping[str, str | None]

# (store, value, context) -> rejection message or None
OptionHandler = Callable[[ConfigurationStore, str | None, "HandlerContext"], MessageTemplate | None]


@dataclass(frozen=True)
class OptionDescriptor:
    """One recognised long option."""
    name: str
    arity: Arity
    help_key: str
    arg_key: str | None = None
    handler: OptionHandler | None = None
    failure: FailureTier = FailureTier.NEVER
    aliases: tuple[str, ...] = field(default_factory=tuple)
    # Values substituted into the help template, computed from the catalog
    help_names: Callable[["MessageCatalog"], dict[str, str]] | None = None

    @property
    def flags(self) -> tuple[str, ...]:
        return (f"--{self.name}",) + tuple(f"--{alias}" for alias in self.aliases)

    @property
    def dest(self) -> str:
        return self.name
