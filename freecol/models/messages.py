"""Message template model."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MessageTemplate:
    """A message key plus the values for its ``%name%`` placeholders."""
    key: str
    names: dict[str, str] = field(default_factory=dict)

    @classmethod
    def template(cls, key: str, **names: object) -> "MessageTemplate":
        return cls(key, {f"%{name}%": str(value) for name, value in names.items()})
