"""Error tiers for the launcher.

This module provides:
- Exception classes for the three terminating outcomes (fatal configuration
  errors, command line usage errors, and requested early exits)
- An error reporting service for advisory problems that are printed and
  recorded but never stop start-up

Only `freecol.main` turns these exceptions into a process exit status.
"""

import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""
    USAGE = "usage"
    CONFIGURATION = "configuration"
    FILE_SYSTEM = "file_system"
    SYSTEM = "system"
    SPECIFICATION = "specification"
    SAVEGAME = "savegame"
    NETWORK = "network"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INTEGRITY_FAILURE = 2
EXIT_INTERRUPTED = 130


class AppError(Exception):
    """Base exception class for launcher errors."""

    exit_status: int = EXIT_FATAL

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        technical_details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.technical_details = technical_details


class FatalError(AppError):
    """Unrecoverable misconfiguration. Terminates with status 1."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.CONFIGURATION,
        technical_details: str | None = None,
    ) -> None:
        if not message:
            message = "Bogus null fatal error message"
        super().__init__(
            message=message,
            category=category,
            severity=ErrorSeverity.CRITICAL,
            technical_details=technical_details,
        )


class UsageError(AppError):
    """Command line syntax error. Reported with the full usage text."""

    def __init__(self, message: str, usage: str = "") -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.USAGE,
            severity=ErrorSeverity.ERROR,
        )
        self.usage = usage

    def render(self) -> str:
        return f"\n{self.message}\n\n{self.usage}".rstrip() + "\n"


class ExitRequest(AppError):
    """Start-up finished early on purpose (help, version, integrity check)."""

    def __init__(self, status: int, output: str = "", to_stderr: bool = False) -> None:
        super().__init__(
            message=output,
            category=ErrorCategory.USAGE,
            severity=ErrorSeverity.WARNING,
        )
        self.exit_status = status
        self.output = output
        self.to_stderr = to_stderr


@dataclass(frozen=True)
class Advisory:
    """A reported problem that did not stop start-up."""
    message: str
    category: ErrorCategory
    timestamp: float


class ErrorReportingService:
    """Prints, logs and records problems found during start-up.

    Advisory problems ("gripes") go to the error stream and the log and are
    kept in a bounded history. Fatal problems are returned as `FatalError`
    for the caller to raise.
    """

    def __init__(self, stream: TextIO | None = None, max_history_size: int = 100) -> None:
        self._stream = stream
        self._advisories: list[Advisory] = []
        self._max_history_size = max_history_size

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def gripe(self, message: str, category: ErrorCategory = ErrorCategory.CONFIGURATION) -> Advisory:
        """Report an advisory problem and carry on."""
        advisory = Advisory(message=message, category=category, timestamp=time.time())
        print(message, file=self.stream)
        log.warning("Advisory", message=message, category=category.value)
        self._advisories.append(advisory)
        if len(self._advisories) > self._max_history_size:
            self._advisories.pop(0)
        return advisory

    def fatal(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.CONFIGURATION,
        technical_details: str | None = None,
    ) -> FatalError:
        """Build a fatal error for the caller to raise."""
        log.error(
            "Fatal error",
            message=message,
            category=category.value,
            technical_details=technical_details,
        )
        return FatalError(message, category=category, technical_details=technical_details)

    @property
    def advisories(self) -> list[Advisory]:
        return list(self._advisories)

    def get_count_by_category(self) -> dict[ErrorCategory, int]:
        counts: dict[ErrorCategory, int] = {}
        for advisory in self._advisories:
            counts[advisory.category] = counts.get(advisory.category, 0) + 1
        return counts
