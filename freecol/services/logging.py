"""Logging configuration service for the FreeCol launcher."""

import logging
import logging.handlers
import sys
import threading
import types
from pathlib import Path
from typing import Any

import structlog

LOGGER_NAME = "freecol"


class LoggingService:
    """Service for configuring and managing application logging."""

    def __init__(
        self,
        log_level: str = "INFO",
        log_file: Path | None = None,
        console: bool = True,
    ) -> None:
        """Initialize the logging service.

        Args:
            log_level: The minimum log level to capture
            log_file: Log file path (None for console only)
            console: If True, also log to the error stream
        """
        self.log_level = log_level.upper()
        self.log_file = log_file
        self.console = console
        self._previous_hooks: tuple[Any, Any] | None = None

    def configure(self) -> None:
        """Replace the root handlers and configure structlog."""
        self._configure_stdlib_logging()

        structlog.configure(
            processors=self._get_processors(),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )

    def _configure_stdlib_logging(self) -> None:
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        numeric_level = getattr(logging, self.log_level, logging.INFO)
        root_logger.setLevel(numeric_level)
        logging.getLogger(LOGGER_NAME).setLevel(numeric_level)

        if self.console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(numeric_level)
            console_handler.setFormatter(logging.Formatter("%(message)s"))
            root_logger.addHandler(console_handler)

        if self.log_file:
            self._setup_file_logging(root_logger, numeric_level)
        elif not self.console:
            # Keeps the last-resort handler from echoing to stderr
            root_logger.addHandler(logging.NullHandler())

    def _setup_file_logging(self, root_logger: logging.Logger, level: int) -> None:
        """Set up file-based logging with rotation."""
        if not self.log_file:
            return
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=self.log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)

    def _get_processors(self) -> list[Any]:
        common_processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
        if self.log_file:
            # Files get one JSON object per line
            return common_processors + [structlog.processors.JSONRenderer()]
        return common_processors + [structlog.dev.ConsoleRenderer(colors=False)]

    def install_exception_hooks(self) -> None:
        """Log uncaught exceptions instead of letting them kill the process."""
        logger = structlog.stdlib.get_logger(LOGGER_NAME)
        self._previous_hooks = (sys.excepthook, threading.excepthook)

        def excepthook(
            exc_type: type[BaseException],
            exc: BaseException,
            tb: types.TracebackType | None,
        ) -> None:
            if issubclass(exc_type, KeyboardInterrupt):
                sys.__excepthook__(exc_type, exc, tb)
                return
            logger.warning("Uncaught exception", exc_info=(exc_type, exc, tb))

        def thread_excepthook(args: threading.ExceptHookArgs) -> None:
            if args.exc_type is SystemExit:
                return
            exc_info = (args.exc_type, args.exc_value, args.exc_traceback)
            logger.warning("Uncaught exception from thread", thread=str(args.thread), exc_info=exc_info)

        sys.excepthook = excepthook
        threading.excepthook = thread_excepthook

    def restore_exception_hooks(self) -> None:
        if self._previous_hooks is not None:
            sys.excepthook, threading.excepthook = self._previous_hooks
            self._previous_hooks = None

    def get_logger(self, name: str | None = None) -> structlog.stdlib.BoundLogger:
        return structlog.stdlib.get_logger(name)


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    console: bool = True,
) -> LoggingService:
    """Set up application logging with the specified configuration.

    Args:
        log_level: Minimum log level to capture
        log_file: Log file path (None for console only)
        console: Whether to log to the error stream as well

    Returns:
        Configured LoggingService instance
    """
    service = LoggingService(log_level=log_level, log_file=log_file, console=console)
    service.configure()
    return service
