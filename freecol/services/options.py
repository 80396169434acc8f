"""Command line option table and parser.

The option table is built once at import time. `CommandLineOptions` turns it
into an `argparse` parser whose help text comes from the message catalog,
parses an argument list into a `ParseResult`, and dispatches each option
that was given to its handler in table order.
"""

import argparse
from collections.abc import Sequence
from typing import NoReturn

import structlog

from ..models.config import ConfigurationStore
from ..models.options import Arity, FailureTier, OptionDescriptor, ParseResult
from . import handlers as h
from .errors import EXIT_OK, ErrorReportingService, ExitRequest, UsageError
from .messages import MessageCatalog

log = structlog.stdlib.get_logger()

PROG = "freecol"

_FATAL = FailureTier.FATAL
_ADVISORY = FailureTier.ADVISORY

OPTION_TABLE: tuple[OptionDescriptor, ...] = (
    OptionDescriptor("usage", Arity.NONE, "cli.help"),
    OptionDescriptor("help", Arity.NONE, "cli.help"),
    # Handled by the early scan, before the parser exists
    OptionDescriptor("freecol-data", Arity.REQUIRED, "cli.freecol-data", "cli.arg.directory"),
    OptionDescriptor("default-locale", Arity.REQUIRED, "cli.default-locale", "cli.arg.locale"),
    OptionDescriptor(
        "advantages", Arity.REQUIRED, "cli.advantages", "cli.arg.advantages",
        h.handle_advantages, _FATAL,
        help_names=lambda catalog: {"%advantages%": h.valid_advantages(catalog)},
    ),
    OptionDescriptor(
        "check-savegame", Arity.REQUIRED, "cli.check-savegame", "cli.arg.file",
        h.handle_check_savegame, _FATAL,
    ),
    OptionDescriptor(
        "clientOptions", Arity.REQUIRED, "cli.clientOptions", "cli.arg.clientOptions",
        h.handle_client_options, _ADVISORY,
    ),
    OptionDescriptor(
        "debug", Arity.OPTIONAL, "cli.debug", "cli.arg.debug",
        h.handle_debug, _ADVISORY,
        help_names=lambda catalog: {"%modes%": h.valid_debug_modes()},
    ),
    OptionDescriptor("debug-run", Arity.OPTIONAL, "cli.debug-run", "cli.arg.debugRun", h.handle_debug_run),
    OptionDescriptor("debug-start", Arity.NONE, "cli.debug-start", handler=h.handle_debug_start),
    OptionDescriptor(
        "difficulty", Arity.REQUIRED, "cli.difficulty", "cli.arg.difficulty",
        h.handle_difficulty, _FATAL,
        help_names=lambda catalog: {"%difficulties%": h.valid_difficulties(catalog)},
    ),
    OptionDescriptor(
        "europeans", Arity.REQUIRED, "cli.european-count", "cli.arg.europeans",
        h.handle_europeans, _ADVISORY,
    ),
    OptionDescriptor("fast", Arity.NONE, "cli.fast", handler=h.handle_fast),
    OptionDescriptor("font", Arity.REQUIRED, "cli.font", "cli.arg.font", h.handle_font),
    OptionDescriptor("full-screen", Arity.NONE, "cli.full-screen", handler=h.handle_full_screen),
    OptionDescriptor(
        "gui-scale", Arity.OPTIONAL, "cli.gui-scale", "cli.arg.gui-scale",
        h.handle_gui_scale, _ADVISORY,
        help_names=lambda catalog: {"%scales%": h.valid_gui_scales()},
    ),
    OptionDescriptor("headless", Arity.NONE, "cli.headless", handler=h.handle_headless),
    OptionDescriptor(
        "load-savegame", Arity.REQUIRED, "cli.load-savegame", "cli.arg.file",
        h.handle_load_savegame, _FATAL,
    ),
    OptionDescriptor("log-console", Arity.NONE, "cli.log-console", handler=h.handle_log_console),
    OptionDescriptor("log-file", Arity.REQUIRED, "cli.log-file", "cli.arg.name", h.handle_log_file),
    OptionDescriptor(
        "log-level", Arity.REQUIRED, "cli.log-level", "cli.arg.loglevel",
        h.handle_log_level, _FATAL,
    ),
    OptionDescriptor("name", Arity.REQUIRED, "cli.name", "cli.arg.name", h.handle_name),
    OptionDescriptor("no-intro", Arity.NONE, "cli.no-intro", handler=h.handle_no_intro),
    OptionDescriptor(
        "no-runtime-check", Arity.NONE, "cli.no-runtime-check",
        handler=h.handle_no_runtime_check, aliases=("no-java-check",),
    ),
    OptionDescriptor("no-memory-check", Arity.NONE, "cli.no-memory-check", handler=h.handle_no_memory_check),
    OptionDescriptor("no-sound", Arity.NONE, "cli.no-sound", handler=h.handle_no_sound),
    OptionDescriptor("no-splash", Arity.NONE, "cli.no-splash", handler=h.handle_no_splash),
    OptionDescriptor("private", Arity.NONE, "cli.private", handler=h.handle_private),
    OptionDescriptor("seed", Arity.REQUIRED, "cli.seed", "cli.arg.seed", h.handle_seed, _ADVISORY),
    OptionDescriptor("server", Arity.NONE, "cli.server", handler=h.handle_server),
    OptionDescriptor("server-name", Arity.REQUIRED, "cli.server-name", "cli.arg.name", h.handle_server_name),
    OptionDescriptor(
        "server-port", Arity.REQUIRED, "cli.server-port", "cli.arg.port",
        h.handle_server_port, _FATAL,
    ),
    OptionDescriptor("splash", Arity.OPTIONAL, "cli.splash", "cli.arg.file", h.handle_splash, _ADVISORY),
    OptionDescriptor("tc", Arity.REQUIRED, "cli.tc", "cli.arg.name", h.handle_tc),
    OptionDescriptor(
        "timeout", Arity.REQUIRED, "cli.timeout", "cli.arg.timeout",
        h.handle_timeout, _ADVISORY,
    ),
    OptionDescriptor(
        "user-cache-directory", Arity.REQUIRED, "cli.user-cache-directory", "cli.arg.directory",
        h.handle_user_cache_directory, _ADVISORY,
    ),
    OptionDescriptor(
        "user-config-directory", Arity.REQUIRED, "cli.user-config-directory", "cli.arg.directory",
        h.handle_user_config_directory, _ADVISORY,
    ),
    # No save capability without it
    OptionDescriptor(
        "user-data-directory", Arity.REQUIRED, "cli.user-data-directory", "cli.arg.directory",
        h.handle_user_data_directory, _FATAL,
    ),
    OptionDescriptor("version", Arity.NONE, "cli.version", handler=h.handle_version),
    OptionDescriptor("windowed", Arity.OPTIONAL, "cli.windowed", "cli.arg.dimensions", h.handle_windowed),
)


def _check_table(table: Sequence[OptionDescriptor]) -> None:
    seen: set[str] = set()
    for descriptor in table:
        for name in (descriptor.name, *descriptor.aliases):
            if name in seen:
                raise ValueError(f"Duplicate option name: {name}")
            seen.add(name)


_check_table(OPTION_TABLE)


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that raises instead of exiting on syntax errors."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message, usage=self.format_help())


def _escape(text: str) -> str:
    # argparse applies %-formatting to help strings, never to metavars
    return text.replace("%", "%%")


class CommandLineOptions:
    """Parser and handler dispatch for the option table."""

    def __init__(
        self,
        catalog: MessageCatalog,
        table: Sequence[OptionDescriptor] = OPTION_TABLE,
    ) -> None:
        self.catalog = catalog
        self.table = tuple(table)
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = _ArgumentParser(
            prog=PROG,
            usage="%(prog)s [OPTIONS]",
            add_help=False,
            allow_abbrev=False,
        )
        for descriptor in self.table:
            help_text = self.catalog.message(descriptor.help_key)
            if descriptor.help_names is not None:
                for placeholder, value in descriptor.help_names(self.catalog).items():
                    help_text = help_text.replace(placeholder, value)
            kwargs: dict[str, object] = {
                "dest": descriptor.dest,
                "default": argparse.SUPPRESS,
                "help": _escape(help_text),
            }
            if descriptor.arity is Arity.NONE:
                kwargs.update(action="store_const", const=None)
            else:
                if descriptor.arg_key is not None:
                    kwargs["metavar"] = self.catalog.message(descriptor.arg_key)
                if descriptor.arity is Arity.OPTIONAL:
                    kwargs.update(nargs="?", const=None)
            parser.add_argument(*descriptor.flags, **kwargs)
        return parser

    def format_usage(self) -> str:
        return self.parser.format_help()

    def parse(self, args: Sequence[str]) -> ParseResult:
        """Parse ``args`` into option name -> value.

        Raises:
            UsageError: On an unknown option or a missing required value
            ExitRequest: When help was asked for
        """
        namespace = self.parser.parse_args(list(args))
        parsed: dict[str, str | None] = dict(vars(namespace))
        if "help" in parsed or "usage" in parsed:
            raise ExitRequest(EXIT_OK, self.format_usage())
        log.debug("Command line parsed", options=sorted(parsed))
        return parsed

    def apply(
        self,
        parsed: ParseResult,
        store: ConfigurationStore,
        reporter: ErrorReportingService,
    ) -> None:
        """Run the handler of every given option, in table order.

        Raises:
            FatalError: When an option with a fatal failure tier is refused
            ExitRequest: When an option finishes start-up (``--version``)
        """
        context = h.HandlerContext(catalog=self.catalog, parsed=parsed)
        for descriptor in self.table:
            if descriptor.name not in parsed or descriptor.handler is None:
                continue
            rejection = descriptor.handler(store, parsed[descriptor.name], context)
            if rejection is None:
                continue
            message = self.catalog.message(rejection)
            if descriptor.failure is FailureTier.FATAL:
                raise reporter.fatal(message)
            if descriptor.failure is FailureTier.ADVISORY:
                reporter.gripe(message)
            else:
                log.warning("Handler refused a value it cannot refuse", option=descriptor.name)

    def handle_args(
        self,
        args: Sequence[str],
        store: ConfigurationStore,
        reporter: ErrorReportingService,
    ) -> ParseResult:
        parsed = self.parse(args)
        self.apply(parsed, store, reporter)
        return parsed
