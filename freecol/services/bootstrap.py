"""Ordered start-up of the launcher.

The bootstrap runs a fixed list of phases, each exactly once and in order.
A phase reads only what earlier phases stored on the `LaunchContext`, so the
message catalog exists before any localized error is produced, and logging
is configured from the resolved options before anything is loaded that
depends on the user's directories.
"""

import platform
from collections.abc import Callable, Sequence
from enum import IntEnum
from typing import TextIO

import structlog

from .. import __version__
from ..models.messages import MessageTemplate
from .client_options import read_language_option
from .context import LaunchContext
from .directories import (
    DataDirectoryError,
    UserDirectoryError,
    establish_user_directories,
    resolve_data_directory,
)
from .dispatcher import ModeDispatcher
from .errors import EXIT_OK, ErrorCategory, ErrorReportingService
from .logging import setup_logging
from .messages import AUTOMATIC, MessageCatalog, normalize_locale, platform_locale, strip_encoding
from .mods import MODS_DIRECTORY, ModLoader, load_mod_messages
from .options import CommandLineOptions
from .scanner import find_arg
from .system import SystemProbe, check_system

log = structlog.stdlib.get_logger()

DATA_OPTION = "--freecol-data"
LOCALE_OPTION = "--default-locale"


class Phase(IntEnum):
    """Bootstrap phases, in the order they run."""
    DATA_DIR = 1
    LOCALE = 2
    CATALOG = 3
    FULL_PARSE = 4
    SYSTEM_CHECKS = 5
    USER_DIRS = 6
    LOGGING_INIT = 7
    LOCALE_RECONCILE = 8
    MODS_LOAD = 9
    DISPATCH = 10


class BootstrapSequencer:
    """Runs the start-up phases against one argument list.

    Args:
        args: Command line arguments, without the program name
        reporter: Sink for advisory problems
        dispatcher: Starts the selected run mode
        probe: Host facts for the system checks
        stream: Where advisories are printed, defaults to stderr
    """

    def __init__(
        self,
        args: Sequence[str],
        reporter: ErrorReportingService | None = None,
        dispatcher: ModeDispatcher | None = None,
        probe: SystemProbe | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.context = LaunchContext(
            args=list(args),
            reporter=reporter or ErrorReportingService(stream=stream),
            probe=probe or SystemProbe.detect(),
        )
        self.dispatcher = dispatcher or ModeDispatcher()
        self.completed: list[Phase] = []
        self.status = EXIT_OK
        self._steps: dict[Phase, Callable[[], None]] = {
            Phase.DATA_DIR: self.resolve_data_directory,
            Phase.LOCALE: self.select_locale,
            Phase.CATALOG: self.load_catalog,
            Phase.FULL_PARSE: self.parse_options,
            Phase.SYSTEM_CHECKS: self.check_system,
            Phase.USER_DIRS: self.establish_user_directories,
            Phase.LOGGING_INIT: self.start_logging,
            Phase.LOCALE_RECONCILE: self.reconcile_locale,
            Phase.MODS_LOAD: self.load_mods,
            Phase.DISPATCH: self.dispatch,
        }

    def run(self) -> int:
        """Run every phase in order.

        Returns:
            Exit status of the started run mode

        Raises:
            FatalError: On an unrecoverable configuration problem
            UsageError: On a malformed command line
            ExitRequest: When start-up finishes early on purpose
        """
        for phase in Phase:
            log.debug("Bootstrap phase", phase=phase.name)
            self._steps[phase]()
            self.completed.append(phase)
        return self.status

    # Phase 1
    def resolve_data_directory(self) -> None:
        try:
            self.context.data_directory = resolve_data_directory(
                find_arg(DATA_OPTION, self.context.args)
            )
        except DataDirectoryError as e:
            # No catalog yet, so this message stays unlocalized
            raise self.context.reporter.fatal(str(e), ErrorCategory.FILE_SYSTEM) from e

    # Phase 2
    def select_locale(self) -> None:
        locale_arg = find_arg(LOCALE_OPTION, self.context.args)
        if locale_arg is not None:
            locale_arg = strip_encoding(locale_arg)
            self.context.locale_arg = locale_arg
            self.context.locale = normalize_locale(locale_arg)
        else:
            self.context.locale = platform_locale()
        log.debug("Locale selected", locale=self.context.locale, explicit=locale_arg is not None)

    # Phase 3
    def load_catalog(self) -> None:
        data_directory = self.context.require_data_directory()
        try:
            self.context.catalog = MessageCatalog.load(data_directory, self.context.locale or "")
        except (OSError, ValueError) as e:
            raise self.context.reporter.fatal(
                f"Unable to load messages from {data_directory}: {e}",
                ErrorCategory.FILE_SYSTEM,
            ) from e

    # Phase 4
    def parse_options(self) -> None:
        options = CommandLineOptions(self.context.require_catalog())
        options.handle_args(self.context.args, self.context.store, self.context.reporter)
        self.context.config = self.context.store.resolve(self.context.data_directory)

    # Phase 5
    def check_system(self) -> None:
        problem = check_system(self.context.require_config(), self.context.probe)
        if problem is not None:
            raise self.context.reporter.fatal(self.context.localize(problem), ErrorCategory.SYSTEM)

    # Phase 6
    def establish_user_directories(self) -> None:
        try:
            directories, message = establish_user_directories(self.context.require_config())
        except UserDirectoryError as e:
            raise self.context.reporter.fatal(
                self.context.localize(e.template), ErrorCategory.FILE_SYSTEM
            ) from e
        self.context.directories = directories
        if message is not None:
            self.context.user_message = self.context.localize(message)

    # Phase 7
    def start_logging(self) -> None:
        config = self.context.require_config()
        log_file = self.context.require_directories().log_file
        try:
            service = setup_logging(
                log_level=config.log_level,
                log_file=log_file,
                console=config.console_logging,
            )
        except OSError as e:
            # Carry on without the log file
            service = setup_logging(log_level=config.log_level, log_file=None, console=config.console_logging)
            self.context.reporter.gripe(
                self.context.localize(
                    MessageTemplate.template("main.logging.fail", string=log_file, error=e.strerror or e)
                ),
                ErrorCategory.FILE_SYSTEM,
            )
        service.install_exception_hooks()
        self.context.logging_service = service
        log.info("Logging started", version=__version__, level=config.log_level)

    # Phase 8
    def reconcile_locale(self) -> None:
        if self.context.locale_arg is not None:
            return
        language = read_language_option(self.context.require_directories().client_options_file)
        if language is None or language == AUTOMATIC:
            return
        locale = normalize_locale(language)
        if locale == self.context.locale:
            return
        try:
            catalog = MessageCatalog.load(self.context.require_data_directory(), locale)
        except (OSError, ValueError) as e:
            log.warning("Keeping current locale", requested=locale, error=str(e))
            return
        log.info("Locale changed by client options", previous=self.context.locale, locale=locale)
        self.context.locale = locale
        self.context.catalog = catalog

    # Phase 9
    def load_mods(self) -> None:
        directories = self.context.require_directories()
        mods = ModLoader().discover(
            self.context.require_data_directory() / MODS_DIRECTORY,
            directories.mods,
        )
        load_mod_messages(self.context.require_catalog(), mods)
        self.context.mods = mods

    # Phase 10
    def dispatch(self) -> None:
        if self.context.user_message:
            log.warning("User message", message=self.context.user_message)
        log.info("Configuration", **configuration_report(self.context))
        self.status = self.dispatcher.dispatch(self.context)


def configuration_report(context: LaunchContext) -> dict[str, str]:
    """Environment summary written to the log before the game starts."""
    directories = context.require_directories()

    def show(value: object | None) -> str:
        return "NONE" if value is None else str(value)

    return {
        "version": __version__,
        "runtime": f"{platform.python_implementation()} {context.probe.runtime_version_text}",
        "memory": show(context.probe.memory_bytes),
        "locale": show(context.locale),
        "data": show(context.data_directory),
        "user_config": show(directories.config),
        "user_data": show(directories.data),
        "autosave": show(directories.autosave),
        "log_file": show(directories.log_file),
        "options": show(directories.client_options_file),
        "save": show(directories.save),
        "user_mods": show(directories.mods),
        "mods": ",".join(mod.id for mod in context.mods) or "NONE",
    }
