"""Routes a resolved launch into server or client mode."""

import asyncio
import signal
from collections.abc import Callable
from pathlib import Path

import structlog

from ..models.launch import ClientLaunch
from ..models.messages import MessageTemplate
from ..models.specification import Savegame, Specification
from .context import LaunchContext
from .directories import find_last_savegame
from .errors import (
    EXIT_INTEGRITY_FAILURE,
    EXIT_OK,
    ErrorCategory,
    ExitRequest,
)
from .server import GameServer, load_savegame
from .specification import SpecificationResolver

log = structlog.stdlib.get_logger()

ClientStarter = Callable[[ClientLaunch], int]
ServerFactory = Callable[..., GameServer]


def _default_client_starter(launch: ClientLaunch) -> int:
    # Textual is only imported when a client actually starts
    from ..ui.app import start_client

    return start_client(launch)


class ModeDispatcher:
    """Starts exactly one of the two run modes.

    Args:
        start_client: Client entry point, defaults to the Textual client
        server_factory: Builds the game server, defaults to `GameServer`
    """

    def __init__(
        self,
        start_client: ClientStarter | None = None,
        server_factory: ServerFactory | None = None,
    ) -> None:
        self.start_client = start_client or _default_client_starter
        self.server_factory = server_factory or GameServer
        self.server: GameServer | None = None

    def dispatch(self, context: LaunchContext) -> int:
        """Run the selected mode.

        Returns:
            Process exit status

        Raises:
            FatalError: If the selected mode cannot start
            ExitRequest: When an integrity check finishes
        """
        config = context.require_config()
        if config.standalone_server:
            return self.run_server(context)
        return self.run_client(context)

    def tc_specification(self, context: LaunchContext) -> Specification:
        """Load the configured ruleset or fail."""
        config = context.require_config()
        resolver = SpecificationResolver(context.require_data_directory())
        spec = resolver.load_specification(config.tc, config.advantages, config.difficulty)
        if spec is None:
            raise context.reporter.fatal(
                context.localize(MessageTemplate.template("cli.error.badTC", tc=config.tc)),
                ErrorCategory.SPECIFICATION,
            )
        return spec

    # Server mode

    def run_server(self, context: LaunchContext) -> int:
        config = context.require_config()
        reporter = context.reporter
        log.info("Starting stand-alone server", port=config.server_port, name=config.server_name)

        if config.savegame_file is not None:
            server = self._savegame_server(context, config.savegame_file)
        else:
            spec = self.tc_specification(context)
            try:
                server = self.server_factory(
                    port=config.server_port,
                    name=config.server_name,
                    specification=spec,
                    public=config.public_server,
                )
            except (OSError, ValueError) as e:
                raise reporter.fatal(
                    f"{context.localize('server.initialize')}: {e}",
                    ErrorCategory.NETWORK,
                    technical_details=repr(e),
                ) from e
        self.server = server
        return asyncio.run(self._serve(context, server))

    def _savegame_server(self, context: LaunchContext, path: Path) -> GameServer:
        config = context.require_config()
        reporter = context.reporter
        try:
            savegame: Savegame = load_savegame(path)
            server = self.server_factory(
                port=config.server_port,
                name=config.server_name,
                savegame=savegame,
                public=config.public_server,
            )
        except (OSError, ValueError) as e:
            if config.check_integrity:
                reporter.gripe(context.localize("cli.check-savegame.failure"), ErrorCategory.SAVEGAME)
            message = context.localize(MessageTemplate.template("error.couldNotLoad", name=path))
            raise reporter.fatal(
                f"{message}: {e}", ErrorCategory.SAVEGAME, technical_details=repr(e)
            ) from e

        if config.check_integrity:
            report = server.check_integrity()
            for problem in report.problems:
                log.warning("Integrity problem", savegame=str(path), problem=problem)
            reporter.gripe(
                context.localize(
                    "cli.check-savegame.success" if report.ok else "cli.check-savegame.failure"
                ),
                ErrorCategory.SAVEGAME,
            )
            raise ExitRequest(EXIT_OK if report.ok else EXIT_INTEGRITY_FAILURE)
        return server

    async def _serve(self, context: LaunchContext, server: GameServer) -> int:
        config = context.require_config()
        try:
            await server.start()
        except (OSError, OverflowError) as e:
            raise context.reporter.fatal(
                f"{context.localize('server.initialize')}: {e}",
                ErrorCategory.NETWORK,
                technical_details=repr(e),
            ) from e
        if config.public_server and server.savegame is None and not server.registered:
            context.reporter.gripe(context.localize("server.noRouteToServer"), ErrorCategory.NETWORK)
        install_shutdown_hook(server)
        await server.serve_until_shutdown()
        return EXIT_OK

    # Client mode

    def run_client(self, context: LaunchContext) -> int:
        config = context.require_config()
        savegame = config.savegame_file
        spec: Specification | None = None
        if config.debug_start:
            spec = self.tc_specification(context)
        elif config.fast_start and savegame is None:
            # Continue the last saved game if there is one
            savegame = find_last_savegame(context.require_directories())
            if savegame is None:
                spec = self.tc_specification(context)

        launch = ClientLaunch(
            name=config.name,
            window_size=config.window_size,
            user_message=context.user_message,
            sound=config.sound,
            intro_video=config.intro_video,
            savegame=savegame,
            specification=spec,
            splash=config.splash,
            font_name=config.font_name,
            gui_scale=config.gui_scale,
            headless=config.headless,
        )
        log.info("Starting client", action=launch.start_action, headless=launch.headless)
        return self.start_client(launch)


def install_shutdown_hook(server: GameServer) -> None:
    """Stop ``server`` on SIGINT or SIGTERM.

    Must be called from the running event loop, after the server exists.
    """
    loop = asyncio.get_running_loop()

    def request_shutdown(signum: int) -> None:
        log.info("Received signal", signal=signal.Signals(signum).name)
        server.shutdown()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, request_shutdown, signum)
        except (NotImplementedError, RuntimeError):
            # No loop signal support on this platform
            signal.signal(signum, lambda sig, frame: request_shutdown(sig))
    log.debug("Shutdown hook installed")
