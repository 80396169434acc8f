"""Main entry point for the FreeCol launcher.

This module provides the application entry point with:
- Bootstrap logging, active until the configured logging takes over
- The bootstrap sequence and run-mode dispatch
- The single place where errors become a process exit status
"""

import sys
from collections.abc import Sequence

import structlog

from freecol import __version__
from freecol.services.bootstrap import BootstrapSequencer
from freecol.services.errors import (
    EXIT_FATAL,
    EXIT_INTERRUPTED,
    ExitRequest,
    FatalError,
    UsageError,
)
from freecol.services.logging import setup_logging


log = structlog.stdlib.get_logger()

BOOTSTRAP_LOG_LEVEL = "WARNING"


def run(argv: Sequence[str] | None = None, sequencer: BootstrapSequencer | None = None) -> int:
    """Run the launcher.

    Args:
        argv: Command line arguments without the program name
            (defaults to ``sys.argv[1:]``)
        sequencer: Preconfigured sequencer, used instead of building one
            from ``argv``

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if sequencer is None:
        args = list(sys.argv[1:] if argv is None else argv)
        sequencer = BootstrapSequencer(args)

    try:
        exit_code = sequencer.run()

    except ExitRequest as e:
        if e.output:
            print(e.output, file=sys.stderr if e.to_stderr else sys.stdout)
        exit_code = e.exit_status

    except UsageError as e:
        sys.stderr.write(e.render())
        exit_code = e.exit_status

    except FatalError as e:
        print(e.message, file=sys.stderr)
        exit_code = e.exit_status

    except KeyboardInterrupt:
        log.info("Launcher interrupted by user")
        exit_code = EXIT_INTERRUPTED

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        exit_code = EXIT_FATAL

    log.info("Launcher exiting", exit_code=exit_code)
    return exit_code


def main() -> None:
    """Main entry point for the application."""
    # Silent until the options are known; problems are printed by the reporter
    _ = setup_logging(log_level=BOOTSTRAP_LOG_LEVEL, log_file=None, console=False)
    log.debug("Starting FreeCol launcher", version=__version__)
    sys.exit(run())


if __name__ == "__main__":
    main()
