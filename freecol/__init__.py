"""FreeCol launcher: command-line bootstrap and run-mode dispatch."""

__version__ = "0.11.6"
