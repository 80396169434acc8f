"""Client user interface using the Textual framework."""

from ..models.launch import ClientLaunch
from .app import FreeColClientApp, start_client

__all__ = [
    "ClientLaunch",
    "FreeColClientApp",
    "start_client",
]
