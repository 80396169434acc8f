"""Standalone game server handle and meta-server registration.

The game protocol itself lives elsewhere; this server accepts connections,
greets clients with the game it hosts, and stays up until `shutdown()`.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any

import httpx
import structlog

from .. import __version__
from ..models.specification import IntegrityReport, Savegame, Specification

log = structlog.stdlib.get_logger()

META_SERVER_URL = os.environ.get("FREECOL_META_SERVER", "http://meta.freecol.org:3540/servers")
DEFAULT_SERVER_NAME = "FreeCol server"


def load_savegame(path: Path) -> Savegame:
    """Read a savegame document.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the document is malformed
    """
    with open(path, "r", encoding="utf-8") as f:
        data: Any = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected JSON object, got {type(data).__name__}")
    players = data.get("players", [])
    if not isinstance(players, list) or not all(isinstance(p, dict) for p in players):
        raise ValueError("players must be a list of objects")
    turn = data.get("turn", 0)
    if not isinstance(turn, int):
        raise ValueError("turn must be an integer")
    return Savegame(
        path=path,
        version=str(data.get("version", "")),
        specification_id=str(data.get("specification", "")),
        turn=turn,
        players=players,
        data=data,
    )


class MetaServerClient:
    """Registers public servers with the meta-server over HTTP."""

    def __init__(
        self,
        url: str = META_SERVER_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": f"FreeCol/{__version__}"},
            follow_redirects=True,
        )

    async def register(self, name: str, port: int, slots: int = 0) -> bool:
        """Announce a server. Returns False if the meta-server is unreachable."""
        payload = {"name": name, "port": port, "slotsAvailable": slots, "version": __version__}
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.warning("Meta-server registration failed", url=self.url, error=str(e))
            return False
        log.info("Registered with meta-server", url=self.url, name=name, port=port)
        return True

    async def remove(self, name: str, port: int) -> None:
        try:
            response = await self._client.request("DELETE", self.url, json={"name": name, "port": port})
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.debug("Meta-server removal failed", url=self.url, error=str(e))

    async def close(self) -> None:
        await self._client.aclose()


class GameServer:
    """A running standalone server."""

    def __init__(
        self,
        port: int,
        name: str | None = None,
        specification: Specification | None = None,
        savegame: Savegame | None = None,
        public: bool = False,
        host: str = "0.0.0.0",
        meta_server: MetaServerClient | None = None,
    ) -> None:
        if specification is None and savegame is None:
            raise ValueError("A server needs a specification or a savegame")
        self.port = port
        self.name = name or DEFAULT_SERVER_NAME
        self.specification = specification
        self.savegame = savegame
        self.public = public
        self.host = host
        self._meta_server = meta_server
        self._server: asyncio.Server | None = None
        self._bound_port: int | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stopped: asyncio.Event | None = None
        self._shutdown_requested = False
        self.registered = False

    def check_integrity(self) -> IntegrityReport:
        if self.savegame is None:
            return IntegrityReport(score=1, problems=[])
        return self.savegame.check_integrity()

    @property
    def bound_port(self) -> int | None:
        """Port the listening socket was bound to, kept after the server closes."""
        return self._bound_port

    async def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._stopped = asyncio.Event()
        if self._shutdown_requested:
            self._stopped.set()
        self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        if self._server.sockets:
            self._bound_port = self._server.sockets[0].getsockname()[1]
        log.info("Server started", name=self.name, host=self.host, port=self.bound_port)
        if self.public and self.savegame is None:
            meta = self._meta_server or MetaServerClient()
            self._meta_server = meta
            self.registered = await meta.register(self.name, self.bound_port or self.port)

    async def serve_until_shutdown(self) -> None:
        if self._server is None or self._stopped is None:
            raise RuntimeError("Server has not been started")
        try:
            await self._stopped.wait()
        finally:
            self._server.close()
            await self._server.wait_closed()
            if self._meta_server is not None:
                if self.registered:
                    await self._meta_server.remove(self.name, self.bound_port or self.port)
                await self._meta_server.close()
            log.info("Server stopped", name=self.name)

    def shutdown(self) -> None:
        """Ask the server to stop. Safe to call more than once, from any thread."""
        if self._shutdown_requested:
            return
        self._shutdown_requested = True
        log.info("Server shutdown requested", name=self.name)
        if self._loop is not None and self._stopped is not None:
            self._loop.call_soon_threadsafe(self._stopped.set)

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        greeting = {
            "server": self.name,
            "version": __version__,
            "specification": self.specification.id if self.specification else self.savegame.specification_id,
        }
        try:
            writer.write((json.dumps(greeting) + "\n").encode("utf-8"))
            await writer.drain()
        except ConnectionError as e:
            log.debug("Client went away", peer=str(peer), error=str(e))
        finally:
            writer.close()
        log.debug("Client greeted", peer=str(peer))
