"""Stream networking client."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, TypeVar

from snake_server import constants, protocol
from snake_server.grid import Grid
from snake_server.protocol import Request
from snake_server.utils import Direction

T = TypeVar("T")


class GameClient:
    """Asynchronous client speaking the server's request protocol."""

    def __init__(self, host: str, port: int, name: str) -> None:
        self.host = host
        self.port = port
        self.name = name
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self._last_direction: Optional[Direction] = None

    @property
    def connected(self) -> bool:
        return self.writer is not None

    async def connect(self) -> str:
        """Open the stream, ask for a snake and return the accepted name.

        The server may rename the client if the name is already taken.
        """

        self.reader, self.writer = await asyncio.open_connection(self.host, self.port)
        self._last_direction = None
        await self._send(Request.connect(self.name))
        self.name = await self._read_payload(protocol.decode_client_name)
        logging.info("Connected to %s:%s as %s", self.host, self.port, self.name)
        return self.name

    async def request_grid(self) -> Grid:
        await self._send(Request.get_grid(self.name))
        return await self._read_payload(protocol.decode_grid)

    async def change_direction(self, direction: Direction) -> bool:
        """Ask to turn the snake; repeated directions are not sent.

        The server rejects a request identical to the previous one together
        with everything queued behind it, so it is filtered here.
        """

        if direction is self._last_direction:
            return False
        await self._send(Request.change_direction(self.name, direction))
        self._last_direction = direction
        return True

    async def disconnect(self) -> None:
        if self.writer is None:
            return
        try:
            await self._send(Request.disconnect(self.name))
        finally:
            await self.close()

    async def close(self) -> None:
        writer, self.writer, self.reader = self.writer, None, None
        if writer is not None:
            writer.close()
            await writer.wait_closed()

    async def _send(self, request: Request) -> None:
        if self.writer is None:
            raise RuntimeError("Client is not connected")
        self.writer.write(protocol.encode_request(request))
        await self.writer.drain()

    async def _read_payload(self, decode: Callable[[bytes], T]) -> T:
        # Write-backs are not framed: keep reading until the JSON is complete.
        if self.reader is None:
            raise RuntimeError("Client is not connected")
        buffer = b""
        while True:
            chunk = await self.reader.read(constants.READ_LIMIT)
            if not chunk:
                raise ConnectionResetError("server closed the stream")
            buffer += chunk
            try:
                return decode(buffer)
            except ValueError:
                if len(buffer) >= constants.READ_LIMIT:
                    raise
