"""Per-connection request handling.

A session reads raw requests from a client stream, pairs each of them with a
response once it has been processed (an *exchange*), applies them to the
shared :class:`~snake_server.world.World` and writes the results back.

Requests are handled in batches: everything decoded from one read is
processed in order, each request followed by a world tick. A protocol
failure rejects the rest of the batch and the client has to resend it, but
the connection stays open.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import enum
import logging
from typing import Iterator, List, Optional

from . import constants, protocol
from .errors import (
    AlreadyConnected,
    EmptyRequestString,
    GameError,
    IsNotConnected,
    MalformedRequest,
    NotFound,
    ProtocolError,
    RepeatedDirection,
)
from .protocol import Request, RequestKind
from .settings import DirectionChoice
from .snake import Snake
from .utils import Direction
from .world import World


class SessionState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    CONNECTED = "connected"
    TERMINATED = "terminated"


@dataclass
class Response:
    """Outcome of a processed request; ``error`` is ``None`` on success."""

    request: Request
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __str__(self) -> str:
        if self.ok:
            return f"{self.request.client}'s request to {self.request.describe()} is successful"
        return f"{self.request.client}'s request to {self.request.describe()} is failed because {self.error}"


@dataclass
class Exchange:
    """A request with its response, if it was processed already."""

    request: Request
    response: Optional[Response] = None

    @property
    def completed(self) -> bool:
        return self.response is not None

    def assign(self, response: Response) -> None:
        # The response may carry a renamed request (see connect handling).
        self.request = response.request
        self.response = response


class ExchangePool:
    """Ordered exchange history of a session.

    Only the ``limit`` most recent completed exchanges are kept.
    """

    def __init__(self, limit: int = constants.EXCHANGE_HISTORY) -> None:
        self._exchanges: List[Exchange] = []
        self._limit = limit

    def __len__(self) -> int:
        return len(self._exchanges)

    def __iter__(self) -> Iterator[Exchange]:
        return iter(self._exchanges)

    def add(self, request: Request) -> Exchange:
        exchange = Exchange(request)
        self._exchanges.append(exchange)
        return exchange

    def pending(self) -> List[Exchange]:
        return [exchange for exchange in self._exchanges if not exchange.completed]

    def completed(self) -> List[Exchange]:
        return [exchange for exchange in self._exchanges if exchange.completed]

    def last_completed(self, kind: RequestKind) -> Optional[Request]:
        """Return the most recent completed request of the given ``kind``."""

        for exchange in reversed(self._exchanges):
            if exchange.completed and exchange.request.kind is kind:
                return exchange.request
        return None

    def discard_pending(self) -> int:
        """Drop uncompleted exchanges and return how many were dropped."""

        kept = self.completed()
        dropped = len(self._exchanges) - len(kept)
        self._exchanges = kept
        return dropped

    def trim(self) -> None:
        completed = self.completed()
        excess = len(completed) - self._limit
        if excess > 0:
            stale = completed[:excess]
            self._exchanges = [
                exchange for exchange in self._exchanges if all(exchange is not old for old in stale)
            ]


class Session:
    """Protocol state machine of a single client connection."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        world: World,
        lock: Optional[asyncio.Lock] = None,
        delay: Optional[float] = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.world = world
        self.lock = lock if lock is not None else asyncio.Lock()
        self.delay = delay
        self.state = SessionState.UNAUTHENTICATED
        self.client: Optional[str] = None
        self.snake: Optional[Snake] = None
        self.exchanges = ExchangePool()

    @property
    def connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    @property
    def terminated(self) -> bool:
        return self.state is SessionState.TERMINATED

    async def wait(self) -> List[Request]:
        """Read the stream once and queue every decoded request.

        Raises :class:`EmptyRequestString` for reads holding only null
        bytes and :class:`MalformedRequest` if any fragment can't be decoded,
        in which case nothing from this read is queued.
        """

        data = await self.reader.read(constants.READ_LIMIT)
        if not data:
            raise ConnectionResetError("client closed the stream")
        if protocol.is_blank(data):
            raise EmptyRequestString()
        try:
            requests = protocol.decode_requests(data)
        except MalformedRequest as exc:
            logging.error("Failed to convert request: %s", exc)
            raise
        for request in requests:
            self.exchanges.add(request)
        return requests

    async def handle_requests(self) -> None:
        """Process every pending exchange in arrival order."""

        for exchange in self.exchanges.pending():
            request = exchange.request
            if not self.connected and request.kind is not RequestKind.CONNECT:
                raise IsNotConnected()

            response = await self._dispatch(request)
            exchange.assign(response)
            if request.kind is not RequestKind.GET_GRID:
                logging.info("%s", response)

            await self._tick()
            if self.delay:
                await asyncio.sleep(self.delay)
            await self._write_back(response)

            if request.kind is RequestKind.DISCONNECT:
                self.state = SessionState.TERMINATED
                break
        self.exchanges.trim()

    async def _dispatch(self, request: Request) -> Response:
        if request.kind is RequestKind.CONNECT:
            return await self._connect(request)
        if request.kind is RequestKind.CHANGE_DIRECTION:
            return await self._change_direction(request)
        if request.kind is RequestKind.DISCONNECT:
            return await self._disconnect(request)
        return Response(request)

    async def _connect(self, request: Request) -> Response:
        if self.connected:
            return Response(request.with_client(self.client), AlreadyConnected(self.client))

        async with self.lock:
            name = self._unique_name(request.client)
            try:
                snake = self.world.spawn_snake(
                    name,
                    direction=DirectionChoice.fixed(Direction.RIGHT),
                    length=constants.CONNECT_SNAKE_LENGTH,
                )
            except GameError as exc:
                return Response(request.with_client(name), exc)

        self.client = name
        self.snake = snake
        self.state = SessionState.CONNECTED
        return Response(request.with_client(name))

    def _unique_name(self, name: str) -> str:
        if not self.world.find_snake(name):
            return name
        suffix = self.world.snakes_count()
        while self.world.find_snake(f"{name} ({suffix})"):
            suffix += 1
        return f"{name} ({suffix})"

    async def _change_direction(self, request: Request) -> Response:
        last = self.exchanges.last_completed(RequestKind.CHANGE_DIRECTION)
        if last is not None and last.direction is request.direction:
            raise RepeatedDirection(request.direction)

        async with self.lock:
            try:
                self._own_snake().change_direction(request.direction)
            except GameError as exc:
                return Response(request, exc)
        return Response(request)

    async def _disconnect(self, request: Request) -> Response:
        async with self.lock:
            try:
                self._own_snake()
                self.world.kill_snake(self.client)
            except GameError as exc:
                return Response(request, exc)
        return Response(request)

    def _own_snake(self) -> Snake:
        # The name may have been reused by another session after our snake died.
        if self.snake is None or self.world.snakes.get(self.client) is not self.snake:
            raise NotFound(self.client)
        return self.snake

    async def _tick(self) -> None:
        async with self.lock:
            try:
                self.world.advance_tick()
            except GameError as exc:
                logging.error("Failed to advance the game tick: %s", exc)

    async def _write_back(self, response: Response) -> None:
        kind = response.request.kind
        if kind is RequestKind.CONNECT:
            if response.ok or isinstance(response.error, AlreadyConnected):
                payload = protocol.encode_client_name(response.request.client)
            else:
                payload = protocol.encode_error(str(response.error))
            logging.debug("Writing name to stream: %s", payload)
        elif kind is RequestKind.GET_GRID:
            async with self.lock:
                grid = self.world.grid()
            payload = protocol.encode_grid(grid)
        else:
            return
        self.writer.write(payload)
        await self.writer.drain()

    async def run(self) -> None:
        """Serve the client until it disconnects or the stream fails.

        The snake of this session is removed on every exit path.
        """

        try:
            while not self.terminated:
                try:
                    await self.wait()
                except ProtocolError:
                    continue
                try:
                    await self.handle_requests()
                except ProtocolError as exc:
                    dropped = self.exchanges.discard_pending()
                    logging.debug(
                        "%r %s - discarding %s pending request(s)", self.client or "", exc, dropped
                    )
        finally:
            self.state = SessionState.TERMINATED
            await self.cleanup()

    async def cleanup(self) -> None:
        if self.client is None:
            return
        async with self.lock:
            if self.snake is not None and self.world.snakes.get(self.client) is self.snake:
                self.world.kill_snake(self.client)
                logging.info("Removed snake %s of a closed session", self.client)
