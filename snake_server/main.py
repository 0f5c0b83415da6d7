"""Entry point for the asyncio based game server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Callable, Optional, Sequence

from . import constants
from .session import Session
from .settings import DirectionChoice, Settings, parse_delay, parse_grid_size
from .snake import SnakeLength
from .world import World

LOG_FORMAT = "[%(levelname)s] %(message)s"
LOG_LEVEL_ENV = "LOG_LEVEL"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class GameServer:
    """Accepts client streams and runs one session per connection.

    All sessions share the same world guarded by a single lock.
    """

    def __init__(self, host: str, port: int, world: Optional[World] = None, delay: Optional[float] = None) -> None:
        self.host = host
        self.port = port
        self.world = world if world is not None else World()
        self.delay = constants.GAME_DELAY if delay is None else delay
        self.lock = asyncio.Lock()
        self._server: Optional[asyncio.AbstractServer] = None

    async def open(self) -> asyncio.AbstractServer:
        """Bind the listening socket without blocking."""

        asyncio.get_running_loop().set_exception_handler(self._handle_loop_exception)
        self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        for sock in self._server.sockets:
            logging.info("Running server on %s", sock.getsockname())
        return self._server

    async def start(self) -> None:
        """Start listening and serve clients until cancelled."""

        server = await self.open()
        async with server:
            await server.serve_forever()

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        address = writer.get_extra_info("peername")
        session = Session(reader, writer, self.world, self.lock, self.delay)
        try:
            await session.run()
        except (ConnectionError, OSError) as exc:
            logging.error("Failed to handle client %s: %s", address, exc)
        except Exception:
            logging.exception("Unexpected error while handling client %s", address)
        else:
            logging.info("Successfully handled client %s", address)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError) as exc:
                logging.debug("Stream of %s closed uncleanly: %s", address, exc)
            async with self.lock:
                logging.debug("Scoreboard: %s", self.world.scoreboard())

    @staticmethod
    def _handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
        # Accept failures end up here; the listener keeps running.
        logging.error(
            "Event loop error: %s",
            context.get("message", "unknown error"),
            exc_info=context.get("exception"),
        )


def parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
    return level


def _argument(parse: Callable[[str], object]) -> Callable[[str], object]:
    def convert(value: str) -> object:
        try:
            return parse(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    convert.__name__ = parse.__name__
    return convert


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the multiplayer snake server")
    parser.add_argument("--host", default=constants.DEFAULT_HOST, help="Host interface to bind to")
    parser.add_argument("-p", "--port", type=int, default=constants.DEFAULT_PORT, help="Port to listen on")
    parser.add_argument(
        "-g",
        "--grid-size",
        type=_argument(parse_grid_size),
        default=constants.GRID_SIZE,
        metavar="WxH",
        help="Game grid size (default: %(default)s)",
    )
    parser.add_argument(
        "-s", "--snakes", type=int, default=constants.SNAKES_AMOUNT, help="Maximum amount of snakes, 0 for unlimited"
    )
    parser.add_argument(
        "-a", "--apples", type=int, default=constants.APPLES_AMOUNT, help="Maximum amount of apples, 0 for unlimited"
    )
    parser.add_argument(
        "-d",
        "--delay",
        type=_argument(parse_delay),
        default=constants.GAME_DELAY,
        metavar="DURATION",
        help="Delay after every processed request, e.g. 70ms or 1s",
    )
    parser.add_argument(
        "-i",
        "--inc-size",
        type=int,
        default=constants.SNAKE_INCREMENT_SIZE,
        help="Parts added to a snake when it eats an apple",
    )
    parser.add_argument(
        "-l",
        "--snake-length",
        type=_argument(SnakeLength.parse),
        default=SnakeLength.fixed(constants.SNAKE_LENGTH),
        metavar="LENGTH",
        help="Initial snake length: N, M..N or M..=N",
    )
    parser.add_argument("-t", "--snake-step", type=int, default=constants.SNAKE_STEP, help="Cells a snake moves per tick")
    parser.add_argument(
        "-r",
        "--snake-direction",
        type=_argument(DirectionChoice.parse),
        default=DirectionChoice.parse("right"),
        metavar="DIRECTION",
        help="Initial snake direction: up, down, left, right or random",
    )
    parser.add_argument(
        "--log-level",
        type=_argument(parse_log_level),
        default=os.environ.get(LOG_LEVEL_ENV, "INFO"),
        metavar="LEVEL",
        help=f"Logging level, defaults to ${LOG_LEVEL_ENV} or INFO",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    return Settings(
        snakes_amount=args.snakes,
        apples_amount=args.apples,
        snake_step=args.snake_step,
        snake_increment_size=args.inc_size,
        snake_length=args.snake_length,
        snake_direction=args.snake_direction,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)
    world = World(args.grid_size, build_settings(args))
    server = GameServer(args.host, args.port, world, args.delay)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logging.info("Server stopped")


if __name__ == "__main__":
    main()
