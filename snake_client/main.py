"""Entry point for the pygame based client."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Optional, Sequence

import pygame

from snake_server import constants
from snake_server.main import LOG_FORMAT, LOG_LEVEL_ENV, parse_log_level

from .input import InputManager
from .network import GameClient
from .render import Renderer, window_size


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the multiplayer snake client")
    parser.add_argument("--host", default="127.0.0.1", help="Server host")
    parser.add_argument("--port", type=int, default=constants.DEFAULT_PORT, help="Server port")
    parser.add_argument("--name", default="Player", help="Snake name")
    parser.add_argument("--cell", type=int, default=20, help="Size of a grid cell in pixels")
    parser.add_argument("--fps", type=int, default=30, help="Maximum frames per second")
    parser.add_argument(
        "--log-level",
        type=parse_log_level,
        default=os.environ.get(LOG_LEVEL_ENV, "INFO"),
        metavar="LEVEL",
        help=f"Logging level, defaults to ${LOG_LEVEL_ENV} or INFO",
    )
    return parser.parse_args(argv)


async def run_client(args: argparse.Namespace) -> None:
    network = GameClient(args.host, args.port, args.name)
    await network.connect()
    grid = await network.request_grid()

    pygame.init()
    screen = pygame.display.set_mode(window_size(grid, args.cell))
    pygame.display.set_caption(f"Snake - {network.name}")
    renderer = Renderer(screen, args.cell)
    clock = pygame.time.Clock()
    input_manager = InputManager()
    running = True

    try:
        while running:
            clock.tick(args.fps)
            state = input_manager.update(pygame.event.get())
            if state.quit or state.disconnect:
                running = False
                continue
            if state.reconnect:
                await network.disconnect()
                await network.connect()
                pygame.display.set_caption(f"Snake - {network.name}")
            if state.direction is not None:
                await network.change_direction(state.direction)

            grid = await network.request_grid()
            renderer.clear()
            renderer.draw_frame(grid)
            renderer.draw_grid(grid)
            renderer.draw_status(network.name)
            renderer.present()
            await asyncio.sleep(0)
    finally:
        await network.disconnect()
        pygame.quit()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)
    try:
        asyncio.run(run_client(args))
    except (ConnectionError, OSError) as exc:
        logging.error("Connection to the server failed: %s", exc)


if __name__ == "__main__":
    main()
