"""Translate local input into commands for the server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import pygame

from snake_server.utils import Direction


@dataclass
class InputState:
    """Commands gathered from one frame of events."""

    direction: Optional[Direction] = None
    reconnect: bool = False
    disconnect: bool = False
    quit: bool = False


class InputManager:
    """Map keyboard events to snake directions and session commands."""

    KEY_DIRECTIONS: Dict[int, Direction] = {
        pygame.K_w: Direction.UP,
        pygame.K_UP: Direction.UP,
        pygame.K_s: Direction.DOWN,
        pygame.K_DOWN: Direction.DOWN,
        pygame.K_a: Direction.LEFT,
        pygame.K_LEFT: Direction.LEFT,
        pygame.K_d: Direction.RIGHT,
        pygame.K_RIGHT: Direction.RIGHT,
    }

    def update(self, events: Iterable[pygame.event.Event]) -> InputState:
        state = InputState()
        for event in events:
            if event.type == pygame.QUIT:
                state.quit = True
            elif event.type == pygame.KEYDOWN:
                if event.key in self.KEY_DIRECTIONS:
                    # The last key pressed in a frame wins.
                    state.direction = self.KEY_DIRECTIONS[event.key]
                elif event.key == pygame.K_r:
                    state.reconnect = True
                elif event.key == pygame.K_ESCAPE:
                    state.disconnect = True
        return state
