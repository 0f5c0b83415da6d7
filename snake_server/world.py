"""Authoritative game world simulation."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from . import collision, constants
from .apple import Apple
from .errors import CapacityExceeded, DuplicateName, EmptySnake, NotFound
from .grid import GameObject, Grid, GridPoint
from .settings import DirectionChoice, Settings
from .snake import Snake
from .utils import Color, Coordinates, Direction


class World:
    """Holds all entities and advances the simulation on every tick.

    A single instance is shared by every connection. It does no locking of
    its own: callers serialise access to it.
    """

    def __init__(self, grid_size: Optional[Tuple[int, int]] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings if settings is not None else Settings()
        self._grid = Grid(size=tuple(grid_size) if grid_size is not None else constants.GRID_SIZE)
        self.snakes: Dict[str, Snake] = {}
        self.apples: List[Apple] = []
        self.tick: int = 0

    @property
    def size(self) -> Tuple[int, int]:
        return self._grid.size

    def grid(self) -> Grid:
        """Return a copy of the grid rendered by the last tick."""

        return self._grid.copy()

    def snakes_count(self) -> int:
        return len(self.snakes)

    def find_snake(self, name: str) -> bool:
        return name in self.snakes

    def snake(self, name: str) -> Snake:
        try:
            return self.snakes[name]
        except KeyError:
            raise NotFound(name) from None

    def _at_capacity(self, count: int, capacity: int) -> bool:
        return capacity != 0 and count >= capacity

    def _spawn_offset(self, length: int) -> int:
        # Keep the whole body inside the grid while leaving a valid range.
        limit = (min(self.size) - 1) // 2
        return max(0, min(length, limit))

    def spawn_snake(
        self,
        name: str,
        coords: Optional[Coordinates] = None,
        direction: DirectionChoice = DirectionChoice.use_configured(),
        length: Optional[int] = None,
    ) -> Snake:
        """Add a new snake whose leading part is placed at ``coords``.

        Missing coordinates are random, at least ``length`` cells away from
        the borders. Missing length and direction come from the settings.
        """

        if self._at_capacity(len(self.snakes), self.settings.snakes_amount):
            raise CapacityExceeded("snake", name)
        if name in self.snakes:
            raise DuplicateName(name)

        heading = direction.resolve(self.settings.snake_direction)
        if length is None:
            length = max(1, self.settings.snake_length.get())
        if coords is None:
            coords = self._grid.random_coords(self._spawn_offset(length))

        snake = Snake.spawn(name, coords, heading, length)
        self.snakes[name] = snake
        logging.debug("Spawned snake %s at %s heading %s with %s parts", name, coords, heading, length)
        return snake

    def kill_snake(self, name: str) -> Snake:
        """Remove the snake called ``name`` from the game and return it."""

        try:
            return self.snakes.pop(name)
        except KeyError:
            raise NotFound(name) from None

    def change_direction(self, name: str, direction: Direction) -> None:
        self.snake(name).change_direction(direction)

    def spawn_apple(self, coords: Coordinates, color: Optional[Color] = None) -> Apple:
        if self._at_capacity(len(self.apples), self.settings.apples_amount):
            raise CapacityExceeded("apple", coords)
        apple = Apple.at(coords, color)
        self.apples.append(apple)
        return apple

    def _occupied(self) -> Set[Coordinates]:
        cells = {apple.coordinates for apple in self.apples}
        for snake in self.snakes.values():
            cells.update(part.coordinates for part in snake.parts)
        return cells

    def _free_coordinates(self) -> Coordinates:
        occupied = self._occupied()
        candidate = self._grid.random_coords()
        for _ in range(constants.APPLE_PLACEMENT_ATTEMPTS):
            if candidate not in occupied:
                break
            candidate = self._grid.random_coords()
        return candidate

    def kill_dead_snakes(self) -> List[Snake]:
        """Remove over-bounded, self-bumped and crashed snakes."""

        dead = collision.find_dead_snakes(self.snakes.values(), self._grid)
        for snake in dead:
            self.snakes.pop(snake.name, None)
            logging.info("Snake %s died with %s parts", snake.name, len(snake))
        return dead

    def check_apples(self, colors: Optional[Iterable[Color]] = None) -> None:
        """Feed snakes whose head is on an apple and refill the apple pool."""

        eaten: List[Apple] = []
        for snake in self.snakes.values():
            head = snake.head
            if head is None:
                continue
            for apple in self.apples:
                if apple.coordinates == head.coordinates and all(apple is not other for other in eaten):
                    snake.increment_size(self.settings.snake_increment_size, colors)
                    eaten.append(apple)

        if eaten:
            self.apples = [apple for apple in self.apples if all(apple is not other for other in eaten)]
        while self.settings.apples_amount != 0 and len(self.apples) < self.settings.apples_amount:
            self.spawn_apple(self._free_coordinates())

    def move_snakes(self) -> None:
        for snake in self.snakes.values():
            if snake.is_empty():
                raise EmptySnake(snake.name)
            snake.move_parts(self.settings.snake_step)

    def update_grid(self) -> None:
        """Regenerate the grid from the current apples and snakes."""

        grid = Grid(size=self._grid.size)
        for apple in self.apples:
            grid.data.append(GridPoint(GameObject.APPLE, apple.coordinates, apple.color))
        for snake in self.snakes.values():
            for part in snake.parts:
                grid.data.append(GridPoint(GameObject.SNAKE_PART, part.coordinates, part.color))
        self._grid = grid

    def advance_tick(self) -> None:
        """Advance the simulation by one tick.

        The order matters: dead snakes are removed first, survivors are fed
        and the apple pool refilled, then everything moves and the grid is
        rendered from the moved state.
        """

        self.tick += 1
        self.kill_dead_snakes()
        self.check_apples()
        self.move_snakes()
        self.update_grid()

    def scoreboard(self) -> List[Tuple[str, int]]:
        """Return ``(name, length)`` pairs, longest snake first."""

        entries = sorted(self.snakes.values(), key=len, reverse=True)
        return [(snake.name, len(snake)) for snake in entries]
