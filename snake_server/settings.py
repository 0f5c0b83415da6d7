"""Game settings captured once at server startup."""

from __future__ import annotations

from dataclasses import dataclass, field
import enum
import re
from typing import Optional

from . import constants
from .snake import SnakeLength
from .utils import Direction


class DirectionMode(enum.Enum):
    USE_CONFIGURED = "use_configured"
    RANDOM = "random"
    FIXED = "fixed"


@dataclass(frozen=True)
class DirectionChoice:
    """How the initial heading of a new snake is chosen."""

    mode: DirectionMode
    direction: Optional[Direction] = None

    @classmethod
    def use_configured(cls) -> "DirectionChoice":
        return cls(DirectionMode.USE_CONFIGURED)

    @classmethod
    def random(cls) -> "DirectionChoice":
        return cls(DirectionMode.RANDOM)

    @classmethod
    def fixed(cls, direction: Direction) -> "DirectionChoice":
        return cls(DirectionMode.FIXED, direction)

    @classmethod
    def parse(cls, value: str) -> "DirectionChoice":
        """Parse ``up``, ``down``, ``left``, ``right`` or ``random``."""

        value = value.strip().lower()
        if value == "random":
            return cls.random()
        return cls.fixed(Direction.parse(value))

    def resolve(self, configured: Optional["DirectionChoice"] = None) -> Direction:
        """Return a concrete direction, deferring to ``configured`` if asked to."""

        if self.mode is DirectionMode.FIXED and self.direction is not None:
            return self.direction
        if self.mode is DirectionMode.USE_CONFIGURED and configured is not None:
            return configured.resolve()
        if self.mode is DirectionMode.USE_CONFIGURED:
            return Direction.default()
        return Direction.random()

    def __str__(self) -> str:
        if self.mode is DirectionMode.FIXED:
            return str(self.direction)
        return self.mode.value


@dataclass
class Settings:
    """Rules of the game shared by every connection.

    ``snakes_amount`` and ``apples_amount`` cap the number of live entities,
    zero meaning unlimited.
    """

    snakes_amount: int = constants.SNAKES_AMOUNT
    apples_amount: int = constants.APPLES_AMOUNT
    snake_step: int = constants.SNAKE_STEP
    snake_increment_size: int = constants.SNAKE_INCREMENT_SIZE
    snake_length: SnakeLength = field(default_factory=lambda: SnakeLength.fixed(constants.SNAKE_LENGTH))
    snake_direction: DirectionChoice = field(default_factory=lambda: DirectionChoice.fixed(Direction.RIGHT))

    def __post_init__(self) -> None:
        if self.snakes_amount < 0 or self.apples_amount < 0:
            raise ValueError("maximum amounts of snakes and apples can't be negative")
        if self.snake_increment_size < 0:
            raise ValueError("snake increment size can't be negative")
        if self.snake_direction.mode is DirectionMode.USE_CONFIGURED:
            raise ValueError("configured snake direction must be fixed or random")


def parse_grid_size(value: str) -> tuple[int, int]:
    """Parse a ``WIDTHxHEIGHT`` string such as ``50x25``."""

    match = re.fullmatch(r"\s*(\d+)\s*[xX]\s*(\d+)\s*", value)
    if match is None:
        raise ValueError(f"can't parse grid size from {value!r}, expected WIDTHxHEIGHT")
    width, height = int(match.group(1)), int(match.group(2))
    if width < 1 or height < 1:
        raise ValueError("grid dimensions must be positive")
    return width, height


_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0}


def parse_delay(value: str) -> float:
    """Parse a duration like ``70ms``, ``1s`` or ``0.5s`` into seconds.

    A bare number is read as milliseconds.
    """

    match = re.fullmatch(r"\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*", value)
    if match is None:
        raise ValueError(f"can't parse delay from {value!r}, expected e.g. 70ms or 1s")
    amount = float(match.group(1))
    return amount * _DURATION_UNITS[match.group(2) or "ms"]
