"""Geometry and colour primitives used by the authoritative game server."""

from __future__ import annotations

from dataclasses import dataclass
import enum
import random
from typing import Any, Mapping


@dataclass(frozen=True)
class Coordinates:
    """An integer point on the game grid.

    The coordinate system follows the mathematical convention: ``(1, 1)`` is
    the bottom left cell of the grid and ``y`` grows upwards. Instances are
    immutable so that they can be shared freely between snake parts, apples
    and grid points.
    """

    x: int
    y: int

    def __add__(self, other: "Coordinates") -> "Coordinates":
        return Coordinates(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Coordinates") -> "Coordinates":
        return Coordinates(self.x - other.x, self.y - other.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"

    def to_tuple(self) -> tuple[int, int]:
        """Return the coordinates as an ``(x, y)`` tuple."""

        return self.x, self.y

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Coordinates":
        return cls(int(payload["x"]), int(payload["y"]))


class Direction(enum.Enum):
    """Heading of a snake's leading part."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def default(cls) -> "Direction":
        return cls.RIGHT

    @classmethod
    def parse(cls, value: str) -> "Direction":
        """Parse a lower case direction name such as ``"up"``."""

        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"can't parse direction from {value!r}, expected one of up, down, left, right"
            ) from None

    @classmethod
    def random(cls) -> "Direction":
        return random.choice(list(cls))

    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    def __neg__(self) -> "Direction":
        return self.opposite()

    def offset(self, step: int = 1) -> Coordinates:
        """Return the translation of moving ``step`` cells in this direction."""

        dx, dy = _UNIT_VECTORS[self]
        return Coordinates(dx * step, dy * step)

    def __str__(self) -> str:
        return self.value


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_UNIT_VECTORS = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


@dataclass(frozen=True)
class Color:
    """A colour in the sRGB colour space with an alpha channel."""

    r: int
    g: int
    b: int
    a: int = 255

    def __str__(self) -> str:
        return f"({self.r}, {self.g}, {self.b}, {self.a})"

    def to_tuple(self) -> tuple[int, int, int, int]:
        return self.r, self.g, self.b, self.a

    def to_dict(self) -> dict[str, int]:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Color":
        return cls(int(payload["r"]), int(payload["g"]), int(payload["b"]), int(payload["a"]))


Color.BLACK = Color(0, 0, 0, 255)
Color.WHITE = Color(255, 255, 255, 255)
Color.RED = Color(255, 0, 0, 255)
Color.GREEN = Color(0, 255, 0, 255)
Color.HEAD = Color(0, 200, 0, 255)
Color.TRANSPARENT = Color(0, 0, 0, 0)


def random_coordinates(width: int, height: int, offset: int = 0) -> Coordinates:
    """Return uniformly random coordinates inside a ``width`` x ``height`` grid.

    Both axes are drawn from ``[1 + offset, size - offset]`` so that a snake of
    length ``offset`` can't spawn already out of bounds.
    """

    if offset < 0 or 1 + offset > width - offset or 1 + offset > height - offset:
        raise ValueError(f"offset {offset} doesn't fit into a {width}x{height} grid")
    return Coordinates(
        random.randint(1 + offset, width - offset),
        random.randint(1 + offset, height - offset),
    )
