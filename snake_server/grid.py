"""Game grid snapshot sent to clients."""

from __future__ import annotations

from dataclasses import dataclass, field
import enum
from typing import Any, List, Mapping

from . import constants, utils
from .utils import Color, Coordinates


class GameObject(enum.Enum):
    """Kinds of objects that can occupy a grid point."""

    SNAKE_PART = "snake_part"
    APPLE = "apple"


@dataclass(frozen=True)
class GridPoint:
    """A single coloured cell of the grid."""

    object_kind: GameObject
    coordinates: Coordinates
    color: Color

    def to_dict(self) -> dict:
        return {
            "object_kind": self.object_kind.value,
            "coordinates": self.coordinates.to_dict(),
            "color": self.color.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GridPoint":
        return cls(
            object_kind=GameObject(payload["object_kind"]),
            coordinates=Coordinates.from_dict(payload["coordinates"]),
            color=Color.from_dict(payload["color"]),
        )


@dataclass
class Grid:
    """Ephemeral rendering of the world: its size and a flat list of points.

    The grid is rebuilt from scratch on every tick and is never the
    authoritative state of the game.
    """

    size: tuple[int, int] = constants.GRID_SIZE
    data: List[GridPoint] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.size[0]

    @property
    def height(self) -> int:
        return self.size[1]

    def contains(self, coordinates: Coordinates) -> bool:
        """Return ``True`` if ``coordinates`` lie inside the 1-indexed bounds."""

        return 1 <= coordinates.x <= self.width and 1 <= coordinates.y <= self.height

    def random_coords(self, offset: int = 0) -> Coordinates:
        """Return random coordinates at least ``offset`` cells away from the edges."""

        return utils.random_coordinates(self.width, self.height, offset)

    def copy(self) -> "Grid":
        return Grid(size=self.size, data=list(self.data))

    def to_dict(self) -> dict:
        return {
            "data": [point.to_dict() for point in self.data],
            "size": [self.width, self.height],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Grid":
        width, height = payload["size"]
        return cls(
            size=(int(width), int(height)),
            data=[GridPoint.from_dict(point) for point in payload["data"]],
        )

    def __str__(self) -> str:
        return "".join(
            f"{point.object_kind.value}[{index}] at {point.coordinates} with rgba{point.color} color\n"
            for index, point in enumerate(self.data)
        )
