"""Apple entity definition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .utils import Color, Coordinates


@dataclass
class Apple:
    """An apple that snakes can eat to grow."""

    coordinates: Coordinates
    color: Color = Color.RED

    COLOR = Color.RED

    @classmethod
    def at(cls, coordinates: Coordinates, color: Optional[Color] = None) -> "Apple":
        """Create an apple at ``coordinates``, red unless ``color`` is given."""

        return cls(coordinates=coordinates, color=color if color is not None else cls.COLOR)
