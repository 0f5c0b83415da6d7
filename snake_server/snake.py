"""Snake entity implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
import random
import re
from typing import Iterable, List, Optional

from .errors import EmptySnake, IllegalReversal
from .utils import Color, Coordinates, Direction


@dataclass
class SnakePart:
    """A single cell of a snake body."""

    coordinates: Coordinates
    color: Color

    def move(self, offset: Coordinates) -> None:
        """Translate the part by ``offset`` relative to its current position."""

        self.coordinates = self.coordinates + offset


@dataclass
class Snake:
    """Authoritative representation of a snake controlled by a player.

    ``parts`` is ordered from tail to head: the last element is the leading
    part, the only one whose movement follows ``direction``.
    """

    name: str
    parts: List[SnakePart] = field(default_factory=list)
    direction: Direction = Direction.RIGHT

    BODY_COLOR = Color.GREEN
    HEAD_COLOR = Color.HEAD

    @classmethod
    def spawn(cls, name: str, head: Coordinates, direction: Direction, length: int) -> "Snake":
        """Create a straight snake whose leading part is located at ``head``.

        The remaining parts trail behind the head, opposite to ``direction``.
        """

        parts = []
        for index in range(length):
            distance = length - 1 - index
            color = cls.HEAD_COLOR if distance == 0 else cls.BODY_COLOR
            parts.append(SnakePart(head - direction.offset(distance), color))
        return cls(name=name, parts=parts, direction=direction)

    def __len__(self) -> int:
        return len(self.parts)

    def is_empty(self) -> bool:
        return not self.parts

    @property
    def head(self) -> Optional[SnakePart]:
        """Return the leading part or ``None`` for an empty snake."""

        return self.parts[-1] if self.parts else None

    @property
    def tail(self) -> Optional[SnakePart]:
        return self.parts[0] if self.parts else None

    def body(self) -> List[SnakePart]:
        """Return all parts except the leading one."""

        return self.parts[:-1]

    def _require_head(self) -> SnakePart:
        head = self.head
        if head is None:
            raise EmptySnake(self.name)
        return head

    def change_direction(self, direction: Direction) -> None:
        """Turn the leading part, refusing 180 degree turns of long snakes."""

        self._require_head()
        if len(self) > 1 and self.direction == direction.opposite():
            raise IllegalReversal(self.name)
        self.direction = direction

    def move_parts(self, step: int) -> None:
        """Shift every part into its successor's place and advance the head."""

        head = self._require_head()
        for current, following in zip(self.parts, self.parts[1:]):
            current.coordinates = following.coordinates
        head.move(self.direction.offset(step))

    def parts_bumped(self) -> bool:
        """Return ``True`` if the leading part overlaps any other part."""

        head = self._require_head()
        return any(part.coordinates == head.coordinates for part in self.body())

    def occupies(self, coordinates: Coordinates, include_head: bool = True) -> bool:
        parts = self.parts if include_head else self.body()
        return any(part.coordinates == coordinates for part in parts)

    def insert_part(self, color: Optional[Color] = None) -> None:
        """Insert a new part at the tail, stacked on the current tail cell.

        The part unfolds into its own cell as the snake keeps moving. When
        ``color`` is omitted the current tail colour is reused.
        """

        tail = self.tail
        if tail is None:
            raise EmptySnake(self.name)
        self.parts.insert(0, SnakePart(tail.coordinates, color if color is not None else tail.color))

    def increment_size(self, n: int, colors: Optional[Iterable[Color]] = None) -> None:
        """Grow the snake by ``n`` parts.

        Parts coloured from ``colors`` are inserted first, so they end up in
        reverse order at the tail; any remaining parts reuse the tail colour.
        """

        if n <= 0:
            return
        inserted = 0
        for color in colors or ():
            if inserted == n:
                break
            self.insert_part(color)
            inserted += 1
        for _ in range(n - inserted):
            self.insert_part()


_RANGE_PATTERN = re.compile(r"^(\d+)\.\.(=?)(\d+)$")


@dataclass(frozen=True)
class SnakeLength:
    """Initial snake length: either fixed or drawn from a half-open range."""

    start: int
    stop: Optional[int] = None

    @classmethod
    def fixed(cls, length: int) -> "SnakeLength":
        return cls(length)

    @classmethod
    def between(cls, start: int, stop: int) -> "SnakeLength":
        """Random length in ``[start, stop)``."""

        if stop <= start:
            raise ValueError(f"empty snake length range {start}..{stop}")
        return cls(start, stop)

    @classmethod
    def parse(cls, value: str) -> "SnakeLength":
        """Parse ``"N"``, ``"M..N"`` (exclusive) or ``"M..=N"`` (inclusive)."""

        value = value.strip()
        if value.isdigit():
            return cls.fixed(int(value))
        match = _RANGE_PATTERN.match(value)
        if match is None:
            raise ValueError(f"can't parse snake length from {value!r}, expected N, M..N or M..=N")
        start, inclusive, end = int(match.group(1)), bool(match.group(2)), int(match.group(3))
        if inclusive:
            end += 1
        return cls.between(start, end)

    @property
    def is_random(self) -> bool:
        return self.stop is not None

    def get(self) -> int:
        if self.stop is None:
            return self.start
        return random.randrange(self.start, self.stop)

    def __str__(self) -> str:
        if self.stop is None:
            return str(self.start)
        return f"{self.start}..{self.stop}"
