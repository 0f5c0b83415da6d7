"""Collision helpers for the game server."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .grid import Grid
from .snake import Snake


def is_out_of_bounds(snake: Snake, grid: Grid) -> bool:
    """Return ``True`` if the snake's head left the grid."""

    head = snake.head
    return head is None or not grid.contains(head.coordinates)


def is_self_bumped(snake: Snake) -> bool:
    """Return ``True`` if the head overlaps the snake's own body.

    Empty snakes count as bumped so the sweep can get rid of them.
    """

    return snake.is_empty() or snake.parts_bumped()


def detect_head_collisions(snakes: Iterable[Snake]) -> List[Tuple[Snake, Snake]]:
    """Return all ``(attacker, victim)`` pairs whose head hit another body.

    Every ordered pair of distinct snakes is checked against the same set of
    snakes, so the result doesn't depend on iteration order. Only the
    attacker dies: a head landing on another snake's head is not a hit.
    """

    snakes = [snake for snake in snakes if not snake.is_empty()]
    collisions: List[Tuple[Snake, Snake]] = []
    for attacker in snakes:
        head = attacker.head.coordinates
        for victim in snakes:
            if attacker is victim:
                continue
            if victim.occupies(head, include_head=False):
                collisions.append((attacker, victim))
                break
    return collisions


def find_dead_snakes(snakes: Iterable[Snake], grid: Grid) -> List[Snake]:
    """Return the snakes that must be removed by this tick's kill sweep."""

    snakes = list(snakes)
    dead = [snake for snake in snakes if is_self_bumped(snake) or is_out_of_bounds(snake, grid)]
    survivors = [snake for snake in snakes if all(snake is not corpse for corpse in dead)]
    for attacker, _victim in detect_head_collisions(survivors):
        dead.append(attacker)
    return dead
