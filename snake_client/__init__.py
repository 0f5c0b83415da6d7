"""Pygame client of the multiplayer grid snake game."""

__all__ = [
    "input",
    "main",
    "network",
    "render",
]
