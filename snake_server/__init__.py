"""Server package of the multiplayer grid snake game."""

__all__ = [
    "apple",
    "collision",
    "constants",
    "errors",
    "grid",
    "main",
    "protocol",
    "session",
    "settings",
    "snake",
    "utils",
    "world",
]
