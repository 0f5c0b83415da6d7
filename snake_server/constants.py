"""Gameplay and transport constants shared across the server modules."""

GRID_SIZE: tuple[int, int] = (50, 25)
SNAKES_AMOUNT: int = 5
APPLES_AMOUNT: int = 1
SNAKE_INCREMENT_SIZE: int = 1
SNAKE_STEP: int = 1
SNAKE_LENGTH: int = 1

# Snakes spawned through a connection request always start this short.
CONNECT_SNAKE_LENGTH: int = 1

GAME_DELAY: float = 0.07
READ_LIMIT: int = 1024 * 10
FRAME_SENTINEL: bytes = b"\x00" * 4

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8787

# Completed exchanges kept per session for duplicate detection and audit.
EXCHANGE_HISTORY: int = 256
APPLE_PLACEMENT_ATTEMPTS: int = 32
