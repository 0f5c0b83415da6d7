"""Exceptions raised by the world and the session protocol."""

from __future__ import annotations


class GameError(Exception):
    """Base class for failures of a single world operation.

    These never corrupt the world: the operation either completes or leaves
    the state untouched. The session turns them into failed responses.
    """


class NotFound(GameError):
    def __init__(self, name: str) -> None:
        super().__init__(f"snake with {name} name not found")
        self.name = name


class DuplicateName(GameError):
    def __init__(self, name: str) -> None:
        super().__init__(f"snake with {name} name already exists")
        self.name = name


class CapacityExceeded(GameError):
    """Raised when the snake or apple pool is already full."""

    def __init__(self, entity: str, target: object) -> None:
        super().__init__(
            f"can't add {entity} {target} because maximum amount of {entity}s in the game is reached"
        )
        self.entity = entity
        self.target = target


class EmptySnake(GameError):
    def __init__(self, name: str) -> None:
        super().__init__(f"snake with {name} name has no parts")
        self.name = name


class IllegalReversal(GameError):
    def __init__(self, name: str) -> None:
        super().__init__(f"snake with {name} name tries to turn 180 degrees")
        self.name = name


class AlreadyConnected(GameError):
    """Answered to a second connect on a session that already owns a snake."""

    def __init__(self, name: str) -> None:
        super().__init__(f"client is already connected as {name}")
        self.name = name


class ProtocolError(Exception):
    """Base class for failures that reject a whole batch of requests."""


class IsNotConnected(ProtocolError):
    def __init__(self) -> None:
        super().__init__("client wants to be handled without being authorized")


class EmptyRequestString(ProtocolError):
    def __init__(self) -> None:
        super().__init__("client sent nothing besides null chars")


class RepeatedDirection(ProtocolError):
    def __init__(self, direction: object) -> None:
        super().__init__(f"client sent two identical requests to turn {direction}")
        self.direction = direction


class MalformedRequest(ProtocolError):
    """Raised when a received buffer can't be decoded into requests."""
