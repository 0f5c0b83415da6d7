"""JSON protocol helpers for the stream transport.

Every client request is a JSON object followed by four null bytes::

    {"client":"mark","kind":"connect"}\\0\\0\\0\\0
    {"client":"mark","kind":{"change_direction":"up"}}\\0\\0\\0\\0

The sentinel lets the server split several requests that arrive in a single
read. Server write-backs are bare JSON values without a sentinel: the
accepted client name after ``connect`` (or ``{"error": reason}`` if the
snake couldn't be spawned) and the grid after ``get_grid``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import enum
import json
from typing import Any, Iterable, List, Optional

from .constants import FRAME_SENTINEL
from .errors import MalformedRequest
from .grid import Grid
from .utils import Direction

_NULL = b"\x00"


class RequestKind(enum.Enum):
    """Kinds of requests a client can send."""

    CONNECT = "connect"
    DISCONNECT = "disconnect"
    GET_GRID = "get_grid"
    CHANGE_DIRECTION = "change_direction"

    def describe(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    RequestKind.CONNECT: "connect to the server",
    RequestKind.DISCONNECT: "disconnect from the server",
    RequestKind.GET_GRID: "get game grid",
    RequestKind.CHANGE_DIRECTION: "change snake direction",
}


@dataclass(frozen=True)
class Request:
    """A single client request.

    ``direction`` is only set for :attr:`RequestKind.CHANGE_DIRECTION`.
    """

    client: str
    kind: RequestKind
    direction: Optional[Direction] = None

    @classmethod
    def connect(cls, client: str) -> "Request":
        return cls(client, RequestKind.CONNECT)

    @classmethod
    def disconnect(cls, client: str) -> "Request":
        return cls(client, RequestKind.DISCONNECT)

    @classmethod
    def get_grid(cls, client: str) -> "Request":
        return cls(client, RequestKind.GET_GRID)

    @classmethod
    def change_direction(cls, client: str, direction: Direction) -> "Request":
        return cls(client, RequestKind.CHANGE_DIRECTION, direction)

    def with_client(self, client: str) -> "Request":
        return replace(self, client=client)

    def describe(self) -> str:
        if self.kind is RequestKind.CHANGE_DIRECTION:
            return f"{self.kind.describe()} to {self.direction}"
        return self.kind.describe()

    def to_dict(self) -> dict:
        if self.kind is RequestKind.CHANGE_DIRECTION:
            kind: Any = {self.kind.value: self.direction.value}
        else:
            kind = self.kind.value
        return {"client": self.client, "kind": kind}

    @classmethod
    def from_dict(cls, payload: Any) -> "Request":
        """Build a request from decoded JSON, raising ``ValueError`` on bad shapes."""

        if not isinstance(payload, dict):
            raise ValueError("request must be a JSON object")
        client = payload.get("client")
        if not isinstance(client, str):
            raise ValueError("request client must be a string")
        kind = payload.get("kind")
        if isinstance(kind, str):
            request_kind = RequestKind(kind)
            if request_kind is RequestKind.CHANGE_DIRECTION:
                raise ValueError("change_direction request requires a direction")
            return cls(client, request_kind)
        if isinstance(kind, dict) and len(kind) == 1 and RequestKind.CHANGE_DIRECTION.value in kind:
            direction = kind[RequestKind.CHANGE_DIRECTION.value]
            if not isinstance(direction, str):
                raise ValueError("direction must be a string")
            return cls.change_direction(client, Direction.parse(direction))
        raise ValueError(f"unknown request kind {kind!r}")


def encode_request(request: Request) -> bytes:
    """Encode ``request`` followed by the frame sentinel."""

    return json.dumps(request.to_dict(), separators=(",", ":")).encode("utf-8") + FRAME_SENTINEL


def encode_requests(requests: Iterable[Request]) -> bytes:
    return b"".join(encode_request(request) for request in requests)


def is_blank(buffer: bytes) -> bool:
    """Return ``True`` if ``buffer`` holds nothing besides null bytes."""

    return not buffer.strip(_NULL)


def decode_requests(buffer: bytes) -> List[Request]:
    """Split a raw read into requests.

    A fault in any fragment rejects the whole buffer with
    :class:`MalformedRequest`.
    """

    requests: List[Request] = []
    for fragment in buffer.strip(_NULL).split(FRAME_SENTINEL):
        fragment = fragment.strip(_NULL)
        if not fragment:
            continue
        try:
            requests.append(Request.from_dict(json.loads(fragment.decode("utf-8"))))
        except (UnicodeDecodeError, json.JSONDecodeError, ValueError, KeyError, RecursionError) as exc:
            raise MalformedRequest(f"can't decode request {fragment[:64]!r}: {exc}") from exc
    return requests


def encode_client_name(name: str) -> bytes:
    return json.dumps(name).encode("utf-8")


def encode_error(message: str) -> bytes:
    """Encode the write-back of a rejected ``connect`` request."""

    return json.dumps({"error": message}).encode("utf-8")


def decode_client_name(buffer: bytes) -> str:
    """Decode the ``connect`` write-back.

    Raises :class:`ConnectionRefusedError` if the server rejected the
    connection and ``ValueError`` if the payload is garbage.
    """

    try:
        name = json.loads(buffer.strip(_NULL).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise ValueError("Invalid client name payload") from exc
    if isinstance(name, dict) and isinstance(name.get("error"), str):
        raise ConnectionRefusedError(name["error"])
    if not isinstance(name, str):
        raise ValueError("Client name payload must be a JSON string")
    return name


def encode_grid(grid: Grid) -> bytes:
    """Encode the grid write-back sent after ``get_grid``."""

    return json.dumps(grid.to_dict(), separators=(",", ":")).encode("utf-8")


def decode_grid(buffer: bytes) -> Grid:
    try:
        payload = json.loads(buffer.strip(_NULL).decode("utf-8"))
        return Grid.from_dict(payload)
    except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, ValueError, RecursionError) as exc:
        raise ValueError("Invalid grid payload") from exc
