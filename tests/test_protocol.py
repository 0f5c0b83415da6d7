"""Tests for request framing and write-back payloads."""

import json

import pytest

from snake_server import protocol
from snake_server.errors import MalformedRequest
from snake_server.grid import GameObject, Grid, GridPoint
from snake_server.protocol import Request, RequestKind
from snake_server.utils import Color, Coordinates, Direction

SENTINEL = b"\x00\x00\x00\x00"


class TestWireFormat:
    def test_connect(self):
        assert protocol.encode_request(Request.connect("mark")) == b'{"client":"mark","kind":"connect"}' + SENTINEL

    def test_change_direction(self):
        encoded = protocol.encode_request(Request.change_direction("mark", Direction.UP))
        assert encoded == b'{"client":"mark","kind":{"change_direction":"up"}}' + SENTINEL

    @pytest.mark.parametrize(
        "request_, kind",
        [
            (Request.disconnect("mark"), "disconnect"),
            (Request.get_grid("mark"), "get_grid"),
        ],
    )
    def test_plain_kinds(self, request_, kind):
        payload = json.loads(protocol.encode_request(request_)[: -len(SENTINEL)])
        assert payload == {"client": "mark", "kind": kind}


class TestDecodeRequests:
    def test_batch_keeps_order(self):
        requests = [
            Request.connect("a"),
            Request.change_direction("a", Direction.LEFT),
            Request.get_grid("a"),
            Request.disconnect("a"),
        ]
        buffer = protocol.encode_requests(requests)

        decoded = protocol.decode_requests(buffer)

        assert decoded == requests
        assert protocol.encode_requests(decoded) == buffer

    def test_read_buffer_padding_is_ignored(self):
        buffer = protocol.encode_request(Request.get_grid("a")).ljust(1024, b"\x00")
        assert protocol.decode_requests(buffer) == [Request.get_grid("a")]

    def test_unicode_names(self):
        request = Request.connect("змея 🐍")
        assert protocol.decode_requests(protocol.encode_request(request)) == [request]

    def test_empty_fragments_are_skipped(self):
        buffer = SENTINEL + protocol.encode_request(Request.get_grid("a")) + SENTINEL * 2
        assert protocol.decode_requests(buffer) == [Request.get_grid("a")]

    @pytest.mark.parametrize(
        "fragment",
        [
            b"not json",
            b'{"client":"a"}',
            b'{"client":"a","kind":"jump"}',
            b'{"client":"a","kind":{"change_direction":"north"}}',
            b'{"client":"a","kind":"change_direction"}',
            b'{"client":7,"kind":"connect"}',
            b"[1, 2]",
            b"\xff\xfe",
        ],
    )
    def test_one_bad_fragment_rejects_the_batch(self, fragment):
        buffer = protocol.encode_request(Request.connect("a")) + fragment + SENTINEL
        with pytest.raises(MalformedRequest):
            protocol.decode_requests(buffer)

    def test_deeply_nested_json_rejects_the_batch(self):
        with pytest.raises(MalformedRequest):
            protocol.decode_requests(b"[" * 5000 + SENTINEL)

    def test_is_blank(self):
        assert protocol.is_blank(b"\x00" * 10)
        assert protocol.is_blank(b"")
        assert not protocol.is_blank(protocol.encode_request(Request.connect("a")))


def test_request_description():
    assert Request.change_direction("a", Direction.DOWN).describe() == "change snake direction to down"
    assert Request.connect("a").with_client("b") == Request("b", RequestKind.CONNECT)


class TestWriteBacks:
    def test_client_name(self):
        assert protocol.encode_client_name("mark (1)") == b'"mark (1)"'
        assert protocol.decode_client_name(b'"mark (1)"\x00\x00') == "mark (1)"

    def test_rejected_connect(self):
        payload = protocol.encode_error("too many snakes")
        with pytest.raises(ConnectionRefusedError, match="too many snakes"):
            protocol.decode_client_name(payload)

    def test_garbage_name(self):
        with pytest.raises(ValueError):
            protocol.decode_client_name(b"42")
        with pytest.raises(ValueError):
            protocol.decode_client_name(b'"unterminated')

    def test_deeply_nested_write_backs(self):
        with pytest.raises(ValueError):
            protocol.decode_client_name(b"[" * 5000)
        with pytest.raises(ValueError):
            protocol.decode_grid(b"[" * 5000)

    def test_grid_shape(self):
        grid = Grid(
            size=(3, 2),
            data=[
                GridPoint(GameObject.APPLE, Coordinates(1, 1), Color.RED),
                GridPoint(GameObject.SNAKE_PART, Coordinates(3, 2), Color.HEAD),
            ],
        )
        payload = json.loads(protocol.encode_grid(grid))
        assert payload == {
            "data": [
                {
                    "object_kind": "apple",
                    "coordinates": {"x": 1, "y": 1},
                    "color": {"r": 255, "g": 0, "b": 0, "a": 255},
                },
                {
                    "object_kind": "snake_part",
                    "coordinates": {"x": 3, "y": 2},
                    "color": {"r": 0, "g": 200, "b": 0, "a": 255},
                },
            ],
            "size": [3, 2],
        }
        assert protocol.decode_grid(protocol.encode_grid(grid)) == grid

    def test_truncated_grid(self):
        with pytest.raises(ValueError):
            protocol.decode_grid(protocol.encode_grid(Grid(size=(3, 3)))[:-2])
