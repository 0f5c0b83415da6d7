"""Tests for settings parsing and the server command line."""

import pytest

from snake_server import constants
from snake_server.main import LOG_LEVEL_ENV, build_settings, parse_args, parse_log_level
from snake_server.settings import DirectionChoice, DirectionMode, Settings, parse_delay, parse_grid_size
from snake_server.snake import SnakeLength
from snake_server.utils import Direction


class TestDirectionChoice:
    def test_parse(self):
        assert DirectionChoice.parse("up") == DirectionChoice.fixed(Direction.UP)
        assert DirectionChoice.parse("Random").mode is DirectionMode.RANDOM
        with pytest.raises(ValueError):
            DirectionChoice.parse("sideways")

    def test_resolve(self):
        configured = DirectionChoice.fixed(Direction.DOWN)
        assert DirectionChoice.use_configured().resolve(configured) is Direction.DOWN
        assert DirectionChoice.fixed(Direction.LEFT).resolve(configured) is Direction.LEFT
        assert DirectionChoice.random().resolve(configured) in set(Direction)
        assert DirectionChoice.use_configured().resolve() is Direction.RIGHT


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.snakes_amount == 5
        assert settings.apples_amount == 1
        assert settings.snake_step == 1
        assert settings.snake_increment_size == 1
        assert settings.snake_length == SnakeLength.fixed(1)
        assert settings.snake_direction == DirectionChoice.fixed(Direction.RIGHT)

    def test_invalid(self):
        with pytest.raises(ValueError):
            Settings(snakes_amount=-1)
        with pytest.raises(ValueError):
            Settings(snake_direction=DirectionChoice.use_configured())


@pytest.mark.parametrize("value, expected", [("50x25", (50, 25)), ("10X4", (10, 4)), (" 7 x 3 ", (7, 3))])
def test_parse_grid_size(value, expected):
    assert parse_grid_size(value) == expected


@pytest.mark.parametrize("value", ["50", "50x", "0x5", "axb"])
def test_parse_grid_size_invalid(value):
    with pytest.raises(ValueError):
        parse_grid_size(value)


@pytest.mark.parametrize("value, expected", [("70ms", 0.07), ("1s", 1.0), ("0.5s", 0.5), ("250", 0.25), ("2m", 120.0)])
def test_parse_delay(value, expected):
    assert parse_delay(value) == pytest.approx(expected)


def test_parse_delay_invalid():
    with pytest.raises(ValueError):
        parse_delay("soon")


def test_command_line_defaults():
    args = parse_args([])
    assert args.port == constants.DEFAULT_PORT
    assert args.grid_size == constants.GRID_SIZE
    assert args.delay == constants.GAME_DELAY
    assert build_settings(args) == Settings()


def test_command_line_overrides():
    args = parse_args(
        ["-g", "30x20", "-s", "0", "-a", "3", "-d", "10ms", "-i", "2", "-l", "3..=5", "-t", "1", "-r", "random"]
    )
    settings = build_settings(args)
    assert args.grid_size == (30, 20)
    assert args.delay == pytest.approx(0.01)
    assert settings.snakes_amount == 0
    assert settings.apples_amount == 3
    assert settings.snake_increment_size == 2
    assert settings.snake_length == SnakeLength.between(3, 6)
    assert settings.snake_direction.mode is DirectionMode.RANDOM


def test_command_line_rejects_bad_values():
    with pytest.raises(SystemExit):
        parse_args(["--grid-size", "huge"])


def test_log_level():
    assert parse_log_level(" debug ") == "DEBUG"
    assert parse_args(["--log-level", "warning"]).log_level == "WARNING"
    with pytest.raises(ValueError):
        parse_log_level("loud")
    with pytest.raises(SystemExit):
        parse_args(["--log-level", "loud"])


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "error")
    assert parse_args([]).log_level == "ERROR"
    monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")
    with pytest.raises(SystemExit):
        parse_args([])
