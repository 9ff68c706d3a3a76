"""Tests for input_router — game commands and pty key encoding."""

import random

import pytest

from copilot_play.game import Cell, Game
from copilot_play.input_router import (
    Keystroke,
    encode_for_pty,
    game_command,
    route_key,
)


@pytest.fixture
def game() -> Game:
    g = Game(width=10, height=6, rng=random.Random(7))
    g.player = Cell(5, 3)
    g.target = Cell(0, 0)
    return g


@pytest.fixture
def writes() -> list[str]:
    return []


class TestGameFocus:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            (Keystroke("up"), (5, 2)),
            (Keystroke("down"), (5, 4)),
            (Keystroke("left"), (4, 3)),
            (Keystroke("right"), (6, 3)),
            (Keystroke("w", "w"), (5, 2)),
            (Keystroke("W", "W"), (5, 2)),
            (Keystroke("a", "a"), (4, 3)),
            (Keystroke("s", "s"), (5, 4)),
            (Keystroke("D", "D"), (6, 3)),
        ],
    )
    def test_movement_keys(self, game, writes, key, expected) -> None:
        assert route_key("game", key, game, writes.append) == "moved"
        assert (game.player.x, game.player.y) == expected
        assert writes == []

    @pytest.mark.parametrize("char", ["r", "R"])
    def test_reset(self, game, writes, char) -> None:
        game.score = 3
        assert route_key("game", Keystroke(char, char), game, writes.append) == "reset"
        assert game.score == 0

    @pytest.mark.parametrize(
        "key",
        [Keystroke("x", "x"), Keystroke("enter", "\r"), Keystroke("f5"), Keystroke("space", " ")],
    )
    def test_other_keys_ignored(self, game, writes, key) -> None:
        assert route_key("game", key, game, writes.append) == "ignored"
        assert (game.player.x, game.player.y) == (5, 3)
        assert writes == []


class TestDrivenFocus:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("enter", "\r"),
            ("backspace", "\x7f"),
            ("up", "\x1b[A"),
            ("down", "\x1b[B"),
            ("right", "\x1b[C"),
            ("left", "\x1b[D"),
        ],
    )
    def test_named_keys_canonical(self, game, writes, name, expected) -> None:
        key = Keystroke(name, character="\r" if name == "enter" else None)
        assert route_key("driven", key, game, writes.append) == "forwarded"
        assert writes == [expected]

    def test_raw_sequence_forwarded(self, game, writes) -> None:
        route_key("driven", Keystroke("f5", sequence="\x1b[15~"), game, writes.append)
        assert writes == ["\x1b[15~"]

    def test_printable_character_forwarded(self, game, writes) -> None:
        route_key("driven", Keystroke("w", "w"), game, writes.append)
        assert writes == ["w"]
        # Game untouched while driven process has focus
        assert (game.player.x, game.player.y) == (5, 3)

    def test_one_write_per_keystroke_in_order(self, game, writes) -> None:
        for char in "hi!":
            route_key("driven", Keystroke(char, char), game, writes.append)
        route_key("driven", Keystroke("enter", "\r"), game, writes.append)
        assert writes == ["h", "i", "!", "\r"]

    def test_nothing_encodable_is_dropped(self, game, writes) -> None:
        assert route_key("driven", Keystroke("unknown"), game, writes.append) == "ignored"
        assert writes == []


class TestFromKeyName:
    @pytest.mark.parametrize(
        ("name", "sequence"),
        [
            ("tab", "\t"),
            ("escape", "\x1b"),
            ("delete", "\x1b[3~"),
            ("pageup", "\x1b[5~"),
            ("f1", "\x1bOP"),
            ("ctrl+c", "\x03"),
            ("ctrl+a", "\x01"),
        ],
    )
    def test_sequence_filled_in(self, name, sequence) -> None:
        assert Keystroke.from_key_name(name).sequence == sequence

    def test_printable_key_has_no_sequence(self) -> None:
        key = Keystroke.from_key_name("x", "x")
        assert key.sequence is None
        assert encode_for_pty(key) == "x"

    def test_non_letter_ctrl_key_has_no_sequence(self) -> None:
        assert Keystroke.from_key_name("ctrl+up").sequence is None


class TestGameCommand:
    def test_multi_char_text_is_not_a_command(self) -> None:
        assert game_command(Keystroke("paste", "wasd")) is None

    def test_arrow_wins_over_character(self) -> None:
        assert game_command(Keystroke("left", None)) == (-1, 0)
