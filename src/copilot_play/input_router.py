"""Keystroke routing — game commands or bytes for the driven process.

With focus on the game, arrows and WASD move the player and r/R resets;
every other key is ignored. With focus on the driven process, every
keystroke is re-encoded into the byte sequence a terminal would send and
written to the pty in a single write, preserving keystroke order.

Key names follow the terminal toolkit's convention ("up", "enter",
"ctrl+a", "f5", ...). Keystroke is independent of any toolkit so routing
can be tested without a running UI.

Key functions: route_key(), encode_for_pty().
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from .focus import Focus
from .game import Game

RouteOutcome = Literal["moved", "reset", "forwarded", "ignored"]

# Keys that always map to one canonical sequence, whatever the toolkit reports
_CANONICAL_SEQUENCES: dict[str, str] = {
    "enter": "\r",
    "backspace": "\x7f",
    "up": "\x1b[A",
    "down": "\x1b[B",
    "right": "\x1b[C",
    "left": "\x1b[D",
}

# Named keys the toolkit reports without their raw bytes
_NAMED_SEQUENCES: dict[str, str] = {
    "tab": "\t",
    "shift+tab": "\x1b[Z",
    "escape": "\x1b",
    "home": "\x1b[H",
    "end": "\x1b[F",
    "insert": "\x1b[2~",
    "delete": "\x1b[3~",
    "pageup": "\x1b[5~",
    "pagedown": "\x1b[6~",
    "f1": "\x1bOP",
    "f2": "\x1bOQ",
    "f3": "\x1bOR",
    "f4": "\x1bOS",
    "f5": "\x1b[15~",
    "f6": "\x1b[17~",
    "f7": "\x1b[18~",
    "f8": "\x1b[19~",
    "f9": "\x1b[20~",
    "f10": "\x1b[21~",
    "f11": "\x1b[23~",
    "f12": "\x1b[24~",
}

_MOVES: dict[str, tuple[int, int]] = {
    "up": (0, -1),
    "w": (0, -1),
    "down": (0, 1),
    "s": (0, 1),
    "left": (-1, 0),
    "a": (-1, 0),
    "right": (1, 0),
    "d": (1, 0),
}

_ARROWS: frozenset[str] = frozenset({"up", "down", "left", "right"})


def _ctrl_sequence(name: str) -> str | None:
    """Control byte for ``ctrl+<letter>``, e.g. ctrl+c -> \\x03."""
    if not name.startswith("ctrl+"):
        return None
    letter = name[len("ctrl+") :]
    if len(letter) == 1 and "a" <= letter <= "z":
        return chr(ord(letter) - ord("a") + 1)
    return None


@dataclass(frozen=True, slots=True)
class Keystroke:
    """A single key press.

    ``name`` is the toolkit key name, ``character`` the printable text it
    produced (if any), ``sequence`` the raw terminal bytes (if known).
    """

    name: str
    character: str | None = None
    sequence: str | None = None

    @classmethod
    def from_key_name(cls, name: str, character: str | None = None) -> "Keystroke":
        """Build a Keystroke, filling in the raw sequence for named keys."""
        sequence = _NAMED_SEQUENCES.get(name) or _ctrl_sequence(name)
        return cls(name=name, character=character, sequence=sequence)


def encode_for_pty(key: Keystroke) -> str | None:
    """Bytes (as text) the driven process expects for this key, or None."""
    canonical = _CANONICAL_SEQUENCES.get(key.name)
    if canonical is not None:
        return canonical
    if key.sequence:
        return key.sequence
    if key.character:
        return key.character
    return None


def game_command(key: Keystroke) -> tuple[int, int] | Literal["reset"] | None:
    """Map a key to a move delta, "reset", or None when it has no meaning."""
    if key.name in _ARROWS:
        return _MOVES[key.name]
    char = key.character
    if not char or len(char) != 1:
        return None
    if char in "rR":
        return "reset"
    return _MOVES.get(char.lower())


def route_key(
    focus: Focus,
    key: Keystroke,
    game: Game,
    write: Callable[[str], None],
) -> RouteOutcome:
    """Apply a keystroke to the game or forward it to the driven process."""
    if focus == "game":
        command = game_command(key)
        if command is None:
            return "ignored"
        if command == "reset":
            game.reset()
            return "reset"
        game.move(*command)
        return "moved"

    data = encode_for_pty(key)
    if data is None:
        return "ignored"
    write(data)
    return "forwarded"
