"""Catch-the-target mini-game played while the driven process is busy.

Grid arithmetic only: the player '@' moves one cell at a time, clamped to
the grid; stepping onto the target '*' scores a point and relocates the
target to a random cell other than the player's.
"""

import random
from dataclasses import dataclass

MIN_SIZE = 5

PLAYER_CHAR = "@"
TARGET_CHAR = "*"
EMPTY_CHAR = "."


@dataclass(slots=True)
class Cell:
    x: int
    y: int


class Game:
    """Bounded grid, player, target and score."""

    def __init__(
        self, width: int = 10, height: int = 6, rng: random.Random | None = None
    ) -> None:
        self._rng = rng or random.Random()
        self.width = max(MIN_SIZE, width)
        self.height = max(MIN_SIZE, height)
        self.player = Cell(0, 0)
        self.target = Cell(0, 0)
        self.score = 0
        self.reset()

    def reset(self) -> None:
        """Zero the score, center the player, place a fresh target."""
        self.score = 0
        self.player = Cell(self.width // 2, self.height // 2)
        self._place_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the grid (never below MIN_SIZE), keeping player and target inside.

        The target only moves when it falls outside the new bounds or lands
        on the player after clamping.
        """
        width, height = max(MIN_SIZE, width), max(MIN_SIZE, height)
        if (width, height) == (self.width, self.height):
            return
        self.width, self.height = width, height
        self.player.x = min(self.player.x, width - 1)
        self.player.y = min(self.player.y, height - 1)
        if (
            self.target.x >= width
            or self.target.y >= height
            or self._on_player(self.target.x, self.target.y)
        ):
            self._place_target()

    def move(self, dx: int, dy: int) -> bool:
        """Move the player by (dx, dy), clamped. Returns True on a capture."""
        self.player.x = max(0, min(self.width - 1, self.player.x + dx))
        self.player.y = max(0, min(self.height - 1, self.player.y + dy))
        if self._on_player(self.target.x, self.target.y):
            self.score += 1
            self._place_target()
            return True
        return False

    def render(self) -> list[str]:
        """One string per grid row."""
        rows: list[str] = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                if x == self.player.x and y == self.player.y:
                    row.append(PLAYER_CHAR)
                elif x == self.target.x and y == self.target.y:
                    row.append(TARGET_CHAR)
                else:
                    row.append(EMPTY_CHAR)
            rows.append("".join(row))
        return rows

    def _on_player(self, x: int, y: int) -> bool:
        return x == self.player.x and y == self.player.y

    def _place_target(self) -> None:
        # Re-sample until the target differs from the player's cell
        while True:
            x = self._rng.randrange(self.width)
            y = self._rng.randrange(self.height)
            if not self._on_player(x, y):
                self.target = Cell(x, y)
                return
