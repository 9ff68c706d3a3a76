"""Render model — pane geometry and the text shown in each pane.

Pure functions of the current terminal size and PlayState, so the layout
rules can be tested without a terminal. The Textual app applies the
results to its widgets.
"""

from dataclasses import dataclass

from .focus import FocusDecision
from .game import Game
from .hook_state import HookState

# Game pane: at least this many rows, otherwise a third of the screen
MIN_GAME_PANE_HEIGHT = 8

# Pane borders take one cell on each side
_BORDER = 2

# Game pane also shows a header and a controls line
_GAME_CHROME_ROWS = 4

MAX_GAME_WIDTH = 30
MAX_GAME_HEIGHT = 12

MIN_PTY_COLS = 20
MIN_PTY_ROWS = 5

CONTROLS_LINE = "Move: arrows/WASD  Reset: R  Toggle focus: Ctrl+G  Quit: Ctrl+Q"


@dataclass(frozen=True, slots=True)
class PaneLayout:
    """Geometry of both panes for one terminal size."""

    width: int
    log_height: int
    game_height: int

    @property
    def pty_size(self) -> tuple[int, int]:
        """(cols, rows) the driven process should see inside the log pane."""
        return (
            max(MIN_PTY_COLS, self.width - _BORDER),
            max(MIN_PTY_ROWS, self.log_height - _BORDER),
        )

    @property
    def game_grid_size(self) -> tuple[int, int] | None:
        """Grid size that fits the game pane, or None if the pane is too small."""
        inner_width = self.width - _BORDER
        inner_height = self.game_height - _GAME_CHROME_ROWS
        if inner_width <= 4 or inner_height <= 4:
            return None
        return min(MAX_GAME_WIDTH, inner_width), min(MAX_GAME_HEIGHT, inner_height)


def compute_layout(width: int, height: int) -> PaneLayout:
    """Split the terminal into a log pane (top) and a game pane (bottom)."""
    game_height = max(MIN_GAME_PANE_HEIGHT, height // 3)
    return PaneLayout(
        width=width, log_height=height - game_height, game_height=game_height
    )


def hook_label(hook_state: HookState) -> str:
    return "hooks: n/a" if hook_state == "unknown" else f"hooks: {hook_state}"


def status_header(
    decision: FocusDecision, hook_state: HookState, score: int, driven_name: str
) -> str:
    """One-line summary: game status, focus, hook state, score."""
    focus_name = "game" if decision.focus == "game" else driven_name
    if decision.manual:
        focus_name += " (manual)"
    return (
        f"Game {decision.status} | Focus: {focus_name} | "
        f"{hook_label(hook_state)} | Score: {score}"
    )


def game_pane_lines(
    decision: FocusDecision, hook_state: HookState, game: Game, driven_name: str
) -> list[str]:
    """Header, controls and grid rows for the game pane."""
    return [
        status_header(decision, hook_state, game.score, driven_name),
        CONTROLS_LINE,
        *game.render(),
    ]
