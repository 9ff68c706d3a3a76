"""Focus arbitration — decides which pane receives keystrokes.

Two unreliable idle signals (prompt detection and the hook state file) are
OR-ed into a single "waiting" flag. A manual override, cycled with the
toggle key, wins over the automatic choice. The decision is recomputed
from current inputs on every tick and keystroke, never stored, so a stale
focus cannot outlive one recomputation.

Key class: FocusArbiter — toggle_override(), decide().
"""

from dataclasses import dataclass
from typing import Literal

import structlog

from .hook_state import HookState

logger = structlog.get_logger()

Focus = Literal["game", "driven"]
GameStatus = Literal["RUNNING", "PAUSED"]

# Override cycle: auto -> game -> driven -> auto
_NEXT_OVERRIDE: dict[Focus | None, Focus | None] = {
    None: "game",
    "game": "driven",
    "driven": None,
}


@dataclass(frozen=True, slots=True)
class FocusDecision:
    """Result of one focus recomputation."""

    focus: Focus
    status: GameStatus
    waiting: bool
    manual: bool  # True when the override decided focus


def is_waiting(prompt_detected: bool, hook_state: HookState) -> bool:
    """The driven process looks like it waits for user input."""
    return prompt_detected or hook_state == "idle"


class FocusArbiter:
    """Manual override plus level-triggered automatic focus."""

    def __init__(self, override: Focus | None = None) -> None:
        self.override: Focus | None = override

    def toggle_override(self) -> Focus | None:
        """Advance the override one step in the cycle and return it."""
        self.override = _NEXT_OVERRIDE[self.override]
        logger.debug("Focus override -> %s", self.override or "auto")
        return self.override

    def decide(self, prompt_detected: bool, hook_state: HookState) -> FocusDecision:
        waiting = is_waiting(prompt_detected, hook_state)
        if self.override is not None:
            focus = self.override
        else:
            focus = "driven" if waiting else "game"
        return FocusDecision(
            focus=focus,
            status="PAUSED" if waiting else "RUNNING",
            waiting=waiting,
            manual=self.override is not None,
        )
