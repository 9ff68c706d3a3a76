"""Application state owned by the render loop.

PlayState bundles everything the event handlers mutate: output buffer,
prompt detection result, hook state tracker, focus arbiter and game. One
instance is created at startup and handed to the UI; there is no
module-level state. Each handler mutates and returns, the caller then
re-renders.

Key class: PlayState — on_output(), on_exit(), poll_hooks(), on_key().
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from .focus import FocusArbiter, FocusDecision
from .game import Game
from .hook_state import HookStateTracker
from .input_router import Keystroke, RouteOutcome, route_key
from .output_buffer import OutputBuffer
from .prompt_detector import detect_prompt

logger = structlog.get_logger()


@dataclass
class PlayState:
    """Mutable state of one copilot-play run."""

    patterns: tuple[re.Pattern[str], ...]
    hooks: HookStateTracker
    driven_name: str = "copilot"
    output: OutputBuffer = field(default_factory=OutputBuffer)
    arbiter: FocusArbiter = field(default_factory=FocusArbiter)
    game: Game = field(default_factory=Game)
    prompt_detected: bool = False
    driven_exited: bool = False

    @classmethod
    def create(
        cls,
        patterns: tuple[re.Pattern[str], ...],
        state_file: Path,
        driven_name: str = "copilot",
    ) -> "PlayState":
        return cls(
            patterns=patterns,
            hooks=HookStateTracker(state_file),
            driven_name=driven_name,
        )

    def decide(self) -> FocusDecision:
        """Recompute focus from the current inputs."""
        return self.arbiter.decide(self.prompt_detected, self.hooks.state)

    def on_output(self, text: str) -> None:
        """Append driven-process output and re-run prompt detection."""
        self.output.append(text)
        detected = detect_prompt(self.output.snapshot(), self.patterns)
        if detected != self.prompt_detected:
            logger.debug("Prompt detected: %s", detected)
        self.prompt_detected = detected

    def on_exit(self, returncode: int | None) -> None:
        """Record that the driven process is gone (UI stays interactive)."""
        if self.driven_exited:
            return
        self.driven_exited = True
        suffix = f" (code {returncode})" if returncode is not None else ""
        prefix = "\n" if self.output.partial else ""
        self.output.append(f"{prefix}[{self.driven_name} exited{suffix}]\n")
        logger.info("%s exited%s", self.driven_name, suffix)

    def poll_hooks(self) -> None:
        self.hooks.refresh()

    def toggle_focus(self) -> None:
        self.arbiter.toggle_override()

    def on_key(self, key: Keystroke, write: Callable[[str], None]) -> RouteOutcome:
        """Route a keystroke according to the current focus."""
        return route_key(self.decide().focus, key, self.game, write)
