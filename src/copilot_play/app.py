"""Render loop — Textual app hosting the driven-process log and the game.

Everything runs on Textual's asyncio loop, one handler at a time:
  - pty readable (loop.add_reader): append output, re-detect prompt, render.
  - timer tick (poll interval): re-poll the hook state file, render.
  - resize: render.
  - key: route to the game or the pty, render. Ctrl+G and Ctrl+Q are
    priority bindings handled before routing.

Each render recomputes the layout, resizes the pty and the game grid, and
redraws both panes from PlayState.

Key class: CopilotPlayApp.
"""

import asyncio

import structlog
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult, ScreenStackError
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import Static

from .input_router import Keystroke
from .play_state import PlayState
from .pty_process import DrivenProcess
from .render import compute_layout, game_pane_lines

logger = structlog.get_logger()


class CopilotPlayApp(App[int]):
    """Two panes: driven-process output on top, mini-game below."""

    CSS = """
    Screen {
        layout: vertical;
        overflow: hidden;
    }

    #log-pane {
        border: round $accent;
        height: 1fr;
        scrollbar-size-vertical: 1;
    }

    #game-pane {
        border: round $secondary;
        height: 8;
    }
    """

    ENABLE_COMMAND_PALETTE = False
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("ctrl+g", "toggle_focus", "Toggle focus", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(
        self,
        state: PlayState,
        process: DrivenProcess,
        poll_interval: float = 0.2,
    ) -> None:
        super().__init__()
        self.state = state
        self.process = process
        self._poll_interval = poll_interval
        self._reader_attached = False
        self._tick_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="log-pane"):
            yield Static(id="log-text", markup=False)
        yield Static(id="game-pane", markup=False)

    def on_mount(self) -> None:
        self.title = f"copilot-play: {self.state.driven_name}"
        # Keys must reach on_key, not the scroll container
        self.query_one("#log-pane", VerticalScroll).can_focus = False
        asyncio.get_running_loop().add_reader(self.process.fd, self._on_pty_readable)
        self._reader_attached = True
        self._tick_timer = self.set_interval(self._poll_interval, self._on_tick)
        self.state.poll_hooks()
        self.render_panes()

    def on_unmount(self) -> None:
        self._stop_event_sources()

    # --- Event sources ---

    def _on_pty_readable(self) -> None:
        text = self.process.read()
        if text is None:
            self._detach_reader()
            self.state.on_exit(self.process.returncode)
        elif text:
            self.state.on_output(text)
        else:
            return
        self.render_panes()

    def _on_tick(self) -> None:
        self.state.poll_hooks()
        self.render_panes()

    def on_resize(self, event: events.Resize) -> None:
        self.render_panes()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        key = Keystroke.from_key_name(event.key, event.character)
        self.state.on_key(key, self.process.write)
        self.render_panes()

    # --- Actions ---

    def action_toggle_focus(self) -> None:
        self.state.toggle_focus()
        self.render_panes()

    def action_quit(self) -> None:
        """Signal the child, stop watching the pty, leave the app."""
        logger.info("Quit requested")
        self.process.terminate()
        self._stop_event_sources()
        self.exit(0)

    # --- Rendering ---

    def _stop_event_sources(self) -> None:
        """No ticks or pty callbacks may land once the panes are torn down."""
        if self._tick_timer is not None:
            self._tick_timer.stop()
            self._tick_timer = None
        self._detach_reader()

    def _detach_reader(self) -> None:
        if not self._reader_attached:
            return
        asyncio.get_running_loop().remove_reader(self.process.fd)
        self._reader_attached = False

    def render_panes(self) -> None:
        """Recompute layout and redraw both panes from the current state."""
        try:
            log_pane = self.query_one("#log-pane", VerticalScroll)
            game_pane = self.query_one("#game-pane", Static)
            log_text = self.query_one("#log-text", Static)
        except (NoMatches, ScreenStackError):
            # Shutting down: the screen is already gone
            return

        layout = compute_layout(self.size.width, self.size.height)
        self.process.resize(*layout.pty_size)

        grid = layout.game_grid_size
        if grid is not None:
            self.state.game.resize(*grid)

        log_pane.styles.height = layout.log_height
        game_pane.styles.height = layout.game_height

        log_text.update(Text("\n".join(self.state.output.snapshot())))
        log_pane.scroll_end(animate=False)

        decision = self.state.decide()
        lines = game_pane_lines(
            decision, self.state.hooks.state, self.state.game, self.state.driven_name
        )
        game_pane.update(Text("\n".join(lines)))
