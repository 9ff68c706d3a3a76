"""Streaming output buffer — reassembles driven-process output into lines.

Raw pty output arrives in arbitrary chunks: a line may be split across
several reads, and every read is polluted with CSI escape sequences and
carriage returns. OutputBuffer strips those, splits on newlines, and keeps
the trailing incomplete line aside until its newline arrives.

Memory is bounded: only the most recent MAX_LINES completed lines are kept.

Only CSI sequences are removed. OSC sequences (window title updates,
`ESC ] ... BEL`) and other escapes pass through to the log pane as text.

Key class: OutputBuffer — append(chunk), snapshot().
"""

import re

# CSI sequences: ESC [ params final-letter (colors, cursor moves, erases)
ANSI_CSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

MAX_LINES = 2000


def strip_control_sequences(text: str) -> str:
    """Remove CSI escape sequences and carriage returns."""
    return ANSI_CSI_RE.sub("", text).replace("\r", "")


class OutputBuffer:
    """Completed lines plus one pending partial line, oldest evicted first."""

    def __init__(self, max_lines: int = MAX_LINES) -> None:
        self._max_lines = max_lines
        self._lines: list[str] = []
        self._partial = ""

    @property
    def partial(self) -> str:
        return self._partial

    @property
    def line_count(self) -> int:
        """Number of completed (newline-terminated) lines held."""
        return len(self._lines)

    def __len__(self) -> int:
        return len(self._lines) + (1 if self._partial else 0)

    def append(self, chunk: str) -> None:
        """Feed a chunk of raw output.

        The first segment continues the pending partial line, interior
        segments are complete lines, and the last segment becomes the new
        partial (empty when the chunk ends with a newline).
        """
        parts = strip_control_sequences(chunk).split("\n")
        if len(parts) == 1:
            self._partial += parts[0]
            return

        self._lines.append(self._partial + parts[0])
        self._lines.extend(parts[1:-1])
        self._partial = parts[-1]

        overflow = len(self._lines) - self._max_lines
        if overflow > 0:
            del self._lines[:overflow]

    def snapshot(self) -> list[str]:
        """Completed lines followed by the partial line if non-empty.

        Returns a new list on every call.
        """
        if self._partial:
            return [*self._lines, self._partial]
        return list(self._lines)
