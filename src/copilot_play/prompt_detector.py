"""Prompt detection — decides whether the driven process awaits input.

Purely heuristic: the most recent non-blank output line is matched against
a set of regexes. Prompts are usually the last thing a CLI prints, possibly
followed by blank padding, so only that one line is a meaningful signal.

Known limitation: a prompt delivered across two pty reads only matches
once the remainder arrives. Detection re-runs on every data event, so the
lag is at most one chunk.

Key functions: detect_prompt(), compile_prompt_patterns().
"""

import re
from collections.abc import Iterable, Sequence

# Built-in prompts, anchored to the full (stripped) line
DEFAULT_PROMPT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^> ?$"),
    re.compile(r"^copilot> ?$"),
    re.compile(r"^\u276f ?$"),  # ❯ heavy angle bracket
)


def compile_prompt_patterns(
    extra: Iterable[str | re.Pattern[str]] = (),
) -> tuple[re.Pattern[str], ...]:
    """Return the default patterns followed by the user-supplied ones.

    Raises re.error if an extra pattern does not compile.
    """
    compiled = [p if isinstance(p, re.Pattern) else re.compile(p) for p in extra]
    return (*DEFAULT_PROMPT_PATTERNS, *compiled)


def last_meaningful_line(lines: Sequence[str]) -> str | None:
    """Return the last non-blank line, stripped, or None."""
    for line in reversed(lines):
        stripped = line.strip()
        if stripped:
            return stripped
    return None


def detect_prompt(lines: Sequence[str], patterns: Iterable[re.Pattern[str]]) -> bool:
    """True if the last non-blank line matches any of the patterns."""
    line = last_meaningful_line(lines)
    if line is None:
        return False
    return any(pattern.search(line) for pattern in patterns)
