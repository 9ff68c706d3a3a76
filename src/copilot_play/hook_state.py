"""Hook state reader — polls the externally written busy/idle state file.

A hook command run by the driven CLI writes a small JSON document:

    {"state": "busy" | "idle", "timestamp": <unix-seconds>}

The file is polled every render tick. Its modification time gates parsing:
an unchanged mtime means "nothing new to report", and the caller keeps its
last known state. Each poll returns one of the tagged results below so that
"no new signal", "file gone" and "bad content" stay distinguishable.

Key functions: poll_hook_file() (tagged), read_hook_state() (state, mtime).
Key class: HookStateTracker — reconciles polls into the current state.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import structlog

logger = structlog.get_logger()

HookState = Literal["busy", "idle", "unknown"]

# Why the tracker currently reports "unknown"
HookDetail = Literal["ok", "no signal", "missing", "invalid", "unreadable"]

_VALID_STATES: frozenset[str] = frozenset({"busy", "idle"})


@dataclass(frozen=True, slots=True)
class HookUnchanged:
    """File mtime matches the previous poll: no new signal."""

    mtime: int


@dataclass(frozen=True, slots=True)
class HookChanged:
    """File changed and declares a recognised state."""

    state: Literal["busy", "idle"]
    mtime: int


@dataclass(frozen=True, slots=True)
class HookInvalid:
    """File changed and is readable, but its content is not usable."""

    mtime: int
    reason: str


@dataclass(frozen=True, slots=True)
class HookMissing:
    """File does not exist."""


@dataclass(frozen=True, slots=True)
class HookUnreadable:
    """File exists but stat or read failed."""

    reason: str


HookPoll = HookUnchanged | HookChanged | HookInvalid | HookMissing | HookUnreadable


def poll_hook_file(path: Path, previous_mtime: int | None) -> HookPoll:
    """Poll the state file once.

    ``previous_mtime`` is the ``st_mtime_ns`` seen by the last successful
    poll, or None to force a read.
    """
    try:
        mtime = path.stat().st_mtime_ns
    except FileNotFoundError:
        return HookMissing()
    except OSError as e:
        return HookUnreadable(reason=str(e))

    if previous_mtime is not None and mtime == previous_mtime:
        return HookUnchanged(mtime=mtime)

    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return HookMissing()
    except OSError as e:
        return HookUnreadable(reason=str(e))

    try:
        data = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        return HookInvalid(mtime=mtime, reason=f"not UTF-8: {e.reason}")
    except json.JSONDecodeError as e:
        return HookInvalid(mtime=mtime, reason=f"malformed JSON: {e.msg}")

    if not isinstance(data, dict):
        return HookInvalid(mtime=mtime, reason="not a JSON object")

    state = data.get("state")
    if state not in _VALID_STATES:
        return HookInvalid(mtime=mtime, reason=f"unrecognised state: {state!r}")
    return HookChanged(state=state, mtime=mtime)


def read_hook_state(
    path: Path, previous_mtime: int | None
) -> tuple[HookState, int | None]:
    """Poll the state file and flatten the result to ``(state, mtime)``.

    ``("unknown", previous_mtime)`` means "no new signal" (or bad content
    while the file is still there); ``("unknown", None)`` means the file is
    gone and the caller should reset.
    """
    result = poll_hook_file(path, previous_mtime)
    match result:
        case HookChanged(state=state, mtime=mtime):
            return state, mtime
        case HookMissing():
            return "unknown", None
        case _:
            return "unknown", previous_mtime


class HookStateTracker:
    """Holds the last known hook state and reconciles each poll into it.

    - unchanged: keep the current state.
    - changed: adopt the new state and mtime.
    - invalid: state becomes unknown, mtime advances so the same bad
      content is not parsed again.
    - missing / unreadable: state becomes unknown, mtime resets so the
      next poll re-reads.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.state: HookState = "unknown"
        self.mtime: int | None = None
        self.detail: HookDetail = "no signal"

    def refresh(self) -> HookState:
        """Poll the file once and return the reconciled state."""
        result = poll_hook_file(self.path, self.mtime)
        previous = self.state

        match result:
            case HookUnchanged():
                return self.state
            case HookChanged(state=state, mtime=mtime):
                self.state, self.mtime, self.detail = state, mtime, "ok"
            case HookInvalid(mtime=mtime, reason=reason):
                self.state, self.mtime, self.detail = "unknown", mtime, "invalid"
                logger.warning("Ignoring hook state file %s: %s", self.path, reason)
            case HookMissing():
                self.state, self.mtime, self.detail = "unknown", None, "missing"
            case HookUnreadable(reason=reason):
                self.state, self.mtime, self.detail = "unknown", None, "unreadable"
                logger.debug("Hook state file %s unreadable: %s", self.path, reason)

        if self.state != previous:
            logger.info(
                "Hook state %s -> %s (%s)", previous, self.state, self.detail
            )
        return self.state
