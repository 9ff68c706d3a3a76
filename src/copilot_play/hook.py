"""Hook subcommand — writes the busy/idle state file read by the render loop.

Meant to be wired into the driven CLI's hook configuration, e.g. run
`copilot-play hook busy` when a prompt is submitted and
`copilot-play hook idle` when the agent stops. The hook payload on stdin
is drained and ignored; only the state argument matters.

The file is replaced atomically so a concurrent poll never sees a
partial document.

Key functions: hook_main() (CLI entry), write_hook_state().
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Literal

import structlog

from .utils import atomic_write_json, default_state_file

logger = structlog.get_logger()

_STATES = ("busy", "idle")


def write_hook_state(
    path: Path, state: Literal["busy", "idle"], timestamp: int | None = None
) -> None:
    """Atomically write ``{"state": ..., "timestamp": ...}`` to path."""
    payload = {
        "state": state,
        "timestamp": int(time.time()) if timestamp is None else timestamp,
    }
    atomic_write_json(path, payload)
    logger.debug("Wrote hook state %s to %s", state, path)


def _drain_stdin() -> None:
    """Consume the hook payload so the caller never blocks on a full pipe."""
    if sys.stdin is None or sys.stdin.isatty():
        return
    try:
        sys.stdin.read()
    except (OSError, ValueError) as e:
        logger.debug("Could not drain stdin: %s", e)


def _hook_status(path: Path) -> int:
    """Print the current state file content. Returns 0 if a valid state is set."""
    if not path.exists():
        print(f"No hook state ({path} does not exist)")
        return 1
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        print(f"Error reading {path}: {e}", file=sys.stderr)
        return 1

    state = data.get("state") if isinstance(data, dict) else None
    if state not in _STATES:
        print(f"Unrecognised hook state in {path}: {state!r}")
        return 1
    ts = data.get("timestamp")
    if isinstance(ts, (int, float)):
        when = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(ts))
        print(f"{state} (since {when})")
    else:
        print(state)
    return 0


def _parse_hook_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="copilot-play hook",
        description="Write the busy/idle hook state file",
    )
    parser.add_argument("state", nargs="?", choices=_STATES, help="state to record")
    parser.add_argument(
        "--state-file",
        type=Path,
        metavar="PATH",
        help="state file (default: ~/.copilot/hooks-state.json, env: COPILOT_HOOKS_STATE)",
    )
    parser.add_argument(
        "--status", action="store_true", help="print the current state and exit"
    )
    args = parser.parse_args(argv)
    if not args.status and args.state is None:
        parser.error("a state (busy or idle) is required")
    return args


def hook_main(argv: list[str] | None = None) -> int:
    """Entry for `copilot-play hook ...`. Returns the process exit code."""
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=logging.WARNING,
        stream=sys.stderr,
    )
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )

    args = _parse_hook_args(sys.argv[2:] if argv is None else argv)
    path = (args.state_file or default_state_file()).expanduser()

    if args.status:
        return _hook_status(path)

    _drain_stdin()
    try:
        write_hook_state(path, args.state)
    except OSError as e:
        logger.exception("Failed to write hook state to %s", path)
        print(f"Error writing {path}: {e}", file=sys.stderr)
        return 1
    return 0
