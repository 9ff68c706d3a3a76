"""Shared utility functions used across copilot-play modules.

Provides:
  - copilot_play_dir(): resolve config directory from COPILOT_PLAY_DIR env var.
  - default_state_file(): resolve the hook state file path from env.
  - atomic_write_json(): crash-safe JSON file writes via temp+rename.
"""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any

COPILOT_PLAY_DIR_ENV = "COPILOT_PLAY_DIR"
HOOKS_STATE_ENV = "COPILOT_HOOKS_STATE"


def copilot_play_dir() -> Path:
    """Resolve config directory from COPILOT_PLAY_DIR env var or default ~/.copilot-play."""
    raw = os.environ.get(COPILOT_PLAY_DIR_ENV, "")
    return Path(raw) if raw else Path.home() / ".copilot-play"


def default_state_file() -> Path:
    """Hook state file from COPILOT_HOOKS_STATE or ~/.copilot/hooks-state.json."""
    raw = os.environ.get(HOOKS_STATE_ENV, "")
    return Path(raw) if raw else Path.home() / ".copilot" / "hooks-state.json"


def atomic_write_json(path: Path, data: Any, indent: int | None = None) -> None:
    """Write JSON data to a file atomically.

    Writes to a temporary file in the same directory, then renames it
    to the target path. Readers polling the file never observe a
    half-written document.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=indent, separators=None if indent else (",", ":"))

    # Write to temp file in same directory (same filesystem for atomic rename)
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent), suffix=".tmp", prefix=f".{path.name}."
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content + "\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise
