"""Tests for hook_state — mtime-gated polling of the busy/idle state file."""

import json
import os
from pathlib import Path

import pytest

from copilot_play.hook_state import (
    HookChanged,
    HookInvalid,
    HookMissing,
    HookStateTracker,
    HookUnchanged,
    HookUnreadable,
    poll_hook_file,
    read_hook_state,
)

_SECOND_NS = 1_000_000_000


def _write(path: Path, content: str, mtime_s: int) -> None:
    """Write content and pin the mtime so change detection is deterministic."""
    path.write_text(content)
    os.utime(path, ns=(mtime_s * _SECOND_NS, mtime_s * _SECOND_NS))


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    return tmp_path / "hooks-state.json"


class TestPollHookFile:
    def test_missing_file(self, state_file: Path) -> None:
        assert poll_hook_file(state_file, None) == HookMissing()

    def test_first_poll_reads_state(self, state_file: Path) -> None:
        _write(state_file, '{"state":"idle","timestamp":1}', 1000)
        result = poll_hook_file(state_file, None)
        assert result == HookChanged(state="idle", mtime=1000 * _SECOND_NS)

    def test_same_mtime_is_unchanged(self, state_file: Path) -> None:
        _write(state_file, '{"state":"busy","timestamp":1}', 1000)
        result = poll_hook_file(state_file, 1000 * _SECOND_NS)
        assert isinstance(result, HookUnchanged)

    def test_unchanged_skips_parsing(self, state_file: Path, monkeypatch) -> None:
        _write(state_file, '{"state":"busy"}', 1000)

        def _fail(*args, **kwargs):
            raise AssertionError("file should not be read")

        monkeypatch.setattr(Path, "read_bytes", _fail)
        assert isinstance(poll_hook_file(state_file, 1000 * _SECOND_NS), HookUnchanged)

    def test_malformed_json(self, state_file: Path) -> None:
        _write(state_file, "{not json", 1000)
        result = poll_hook_file(state_file, None)
        assert isinstance(result, HookInvalid)
        assert result.mtime == 1000 * _SECOND_NS

    @pytest.mark.parametrize(
        "content",
        ['{"state":"sleeping"}', '{"timestamp":5}', "[1, 2]", '"idle"', '{"state":"IDLE"}'],
        ids=["unknown-value", "no-state", "array", "bare-string", "wrong-case"],
    )
    def test_unrecognised_content(self, state_file: Path, content: str) -> None:
        _write(state_file, content, 1000)
        assert isinstance(poll_hook_file(state_file, None), HookInvalid)

    def test_directory_is_unreadable(self, tmp_path: Path) -> None:
        result = poll_hook_file(tmp_path, None)
        assert isinstance(result, HookUnreadable)


class TestReadHookState:
    def test_idle_then_sentinel_then_new_state(self, state_file: Path) -> None:
        _write(state_file, '{"state":"idle","timestamp":1}', 1000)

        state, mtime = read_hook_state(state_file, None)
        assert state == "idle"
        assert mtime is not None

        # Unchanged file: "no new signal", not "idle"
        state2, mtime2 = read_hook_state(state_file, mtime)
        assert state2 == "unknown"
        assert mtime2 == mtime

        _write(state_file, '{"state":"busy","timestamp":2}', 1001)
        state3, mtime3 = read_hook_state(state_file, mtime)
        assert state3 == "busy"
        assert mtime3 != mtime

    def test_missing_file_resets_mtime(self, state_file: Path) -> None:
        assert read_hook_state(state_file, 123) == ("unknown", None)

    def test_bad_content_keeps_previous_mtime(self, state_file: Path) -> None:
        _write(state_file, "garbage", 1000)
        assert read_hook_state(state_file, 42) == ("unknown", 42)


class TestHookStateTracker:
    def test_starts_unknown(self, state_file: Path) -> None:
        tracker = HookStateTracker(state_file)
        assert tracker.state == "unknown"
        assert tracker.mtime is None
        assert tracker.detail == "no signal"

    def test_adopts_state(self, state_file: Path) -> None:
        _write(state_file, json.dumps({"state": "idle", "timestamp": 1}), 1000)
        tracker = HookStateTracker(state_file)
        assert tracker.refresh() == "idle"
        assert tracker.mtime == 1000 * _SECOND_NS
        assert tracker.detail == "ok"

    def test_unchanged_poll_keeps_last_known_state(self, state_file: Path) -> None:
        _write(state_file, '{"state":"idle"}', 1000)
        tracker = HookStateTracker(state_file)
        tracker.refresh()
        assert tracker.refresh() == "idle"
        assert tracker.refresh() == "idle"

    def test_follows_rewrites(self, state_file: Path) -> None:
        tracker = HookStateTracker(state_file)
        _write(state_file, '{"state":"busy"}', 1000)
        assert tracker.refresh() == "busy"
        _write(state_file, '{"state":"idle"}', 1001)
        assert tracker.refresh() == "idle"

    def test_same_mtime_rewrite_is_not_seen(self, state_file: Path) -> None:
        tracker = HookStateTracker(state_file)
        _write(state_file, '{"state":"busy"}', 1000)
        tracker.refresh()
        _write(state_file, '{"state":"idle"}', 1000)
        assert tracker.refresh() == "busy"

    def test_deleted_file_resets(self, state_file: Path) -> None:
        tracker = HookStateTracker(state_file)
        _write(state_file, '{"state":"idle"}', 1000)
        tracker.refresh()
        state_file.unlink()
        assert tracker.refresh() == "unknown"
        assert tracker.mtime is None
        assert tracker.detail == "missing"

    def test_recreated_file_with_same_mtime_is_reread(self, state_file: Path) -> None:
        tracker = HookStateTracker(state_file)
        _write(state_file, '{"state":"idle"}', 1000)
        tracker.refresh()
        state_file.unlink()
        tracker.refresh()
        _write(state_file, '{"state":"idle"}', 1000)
        assert tracker.refresh() == "idle"

    def test_invalid_content_advances_mtime(self, state_file: Path) -> None:
        tracker = HookStateTracker(state_file)
        _write(state_file, '{"state":"idle"}', 1000)
        tracker.refresh()
        _write(state_file, "{broken", 1001)
        assert tracker.refresh() == "unknown"
        assert tracker.mtime == 1001 * _SECOND_NS
        assert tracker.detail == "invalid"

    def test_invalid_content_not_reparsed(self, state_file: Path, monkeypatch) -> None:
        tracker = HookStateTracker(state_file)
        _write(state_file, "{broken", 1000)
        tracker.refresh()

        calls = []
        original = Path.read_bytes

        def _counting(self, *args, **kwargs):
            calls.append(self)
            return original(self, *args, **kwargs)

        monkeypatch.setattr(Path, "read_bytes", _counting)
        tracker.refresh()
        tracker.refresh()
        assert calls == []

    def test_non_utf8_content_is_invalid_not_reread(
        self, state_file: Path, monkeypatch
    ) -> None:
        state_file.write_bytes(b'{"state": "\xff\xfe"}')
        os.utime(state_file, ns=(1000 * _SECOND_NS, 1000 * _SECOND_NS))
        tracker = HookStateTracker(state_file)
        assert tracker.refresh() == "unknown"
        assert tracker.detail == "invalid"
        assert tracker.mtime == 1000 * _SECOND_NS

        calls = []
        original = Path.read_bytes

        def _counting(self, *args, **kwargs):
            calls.append(self)
            return original(self, *args, **kwargs)

        monkeypatch.setattr(Path, "read_bytes", _counting)
        for _ in range(3):
            tracker.refresh()
        assert calls == []

    def test_unreadable_resets_mtime(self, tmp_path: Path) -> None:
        tracker = HookStateTracker(tmp_path)
        tracker.mtime = 5
        assert tracker.refresh() == "unknown"
        assert tracker.mtime is None
        assert tracker.detail == "unreadable"
