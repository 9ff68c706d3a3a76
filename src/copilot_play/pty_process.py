"""Pseudo-terminal transport for the driven process.

Spawns the child with its stdio on the slave side of a fresh pty (new
session, pty as controlling terminal) and exposes the master fd for the
event loop to watch. Output is decoded incrementally so multi-byte UTF-8
characters split across reads survive.

After the child exits, reads report EOF and writes are silently dropped:
the UI stays usable with a defunct pty.

Key class: DrivenProcess — spawn(), read(), write(), resize(), terminate().
"""

import codecs
import contextlib
import errno
import fcntl
import os
import pty
import signal
import struct
import subprocess
import termios
from collections.abc import Mapping, Sequence

import structlog

logger = structlog.get_logger()

_READ_SIZE = 4096

# Upper bound on blocking for the exit status once the pty reports EOF
_REAP_TIMEOUT = 0.5


class SpawnError(RuntimeError):
    """The driven binary could not be started."""


def set_window_size(fd: int, cols: int, rows: int) -> None:
    """Set the pty window size (struct winsize: rows, cols, xpix, ypix)."""
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))


def _make_controlling_tty() -> None:
    """Child-side: new session with stdin's pty as controlling terminal."""
    os.setsid()
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


class DrivenProcess:
    """A child process attached to the slave end of a pty."""

    def __init__(
        self, proc: subprocess.Popen[bytes], master_fd: int, cols: int, rows: int
    ) -> None:
        self._proc = proc
        self._fd = master_fd
        self._size = (cols, rows)
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._closed = False

    @classmethod
    def spawn(
        cls,
        argv: Sequence[str],
        cols: int = 120,
        rows: int = 30,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
    ) -> "DrivenProcess":
        """Start ``argv`` inside a new pty.

        Raises SpawnError if the executable cannot be found or started.
        """
        if not argv:
            raise SpawnError("no command given")

        master_fd, slave_fd = pty.openpty()
        set_window_size(slave_fd, cols, rows)

        child_env = dict(os.environ if env is None else env)
        child_env.setdefault("TERM", "xterm-256color")

        try:
            proc = subprocess.Popen(
                list(argv),
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                preexec_fn=_make_controlling_tty,
                env=child_env,
                cwd=cwd,
                close_fds=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            os.close(master_fd)
            raise SpawnError(f"Failed to spawn '{argv[0]}': {e}") from e
        finally:
            os.close(slave_fd)

        os.set_blocking(master_fd, False)
        logger.info("Spawned %s (pid=%d, %dx%d)", argv[0], proc.pid, cols, rows)
        return cls(proc, master_fd, cols, rows)

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def returncode(self) -> int | None:
        return self._proc.poll()

    def read(self) -> str | None:
        """Read available output. Returns "" if nothing is ready, None on EOF."""
        if self._closed:
            return None
        try:
            data = os.read(self._fd, _READ_SIZE)
        except BlockingIOError:
            return ""
        except OSError as e:
            # Linux reports EIO on the master once the slave side is gone
            if e.errno != errno.EIO:
                logger.warning("pty read failed: %s", e)
            data = b""
        if not data:
            self._closed = True
            self._reap()
            return self._decoder.decode(b"", final=True) or None
        return self._decoder.decode(data)

    def _reap(self) -> None:
        """Collect the exit status, which can lag the pty EOF slightly."""
        try:
            self._proc.wait(timeout=_REAP_TIMEOUT)
        except subprocess.TimeoutExpired:
            logger.debug("pid %d still running after pty EOF", self._proc.pid)

    def write(self, data: str) -> None:
        """Write keystroke bytes; ignored once the child is gone."""
        if self._closed:
            return
        try:
            os.write(self._fd, data.encode("utf-8"))
        except OSError as e:
            logger.debug("Dropped write to defunct pty: %s", e)

    def resize(self, cols: int, rows: int) -> None:
        """Propagate a new window size to the child (no-op if unchanged)."""
        if self._closed or (cols, rows) == self._size:
            return
        try:
            set_window_size(self._fd, cols, rows)
        except OSError as e:
            logger.debug("pty resize failed: %s", e)
            return
        self._size = (cols, rows)

    def terminate(self) -> None:
        """Send SIGTERM to the child without waiting for it to exit."""
        if self._proc.poll() is not None:
            return
        with contextlib.suppress(ProcessLookupError):
            self._proc.send_signal(signal.SIGTERM)

    def close(self) -> None:
        """Release the master fd."""
        if self._fd < 0:
            return
        self._closed = True
        with contextlib.suppress(OSError):
            os.close(self._fd)
        self._fd = -1
