"""PTY session — a spawned process bound to a pseudo-terminal."""

from __future__ import annotations

import fcntl
import io
import logging
import os
import pty
import signal
import struct
import subprocess
import termios
import threading
from collections.abc import Sequence
from typing import Protocol

logger = logging.getLogger(__name__)


class Session(Protocol):
    """What a process handle needs from a spawned PTY program."""

    @property
    def reader(self) -> io.RawIOBase: ...

    @property
    def writer(self) -> io.RawIOBase: ...

    @property
    def pid(self) -> int: ...

    def resize(self, cols: int, rows: int) -> None: ...

    def kill(self) -> None: ...

    def wait(self) -> int: ...

    def close(self) -> None: ...


class Spawner(Protocol):
    def __call__(
        self,
        prog: str,
        argv: Sequence[str],
        env: Sequence[str],
        cols: int,
        rows: int,
    ) -> Session: ...


def _set_winsize(fd: int, cols: int, rows: int) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))


def env_to_dict(env: Sequence[str]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` entries into a mapping.

    Later entries win over earlier ones with the same name, so an
    override appended after the inherited environment takes effect.
    Entries without ``=`` are ignored.
    """
    result: dict[str, str] = {}
    for entry in env:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            continue
        result[key] = value
    return result


class PTYSession:
    """A process running in its own PTY and process group.

    The master side of the PTY is a single unbuffered file object used
    for both reading and writing. Reads and writes on it behave exactly
    like ``os.read``/``os.write`` on the master fd; once :meth:`close`
    has run they fail with ``ValueError`` instead of touching a stale
    descriptor.

    The child is a session leader with the PTY as its controlling
    terminal, so Ctrl-C, /dev/tty and SIGWINCH work as in a real one.
    Uses subprocess.Popen (not pty.fork) so exec failures surface in the
    parent as OSError.
    """

    def __init__(self, proc: subprocess.Popen, master: io.RawIOBase) -> None:
        self._proc = proc
        self._master = master
        self._closed = False
        self._reaped = False
        self._reap_lock = threading.Lock()

    @property
    def reader(self) -> io.RawIOBase:
        return self._master

    @property
    def writer(self) -> io.RawIOBase:
        return self._master

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def closed(self) -> bool:
        return self._closed

    def resize(self, cols: int, rows: int) -> None:
        """Set the window size; the kernel sends SIGWINCH to the foreground group."""
        _set_winsize(self._master.fileno(), cols, rows)

    def kill(self) -> None:
        """Send SIGKILL to the child's process group.

        Raises ProcessLookupError if the child has already been reaped
        or the group no longer exists.
        """
        with self._reap_lock:
            if self._reaped:
                raise ProcessLookupError(f"process {self._proc.pid} already exited")
            os.killpg(self._proc.pid, signal.SIGKILL)

    def wait(self) -> int:
        """Block until the child exits and return its exit status."""
        if not self._reaped:
            # Leave the zombie in place so the pid stays ours until kill()
            # can no longer race with the reap
            os.waitid(os.P_PID, self._proc.pid, os.WEXITED | os.WNOWAIT)
        with self._reap_lock:
            self._reaped = True
            return self._proc.wait()

    def close(self) -> None:
        """Release the master side of the PTY. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._master.close()


def _make_controlling_tty() -> None:
    # Runs in the child after setsid(); stdin is already the slave
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


def spawn(
    prog: str,
    argv: Sequence[str],
    env: Sequence[str],
    cols: int,
    rows: int,
) -> PTYSession:
    """Start ``prog`` with ``argv`` under a new PTY of ``cols`` x ``rows``.

    Args:
        prog: Program path (looked up on PATH if not absolute).
        argv: Arguments, not including the program itself.
        env: Environment as ``KEY=VALUE`` entries.
        cols: Initial terminal width.
        rows: Initial terminal height.

    Returns:
        The running session.

    Raises:
        OSError: The PTY could not be allocated or the program could not
            be executed.
    """
    master_fd, slave_fd = pty.openpty()
    try:
        _set_winsize(slave_fd, cols, rows)
        proc = subprocess.Popen(
            [prog, *argv],
            stdin=slave_fd,
            stdout=slave_fd,
            stderr=slave_fd,
            start_new_session=True,  # Creates new process group
            preexec_fn=_make_controlling_tty,
            env=env_to_dict(env),
            close_fds=True,
        )
    except BaseException:
        os.close(master_fd)
        raise
    finally:
        # Parent always closes slave fd
        os.close(slave_fd)

    master = os.fdopen(master_fd, "r+b", buffering=0)
    logger.debug("PTY spawned: master_fd=%d pid=%d", master_fd, proc.pid)
    return PTYSession(proc, master)
