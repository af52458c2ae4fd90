"""Local command — one PTY-backed child process exposed as a byte stream."""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from contextlib import suppress
from types import MappingProxyType
from typing import Any

from localcommand.env import build_env
from localcommand.errors import ResizeError, SpawnError
from localcommand.pty import Session, Spawner, spawn

logger = logging.getLogger(__name__)

DEFAULT_CLOSE_TIMEOUT = 10.0  # seconds
DEFAULT_COLS = 80
DEFAULT_ROWS = 24


class CommandStatus(enum.Enum):
    """Lifecycle states for a local command."""

    RUNNING = "running"
    KILL_REQUESTED = "kill_requested"  # close() called, waiting for the process to die
    EXITED = "exited"  # Watcher saw the exit and released the PTY


Option = Callable[["LocalCommand"], None]


def with_close_timeout(timeout: float) -> Option:
    """Set how long close() waits before killing again.

    A negative timeout disables the re-kill: close() then waits for the
    process to exit after the first kill, however long that takes.
    """

    def _apply(lcmd: LocalCommand) -> None:
        lcmd._close_timeout = float(timeout)

    return _apply


class LocalCommand:
    """A child process attached to a PTY.

    Reads and writes go straight to the PTY. A watcher thread waits for
    the process to exit, then closes the PTY and sets the completion
    event; it is the only code that does either, and it does both once.

    Use :func:`create` rather than instantiating this directly.
    """

    def __init__(
        self,
        command: str,
        argv: Sequence[str],
        session: Session,
        close_timeout: float = DEFAULT_CLOSE_TIMEOUT,
    ) -> None:
        self._command = command
        self._argv = tuple(argv)
        self._session = session
        self._close_timeout = close_timeout

        self._status = CommandStatus.RUNNING
        self._status_lock = threading.Lock()
        self._exited = threading.Event()
        self._exit_code: int | None = None
        self._watcher: threading.Thread | None = None

    # -- lifecycle ---------------------------------------------------------

    def _start_watcher(self) -> None:
        if self._watcher is not None:
            raise RuntimeError("watcher already started")
        self._watcher = threading.Thread(
            target=self._watch,
            name=f"localcommand-watcher-{self._session.pid}",
            daemon=True,
        )
        self._watcher.start()

    def _watch(self) -> None:
        try:
            self._exit_code = self._session.wait()
        except Exception:
            logger.warning(
                "Waiting for pid %d failed", self._session.pid, exc_info=True
            )
        finally:
            try:
                self._session.close()
            finally:
                with self._status_lock:
                    self._status = CommandStatus.EXITED
                self._exited.set()
        logger.info(
            "Command %s exited: pid=%d code=%s",
            self._command,
            self._session.pid,
            self._exit_code,
        )

    def close(self) -> None:
        """Kill the process and block until the watcher has seen it exit.

        The kill is repeated every ``close_timeout`` seconds until the
        process is gone. Kill failures are expected (the process may
        already be dead) and are not raised. Several threads may call
        this at once; all of them return when the process has exited.
        """
        with self._status_lock:
            if self._status is CommandStatus.RUNNING:
                self._status = CommandStatus.KILL_REQUESTED
        self._kill()
        while not self._exited.wait(self._kill_interval()):
            logger.debug(
                "pid %d still running after %.3fs, killing again",
                self._session.pid,
                self._close_timeout,
            )
            self._kill()

    def _kill(self) -> None:
        try:
            self._session.kill()
        except OSError as e:
            logger.debug("Kill of pid %d failed: %s", self._session.pid, e)

    def _kill_interval(self) -> float | None:
        # None makes Event.wait block until the process exits
        if self._close_timeout < 0:
            return None
        return self._close_timeout

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the process to exit without killing it.

        Returns True once the PTY has been released, False on timeout.
        """
        return self._exited.wait(timeout)

    def __enter__(self) -> LocalCommand:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- stream ------------------------------------------------------------

    def read(self, size: int = 4096) -> bytes:
        """Read up to ``size`` bytes of terminal output.

        Errors come straight from the PTY: on Linux an ``OSError`` (EIO)
        once the process side is gone, ``ValueError`` after the PTY has
        been released.
        """
        return self._session.reader.read(size)

    def readinto(self, buffer: bytearray | memoryview) -> int:
        return self._session.reader.readinto(buffer)

    def write(self, data: bytes) -> int:
        """Write terminal input. May write fewer bytes than given."""
        return self._session.writer.write(data)

    def resize_terminal(self, width: int, height: int) -> None:
        try:
            self._session.resize(width, height)
        except (OSError, ValueError) as e:
            raise ResizeError(width, height, e) from e

    # -- accessors ---------------------------------------------------------

    def metadata(self) -> Mapping[str, Any]:
        """Values for window title templates: command, argv and pid."""
        return MappingProxyType(
            {
                "command": self._command,
                "argv": self._argv,
                "pid": self._session.pid,
            }
        )

    @property
    def command(self) -> str:
        return self._command

    @property
    def argv(self) -> tuple[str, ...]:
        return self._argv

    @property
    def pid(self) -> int:
        return self._session.pid

    @property
    def close_timeout(self) -> float:
        return self._close_timeout

    @property
    def status(self) -> CommandStatus:
        return self._status

    @property
    def alive(self) -> bool:
        return not self._exited.is_set()

    @property
    def exit_code(self) -> int | None:
        """Exit status, or None while running (or if waiting failed)."""
        return self._exit_code

    def __repr__(self) -> str:
        return (
            f"LocalCommand(command={self._command!r}, pid={self._session.pid}, "
            f"status={self._status.value})"
        )


def create(
    command: str,
    argv: Sequence[str] = (),
    headers: Mapping[str, Iterable[str]] | None = None,
    *options: Option,
    spawner: Spawner | None = None,
) -> LocalCommand:
    """Spawn ``command`` under a new 80x24 PTY and start watching it.

    Args:
        command: Program to run.
        argv: Arguments, not including the program itself.
        headers: Request headers, exported to the child as ``HTTP_*``.
        *options: Applied in order after the handle is built.
        spawner: PTY provider; defaults to :func:`localcommand.pty.spawn`.

    Returns:
        The running command.

    Raises:
        SpawnError: The command could not be started.
    """
    env = build_env(headers)
    spawner = spawner or spawn
    try:
        session = spawner(command, list(argv), env, DEFAULT_COLS, DEFAULT_ROWS)
    except Exception as e:
        raise SpawnError(command, e) from e

    lcmd = LocalCommand(command, argv, session)
    try:
        for option in options:
            option(lcmd)
    except BaseException:
        # Nothing watches the process yet, so reap it here
        with suppress(OSError):
            session.kill()
        session.wait()
        session.close()
        raise
    lcmd._start_watcher()

    logger.info(
        "Command started: pid=%d cmd=%s",
        session.pid,
        " ".join([command, *argv]),
    )
    return lcmd
