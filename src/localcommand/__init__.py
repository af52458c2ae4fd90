"""Local commands — programs spawned under a PTY, exposed as byte streams.

A :class:`LocalCommand` can be read from, written to and resized like a
terminal, and :meth:`LocalCommand.close` always brings the process down,
killing it again and again until it is gone.
"""

from localcommand.command import (
    DEFAULT_CLOSE_TIMEOUT,
    CommandStatus,
    LocalCommand,
    Option,
    create,
    with_close_timeout,
)
from localcommand.env import build_env
from localcommand.errors import LocalCommandError, ResizeError, SpawnError

__all__ = [
    "DEFAULT_CLOSE_TIMEOUT",
    "CommandStatus",
    "LocalCommand",
    "LocalCommandError",
    "Option",
    "ResizeError",
    "SpawnError",
    "build_env",
    "create",
    "with_close_timeout",
]
