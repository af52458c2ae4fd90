"""Errors raised by local command handles."""

from __future__ import annotations


class LocalCommandError(Exception):
    """Base class for local command failures."""


class SpawnError(LocalCommandError):
    """The command could not be started under a PTY. No handle exists."""

    def __init__(self, command: str, cause: BaseException) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"failed to start command `{command}`: {cause}")


class ResizeError(LocalCommandError):
    """The terminal could not be resized, usually because the process exited."""

    def __init__(self, width: int, height: int, cause: BaseException) -> None:
        self.width = width
        self.height = height
        self.cause = cause
        super().__init__(f"failed to resize terminal to {width}x{height}: {cause}")
