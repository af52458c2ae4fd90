"""PTY provider — spawn programs attached to a pseudo-terminal.

Every spawned program gets its own PTY and process group, so a single
signal reaches the whole process tree.
"""

from localcommand.pty.session import PTYSession, Session, Spawner, env_to_dict, spawn

__all__ = [
    "PTYSession",
    "Session",
    "Spawner",
    "env_to_dict",
    "spawn",
]
