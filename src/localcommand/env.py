"""Child environment construction."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping

TERM = "xterm-256color"


def header_variable(key: str, values: Iterable[str]) -> str:
    """Map one request header to a CGI-style ``HTTP_*`` variable.

    >>> header_variable("X-Forwarded-For", ["10.0.0.1", "10.0.0.2"])
    'HTTP_X_FORWARDED_FOR=10.0.0.1,10.0.0.2'
    """
    name = "HTTP_" + key.upper().replace("-", "_")
    return f"{name}={','.join(values)}"


def build_env(
    headers: Mapping[str, Iterable[str]] | None = None,
    base: Mapping[str, str] | None = None,
) -> list[str]:
    """Build the ``KEY=VALUE`` environment for a spawned command.

    The inherited environment (``os.environ`` unless ``base`` is given)
    comes first, then ``TERM``, then one ``HTTP_*`` entry per header.
    Nothing is de-duplicated here: when a name repeats, the PTY provider
    keeps the last entry.
    """
    if base is None:
        base = os.environ
    env = [f"{key}={value}" for key, value in base.items()]
    env.append(f"TERM={TERM}")
    for key, values in (headers or {}).items():
        env.append(header_variable(key, values))
    return env
