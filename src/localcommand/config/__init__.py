"""Configuration — Pydantic model for local command settings."""

from __future__ import annotations

import json
import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from localcommand.command import DEFAULT_CLOSE_TIMEOUT, Option, with_close_timeout


class LocalCommandConfig(BaseModel):
    """Settings applied to every command started with :meth:`options`."""

    close_timeout: float = Field(
        default=DEFAULT_CLOSE_TIMEOUT,
        description=(
            "Seconds close() waits for the process to exit before killing it "
            "again. Negative disables the re-kill."
        ),
    )

    def options(self) -> list[Option]:
        """Options to pass to :func:`localcommand.create`."""
        return [with_close_timeout(self.close_timeout)]

    @classmethod
    def load(cls, config_path: str | None = None) -> LocalCommandConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            LOCALCOMMAND_CLOSE_TIMEOUT  - Override close timeout (seconds)
        """
        load_dotenv(override=True)

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            with open(config_path) as f:
                config_data = json.load(f)

        env_close_timeout = os.environ.get("LOCALCOMMAND_CLOSE_TIMEOUT")
        if env_close_timeout:
            config_data["close_timeout"] = env_close_timeout

        return cls.model_validate(config_data)
