"""Tests for localcommand.config."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from localcommand.command import LocalCommand
from localcommand.config import LocalCommandConfig


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch) -> None:
    monkeypatch.setattr("localcommand.config.load_dotenv", lambda **kwargs: False)
    monkeypatch.delenv("LOCALCOMMAND_CLOSE_TIMEOUT", raising=False)


class TestLocalCommandConfig:
    def test_defaults(self) -> None:
        config = LocalCommandConfig()
        assert config.close_timeout == 10.0

    def test_load_defaults(self) -> None:
        assert LocalCommandConfig.load().close_timeout == 10.0

    def test_load_from_file(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"close_timeout": 321}))
        assert LocalCommandConfig.load(str(path)).close_timeout == 321

    def test_missing_file_ignored(self, tmp_path) -> None:
        config = LocalCommandConfig.load(str(tmp_path / "missing.json"))
        assert config.close_timeout == 10.0

    def test_env_overrides_file(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"close_timeout": 321}))
        monkeypatch.setenv("LOCALCOMMAND_CLOSE_TIMEOUT", "-1")
        assert LocalCommandConfig.load(str(path)).close_timeout == -1

    def test_invalid_value(self, monkeypatch) -> None:
        monkeypatch.setenv("LOCALCOMMAND_CLOSE_TIMEOUT", "soon")
        with pytest.raises(ValidationError):
            LocalCommandConfig.load()

    def test_options_set_close_timeout(self) -> None:
        lcmd = LocalCommand("/bin/cat", [], session=object())  # type: ignore[arg-type]
        for option in LocalCommandConfig(close_timeout=321).options():
            option(lcmd)
        assert lcmd.close_timeout == 321

