"""Tests for localcommand.env (build_env, header_variable)."""

from __future__ import annotations

from localcommand.env import TERM, build_env, header_variable


# ---------------------------------------------------------------------------
# header_variable
# ---------------------------------------------------------------------------


class TestHeaderVariable:
    def test_upper_snake_name(self) -> None:
        assert header_variable("x-forwarded-for", ["1.2.3.4"]) == (
            "HTTP_X_FORWARDED_FOR=1.2.3.4"
        )

    def test_values_joined_with_comma(self) -> None:
        assert header_variable("Accept", ["a", "b", "c"]) == "HTTP_ACCEPT=a,b,c"

    def test_no_values(self) -> None:
        assert header_variable("Cookie", []) == "HTTP_COOKIE="

    def test_value_order_preserved(self) -> None:
        assert header_variable("X-Order", ["z", "a"]) == "HTTP_X_ORDER=z,a"


# ---------------------------------------------------------------------------
# build_env
# ---------------------------------------------------------------------------


class TestBuildEnv:
    def test_inherited_then_term(self) -> None:
        env = build_env(base={"HOME": "/root", "LANG": "C"})
        assert env == ["HOME=/root", "LANG=C", f"TERM={TERM}"]

    def test_term_forced(self) -> None:
        assert TERM == "xterm-256color"
        env = build_env(base={"TERM": "dumb"})
        # The override comes last, so it wins when the env is applied
        assert env == ["TERM=dumb", "TERM=xterm-256color"]

    def test_empty_headers(self) -> None:
        assert build_env({}, base={}) == ["TERM=xterm-256color"]
        assert build_env(None, base={}) == ["TERM=xterm-256color"]

    def test_one_entry_per_header(self) -> None:
        headers = {
            "User-Agent": ["curl/8.0"],
            "X-Forwarded-For": ["10.0.0.1", "10.0.0.2"],
        }
        env = build_env(headers, base={})
        assert env[0] == "TERM=xterm-256color"
        assert sorted(env[1:]) == [
            "HTTP_USER_AGENT=curl/8.0",
            "HTTP_X_FORWARDED_FOR=10.0.0.1,10.0.0.2",
        ]

    def test_headers_not_duplicated(self) -> None:
        headers = {f"X-H{i}": [str(i)] for i in range(20)}
        env = build_env(headers, base={})
        http = [e for e in env if e.startswith("HTTP_")]
        assert len(http) == 20
        assert len(set(http)) == 20

    def test_defaults_to_os_environ(self, monkeypatch) -> None:
        monkeypatch.setenv("LOCALCOMMAND_TEST_VAR", "yes")
        env = build_env()
        assert "LOCALCOMMAND_TEST_VAR=yes" in env
        assert env[-1] == "TERM=xterm-256color"
