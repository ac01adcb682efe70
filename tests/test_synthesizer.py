"""Tests for request synthesis (core/synthesizer.py).

Coverage:
* Method precedence (explicit > body flag > GET).
* Body-mode precedence and the query-vs-body routing of pairs.
* JSON inference vs. form string values.
* Auth precedence (last of --bearer/--token/-u wins).
* Header inference and explicit overrides.
* Save intent, invocation settings, and failure conditions.
"""

from __future__ import annotations

import base64
import json
from pathlib import Path
from urllib.parse import parse_qsl, urlsplit

import pytest

from req_cli.core.models import (
    BasicAuth,
    BearerAuth,
    BodyMode,
    EmptyBody,
    FormBody,
    JsonBody,
    RawBody,
    SaveTarget,
)
from req_cli.core.synthesizer import USER_AGENT, synthesize
from req_cli.exceptions import UsageError


def _query(url: str) -> list[tuple[str, str]]:
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


# ---------------------------------------------------------------------------
# Method
# ---------------------------------------------------------------------------

class TestMethod:
    def test_defaults_to_get(self) -> None:
        assert synthesize(["example.com"]).method == "GET"

    @pytest.mark.parametrize("flag", ["--json", "--form"])
    def test_body_flag_implies_post(self, flag: str) -> None:
        assert synthesize(["example.com", flag, "a=1"]).method == "POST"

    def test_raw_body_implies_post(self) -> None:
        assert synthesize(["example.com", "-d", "hello"]).method == "POST"

    def test_explicit_method_wins(self) -> None:
        assert synthesize(["example.com", "--json", "-m", "put"]).method == "PUT"

    def test_last_explicit_method_wins(self) -> None:
        assert synthesize(["example.com", "-X", "DELETE", "-m", "PATCH"]).method == "PATCH"

    def test_unknown_method_raises(self) -> None:
        with pytest.raises(UsageError, match="Unsupported method"):
            synthesize(["example.com", "-m", "BREW"])


# ---------------------------------------------------------------------------
# URL
# ---------------------------------------------------------------------------

class TestUrl:
    def test_bare_port(self) -> None:
        plan = synthesize([":5000/signup"])
        parts = urlsplit(plan.url)
        assert parts.hostname == "localhost"
        assert parts.port == 5000
        assert parts.path == "/signup"

    def test_missing_host_raises(self) -> None:
        with pytest.raises(UsageError, match="Missing URL"):
            synthesize(["--json"])

    def test_bad_host_raises(self) -> None:
        with pytest.raises(UsageError):
            synthesize([":notaport"])


# ---------------------------------------------------------------------------
# Pair routing
# ---------------------------------------------------------------------------

class TestQueryRouting:
    def test_get_pairs_go_to_query_in_order(self) -> None:
        plan = synthesize(["example.com", "b=2", "a=1"])
        assert isinstance(plan.body, EmptyBody)
        assert _query(plan.url) == [("b", "2"), ("a", "1")]

    def test_query_values_are_url_encoded(self) -> None:
        plan = synthesize(["jsonip.com", "apiKey=foo bar&x"])
        assert "apiKey=foo+bar%26x" in plan.url
        assert _query(plan.url) == [("apiKey", "foo bar&x")]

    def test_duplicate_keys_last_write_wins(self) -> None:
        plan = synthesize(["example.com", "a=1", "b=2", "a=3"])
        assert _query(plan.url) == [("a", "3"), ("b", "2")]

    def test_pairs_merge_with_query_in_fragment(self) -> None:
        plan = synthesize(["example.com/s?cache=0&q=x", "cache=1"])
        assert _query(plan.url) == [("cache", "1"), ("q", "x")]

    def test_delete_keeps_pairs_in_query(self) -> None:
        plan = synthesize(["example.com", "-m", "DELETE", "id=4"])
        assert _query(plan.url) == [("id", "4")]
        assert isinstance(plan.body, EmptyBody)


class TestBodyRouting:
    def test_json_pairs_never_reach_query(self) -> None:
        plan = synthesize(["example.com", "cache=0", "--json", "q=x"])
        assert plan.query == ()
        assert isinstance(plan.body, JsonBody)
        assert plan.body.fields == {"cache": 0, "q": "x"}

    def test_json_inference(self) -> None:
        plan = synthesize(["example.com", "--json", "a=1", "b=true", "c=x"])
        assert isinstance(plan.body, JsonBody)
        assert json.loads(plan.body.encode()) == {"a": 1, "b": True, "c": "x"}

    def test_out_of_range_number_is_sent_as_string(self) -> None:
        plan = synthesize(["example.com", "--json", "n=1e400"])
        assert json.loads(plan.body.encode()) == {"n": "1e400"}  # type: ignore[arg-type]

    def test_form_values_are_strings(self) -> None:
        plan = synthesize(["example.com", "--form", "a=1", "b=true", "c=x"])
        assert isinstance(plan.body, FormBody)
        assert plan.body.encode() == b"a=1&b=true&c=x"

    @pytest.mark.parametrize(
        ("args", "mode"),
        [
            (["--json", "--form"], BodyMode.FORM),
            (["--form", "--json"], BodyMode.JSON),
            (["--json", "--form", "--json"], BodyMode.JSON),
        ],
    )
    def test_later_body_flag_wins(self, args: list[str], mode: BodyMode) -> None:
        plan = synthesize(["example.com", *args, "a=1"])
        assert plan.body.mode is mode

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH"])
    def test_explicit_method_keeps_pairs_in_query(self, method: str) -> None:
        plan = synthesize(["example.com", "-m", method, "a=1"])
        assert plan.method == method
        assert isinstance(plan.body, EmptyBody)
        assert _query(plan.url) == [("a", "1")]
        assert "Content-Type" not in plan.headers

    def test_body_method_without_pairs_has_empty_body(self) -> None:
        plan = synthesize(["example.com", "-m", "POST"])
        assert isinstance(plan.body, EmptyBody)

    def test_nested_json(self) -> None:
        plan = synthesize(["example.com", "--json", "user.name=a", "user.age=3"])
        assert isinstance(plan.body, JsonBody)
        assert plan.body.fields == {"user": {"name": "a", "age": 3}}


class TestRawBody:
    def test_inline_data(self) -> None:
        plan = synthesize(["example.com", "--data", "hello world"])
        assert isinstance(plan.body, RawBody)
        assert plan.body.encode() == b"hello world"

    def test_raw_body_wins_over_json(self) -> None:
        plan = synthesize(["example.com", "--json", "-d", "raw", "a=1"])
        assert isinstance(plan.body, RawBody)
        assert _query(plan.url) == [("a", "1")]
        assert "Content-Type" not in plan.headers

    def test_file_body_uses_loader_and_guesses_type(self) -> None:
        loaded: list[Path] = []

        def loader(path: Path) -> bytes:
            loaded.append(path)
            return b'{"k": 1}'

        plan = synthesize(["example.com", "--file", "payload.json"], file_loader=loader)
        assert loaded == [Path("payload.json")]
        assert isinstance(plan.body, RawBody)
        assert plan.body.content == b'{"k": 1}'
        assert plan.headers.get("Content-Type") == "application/json"

    def test_unknown_file_type_is_octet_stream(self) -> None:
        plan = synthesize(
            ["example.com", "--file", "blob.unknownext"], file_loader=lambda _p: b"\x00",
        )
        assert plan.headers.get("content-type") == "application/octet-stream"

    def test_file_without_loader_raises(self) -> None:
        with pytest.raises(UsageError):
            synthesize(["example.com", "--file", "x.bin"])


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------

class TestHeaders:
    def test_json_headers(self) -> None:
        headers = synthesize(["example.com", "--json", "a=1"]).headers
        assert headers.get("Content-Type") == "application/json"
        assert headers.get("Accept") == "application/json"

    def test_form_content_type(self) -> None:
        headers = synthesize(["example.com", "--form", "a=1"]).headers
        assert headers.get("Content-Type") == "application/x-www-form-urlencoded"

    def test_user_agent_default(self) -> None:
        assert synthesize(["example.com"]).headers.get("user-agent") == USER_AGENT

    def test_explicit_header_overrides_inferred(self) -> None:
        headers = synthesize(
            ["example.com", "--json", "-H", "accept:text/plain", "a=1"],
        ).headers
        assert headers.get("Accept") == "text/plain"
        assert len([n for n, _ in headers if n.lower() == "accept"]) == 1

    def test_equals_separator_and_whitespace(self) -> None:
        headers = synthesize(["example.com", "-H", "X-Trace = abc"]).headers
        assert headers.get("x-trace") == "abc"

    def test_header_value_may_contain_separators(self) -> None:
        headers = synthesize(["example.com", "-H", "Accept=*/*;q=0.8"]).headers
        assert headers.get("Accept") == "*/*;q=0.8"

    def test_last_header_wins(self) -> None:
        headers = synthesize(["example.com", "-H", "X-A:1", "-H", "x-a:2"]).headers
        assert headers.get("X-A") == "2"

    def test_header_order_is_preserved(self) -> None:
        headers = synthesize(["example.com", "-H", "B:1", "-H", "A:2"]).headers
        names = [name for name, _ in headers]
        assert names.index("B") < names.index("A")

    def test_cookies_are_joined(self) -> None:
        headers = synthesize(["example.com", "-c", "a=1", "--cookie", "b=2"]).headers
        assert headers.get("Cookie") == "a=1; b=2"

    def test_header_without_separator_raises(self) -> None:
        with pytest.raises(UsageError, match="Invalid header"):
            synthesize(["example.com", "-H", "novalue"])

    def test_pair_keys_never_become_headers(self) -> None:
        headers = synthesize(["example.com", "Authorization=x"]).headers
        assert "Authorization" not in headers


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class TestAuth:
    def test_bearer(self) -> None:
        plan = synthesize(["example.com", "--bearer", "tok123"])
        assert plan.auth == BearerAuth(token="tok123")
        assert plan.headers.get("Authorization") == "Bearer tok123"

    def test_token_is_bearer_alias(self) -> None:
        plan = synthesize(["example.com", "--token", "tok123"])
        assert plan.headers.get("Authorization") == "Bearer tok123"

    def test_basic(self) -> None:
        plan = synthesize(["example.com", "-u", "alice:secret"])
        expected = base64.b64encode(b"alice:secret").decode("ascii")
        assert plan.auth == BasicAuth(user="alice", password="secret")
        assert plan.headers.get("Authorization") == f"Basic {expected}"

    def test_password_may_contain_colon(self) -> None:
        plan = synthesize(["example.com", "-u", "alice:se:cret"])
        assert plan.auth == BasicAuth(user="alice", password="se:cret")

    def test_user_without_colon_raises(self) -> None:
        with pytest.raises(UsageError, match="USER:PASS"):
            synthesize(["example.com", "-u", "alice"])

    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            (["--bearer", "a", "-u", "u:p"], BasicAuth(user="u", password="p")),
            (["-u", "u:p", "--token", "b"], BearerAuth(token="b")),
            (["--token", "b", "--bearer", "c"], BearerAuth(token="c")),
        ],
    )
    def test_last_auth_flag_wins(self, args: list[str], expected: object) -> None:
        assert synthesize(["example.com", *args]).auth == expected

    def test_explicit_authorization_header_wins(self) -> None:
        plan = synthesize(["example.com", "--bearer", "a", "-H", "Authorization: Token z"])
        assert plan.headers.get("Authorization") == "Token z"


# ---------------------------------------------------------------------------
# Save intent and settings
# ---------------------------------------------------------------------------

class TestSaveTarget:
    def test_absent_by_default(self) -> None:
        assert synthesize(["example.com"]).save_to_file is None

    def test_remote_name_records_intent_only(self) -> None:
        assert synthesize(["example.com/f.zip", "-O"]).save_to_file == SaveTarget()

    def test_explicit_output_path(self) -> None:
        plan = synthesize(["example.com", "-O", "-o", "out.bin"])
        assert plan.save_to_file == SaveTarget(path=Path("out.bin"))


class TestSettings:
    def test_defaults(self) -> None:
        settings = synthesize(["example.com"]).settings
        assert settings.pretty
        assert settings.follow_redirects
        assert not settings.verbose
        assert not settings.fail_on_error

    def test_flags(self) -> None:
        settings = synthesize(
            ["example.com", "-r", "-v", "--fail", "-F", "--timeout", "2.5"],
        ).settings
        assert not settings.pretty
        assert settings.verbose
        assert settings.fail_on_error
        assert not settings.follow_redirects
        assert settings.timeout == 2.5

    @pytest.mark.parametrize("value", ["abc", "0", "-1"])
    def test_invalid_timeout_raises(self, value: str) -> None:
        with pytest.raises(UsageError):
            synthesize(["example.com", "--timeout", value])


class TestImmutability:
    def test_plan_is_frozen(self) -> None:
        plan = synthesize(["example.com"])
        with pytest.raises(AttributeError):
            plan.method = "POST"  # type: ignore[misc]
