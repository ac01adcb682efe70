"""Request synthesis — classified tokens → :class:`RequestPlan`.

The synthesizer makes a single left-to-right pass over the tokens to
partition them, then resolves every field of the plan through an
ordered chain of rules.  Each rule either returns a value or declines
with ``None``; the first rule that answers wins.

Precedence
----------
* Method:    explicit ``-m`` > body flag implies POST > GET
* Body mode: raw body > last of ``--json``/``--form`` > empty
* Pairs:     query string when the body mode is empty or raw,
             otherwise fields of the JSON/form body — decided once
* Auth:      last of ``--bearer``/``--token``/``-u``
* Headers:   User-Agent < body-mode headers < auth < cookies < ``-H``

Guarantees
----------
* Pure — no I/O.  Reading ``--file`` is delegated to an injected
  :class:`~req_cli.core.protocols.FileLoader`.
* Only :class:`~req_cli.exceptions.UsageError` escapes.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from req_cli.core.fields import build_json_object, merge_flat
from req_cli.core.models import (
    DEFAULT_TIMEOUT,
    Auth,
    BasicAuth,
    BearerAuth,
    Body,
    BodyMode,
    EmptyBody,
    FormBody,
    Headers,
    InvocationSettings,
    JsonBody,
    RawBody,
    RequestPlan,
    SaveTarget,
)
from req_cli.core.protocols import FileLoader
from req_cli.core.tokens import Flag, HostFragment, Pair, Token, tokenize
from req_cli.core.url import resolve_url
from req_cli.exceptions import UsageError
from req_cli.version import __version__

METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD")

JSON_CONTENT_TYPE: str = "application/json"
FORM_CONTENT_TYPE: str = "application/x-www-form-urlencoded"
OCTET_STREAM: str = "application/octet-stream"
USER_AGENT: str = f"req/{__version__}"

_T = TypeVar("_T")


# ---------------------------------------------------------------------------
# Partitioned arguments
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class _Arguments:
    """Tokens partitioned by kind, each list in command-line order."""

    host: HostFragment | None = None
    flags: list[Flag] = field(default_factory=list)
    pairs: list[Pair] = field(default_factory=list)

    def last(self, *dests: str) -> Flag | None:
        """Return the last flag whose destination is one of *dests*."""
        for flag in reversed(self.flags):
            if flag.dest in dests:
                return flag
        return None

    def every(self, dest: str) -> list[Flag]:
        return [flag for flag in self.flags if flag.dest == dest]

    def has(self, dest: str) -> bool:
        return self.last(dest) is not None


def _partition(tokens: Sequence[Token]) -> _Arguments:
    arguments = _Arguments()
    for token in tokens:
        if isinstance(token, HostFragment):
            arguments.host = token
        elif isinstance(token, Flag):
            arguments.flags.append(token)
        else:
            arguments.pairs.append(token)
    return arguments


# ---------------------------------------------------------------------------
# Method rules
# ---------------------------------------------------------------------------

MethodRule = Callable[[_Arguments], str | None]


def _explicit_method(arguments: _Arguments) -> str | None:
    flag = arguments.last("method")
    if flag is None:
        return None
    method = (flag.value or "").strip().upper()
    if method not in METHODS:
        raise UsageError(
            f"Unsupported method: {flag.value!r}",
            token=flag.value,
            hint=f"Method must be one of: {', '.join(METHODS)}",
        )
    return method


def _implied_by_body(arguments: _Arguments) -> str | None:
    if arguments.last("json", "form", "data", "file") is not None:
        return "POST"
    return None


def _default_method(_arguments: _Arguments) -> str | None:
    return "GET"


METHOD_RULES: tuple[MethodRule, ...] = (
    _explicit_method,
    _implied_by_body,
    _default_method,
)


# ---------------------------------------------------------------------------
# Body-mode rules
# ---------------------------------------------------------------------------

BodyModeRule = Callable[[_Arguments, str], BodyMode | None]


def _raw_body_mode(arguments: _Arguments, _method: str) -> BodyMode | None:
    return BodyMode.RAW if arguments.last("data", "file") is not None else None


def _body_flag_mode(arguments: _Arguments, _method: str) -> BodyMode | None:
    flag = arguments.last("json", "form")
    if flag is None:
        return None
    return BodyMode.JSON if flag.dest == "json" else BodyMode.FORM


def _empty_mode(_arguments: _Arguments, _method: str) -> BodyMode | None:
    return BodyMode.EMPTY


BODY_MODE_RULES: tuple[BodyModeRule, ...] = (
    _raw_body_mode,
    _body_flag_mode,
    _empty_mode,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def synthesize(
    args: Sequence[str],
    *,
    file_loader: FileLoader | None = None,
) -> RequestPlan:
    """Turn raw shell tokens into a :class:`RequestPlan`.

    Raises
    ------
    UsageError
        If a token cannot be classified, a flag is missing its value,
        the host fragment cannot be resolved, or a flag value is malformed.
    """
    return synthesize_tokens(tokenize(args), file_loader=file_loader)


def synthesize_tokens(
    tokens: Sequence[Token],
    *,
    file_loader: FileLoader | None = None,
) -> RequestPlan:
    """Resolve already classified tokens into a :class:`RequestPlan`."""
    arguments = _partition(tokens)
    if arguments.host is None:
        raise UsageError(
            "Missing URL.",
            hint="Usage: req <host[:port]/path> [key=value ...] [options]",
        )

    method = _first(rule(arguments) for rule in METHOD_RULES)
    base_url, initial_query = resolve_url(arguments.host.text)
    mode = _first(rule(arguments, method) for rule in BODY_MODE_RULES)

    if mode in (BodyMode.EMPTY, BodyMode.RAW):
        query = merge_flat(arguments.pairs, initial_query)
        raw_flag = arguments.last("data", "file")
        body = _raw_body(raw_flag, file_loader) if raw_flag is not None else EmptyBody()
    else:
        query = tuple(initial_query)
        body = _structured_body(mode, arguments.pairs)

    auth = _resolve_auth(arguments)
    headers = _resolve_headers(arguments, body, auth)

    return RequestPlan(
        method=method,
        base_url=base_url,
        query=query,
        headers=headers,
        auth=auth,
        body=body,
        save_to_file=_resolve_save_target(arguments),
        settings=_resolve_settings(arguments),
    )


# ---------------------------------------------------------------------------
# Field resolvers
# ---------------------------------------------------------------------------

def _first(candidates: Iterable[_T | None]) -> _T:
    """Return the first non-``None`` value of a rule chain."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    raise AssertionError("rule chain has no default rule")


def _structured_body(mode: BodyMode, pairs: list[Pair]) -> Body:
    if mode is BodyMode.JSON:
        return JsonBody(fields=build_json_object(pairs))
    return FormBody(fields=merge_flat(pairs))


def _raw_body(flag: Flag, file_loader: FileLoader | None) -> RawBody:
    value = flag.value or ""
    if flag.dest == "data":
        return RawBody(content=value.encode("utf-8"))

    if file_loader is None:
        raise UsageError("Reading the request body from a file is not available.", token=flag.token)
    path = Path(value)
    content_type, _encoding = mimetypes.guess_type(path.name)
    return RawBody(content=file_loader(path), content_type=content_type or OCTET_STREAM)


def _resolve_auth(arguments: _Arguments) -> Auth | None:
    flag = arguments.last("bearer", "token", "user")
    if flag is None:
        return None
    value = flag.value or ""
    if flag.dest in ("bearer", "token"):
        return BearerAuth(token=value)

    user, sep, password = value.partition(":")
    if not sep:
        raise UsageError(
            f"Invalid credentials for {flag.token}: expected USER:PASS",
            token=value,
            hint="Example: -u alice:secret",
        )
    return BasicAuth(user=user, password=password)


def _split_header(flag: Flag) -> tuple[str, str]:
    value = flag.value or ""
    cut = min((i for i in (value.find(":"), value.find("=")) if i >= 0), default=-1)
    name = value[:cut].strip() if cut >= 0 else ""
    if not name:
        raise UsageError(
            f"Invalid header: {value!r}",
            token=value,
            hint="Headers must be NAME:VALUE or NAME=VALUE.",
        )
    return name, value[cut + 1:].strip()


def _resolve_headers(arguments: _Arguments, body: Body, auth: Auth | None) -> Headers:
    layers: list[tuple[str, str]] = [("User-Agent", USER_AGENT)]

    if isinstance(body, JsonBody):
        layers += [("Content-Type", JSON_CONTENT_TYPE), ("Accept", JSON_CONTENT_TYPE)]
    elif isinstance(body, FormBody):
        layers.append(("Content-Type", FORM_CONTENT_TYPE))
    elif isinstance(body, RawBody) and body.content_type:
        layers.append(("Content-Type", body.content_type))

    if auth is not None:
        layers.append(("Authorization", auth.header_value()))

    cookies = [flag.value or "" for flag in arguments.every("cookie")]
    if cookies:
        layers.append(("Cookie", "; ".join(cookies)))

    layers += [_split_header(flag) for flag in arguments.every("header")]

    merged: dict[str, tuple[str, str]] = {}
    for name, value in layers:
        merged[name.lower()] = (name, value)
    return Headers(items=tuple(merged.values()))


def _resolve_save_target(arguments: _Arguments) -> SaveTarget | None:
    output = arguments.last("output")
    if output is not None:
        return SaveTarget(path=Path(output.value or ""))
    if arguments.has("remote_name"):
        return SaveTarget()
    return None


def _resolve_settings(arguments: _Arguments) -> InvocationSettings:
    timeout: float | None = DEFAULT_TIMEOUT
    flag = arguments.last("timeout")
    if flag is not None:
        try:
            timeout = float(flag.value or "")
        except ValueError as exc:
            raise UsageError(f"Invalid timeout: {flag.value!r}", token=flag.value) from exc
        if timeout <= 0:
            raise UsageError("Timeout must be greater than zero.", token=flag.value)

    return InvocationSettings(
        pretty=not arguments.has("raw"),
        verbose=arguments.has("verbose"),
        fail_on_error=arguments.has("fail"),
        follow_redirects=not arguments.has("no_follow"),
        timeout=timeout,
    )
