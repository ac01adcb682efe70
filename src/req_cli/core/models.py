"""Domain models for req.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and trivial encoding.  They carry zero I/O
and must remain pure across the entire lifecycle.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar
from urllib.parse import urlencode

DEFAULT_TIMEOUT: float = 30.0
"""Seconds before the transport gives up on connect or read."""


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Headers:
    """Ordered header collection with case-insensitive lookup.

    The order of ``items`` is the order on the wire.  Synthesized
    request headers have unique names; response headers may repeat
    (``Set-Cookie``), in which case :meth:`get` returns the first.
    """

    items: tuple[tuple[str, str], ...] = ()

    def get(self, name: str, default: str | None = None) -> str | None:
        wanted = name.lower()
        for key, value in self.items:
            if key.lower() == wanted:
                return value
        return default

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BearerAuth:
    """Token credential sent as ``Authorization: Bearer <token>``."""

    token: str

    def header_value(self) -> str:
        return f"Bearer {self.token}"


@dataclass(frozen=True, slots=True)
class BasicAuth:
    """User/password credential sent as ``Authorization: Basic <b64>``."""

    user: str
    password: str = field(repr=False)

    def header_value(self) -> str:
        raw = f"{self.user}:{self.password}".encode("utf-8")
        return f"Basic {base64.b64encode(raw).decode('ascii')}"


Auth = BearerAuth | BasicAuth


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class BodyMode(str, Enum):
    """Which body representation is active for the outgoing request."""

    EMPTY = "empty"
    JSON = "json"
    FORM = "form"
    RAW = "raw"


@dataclass(frozen=True, slots=True)
class EmptyBody:
    mode: ClassVar[BodyMode] = BodyMode.EMPTY

    def encode(self) -> bytes | None:
        return None


@dataclass(frozen=True, slots=True)
class JsonBody:
    """JSON object body; values already carry their inferred types."""

    fields: dict[str, Any]
    mode: ClassVar[BodyMode] = BodyMode.JSON

    def encode(self) -> bytes:
        return json.dumps(
            self.fields, ensure_ascii=False, allow_nan=False, separators=(",", ":"),
        ).encode("utf-8")


@dataclass(frozen=True, slots=True)
class FormBody:
    """URL-encoded form body; every value is a string."""

    fields: tuple[tuple[str, str], ...]
    mode: ClassVar[BodyMode] = BodyMode.FORM

    def encode(self) -> bytes:
        return urlencode(self.fields).encode("ascii")


@dataclass(frozen=True, slots=True)
class RawBody:
    """Verbatim bytes supplied with ``--data`` or ``--file``."""

    content: bytes = field(repr=False)
    content_type: str | None = None
    mode: ClassVar[BodyMode] = BodyMode.RAW

    def encode(self) -> bytes:
        return self.content


Body = EmptyBody | JsonBody | FormBody | RawBody


# ---------------------------------------------------------------------------
# Invocation-level settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SaveTarget:
    """Intent to save the response body.

    ``path`` is ``None`` for ``-O``: the name is derived from the
    response once it arrives.
    """

    path: Path | None = None


@dataclass(frozen=True, slots=True)
class InvocationSettings:
    """Flags that steer sending and rendering rather than the request."""

    pretty: bool = True
    verbose: bool = False
    fail_on_error: bool = False
    follow_redirects: bool = True
    timeout: float | None = DEFAULT_TIMEOUT


# ---------------------------------------------------------------------------
# The synthesized request
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RequestPlan:
    """Fully resolved, immutable description of the request to send."""

    method: str
    base_url: str
    """Scheme, host, port and path — no query string."""

    query: tuple[tuple[str, str], ...] = ()
    headers: Headers = Headers()
    auth: Auth | None = None
    body: Body = EmptyBody()
    save_to_file: SaveTarget | None = None
    settings: InvocationSettings = InvocationSettings()

    @property
    def url(self) -> str:
        """Absolute URL with the encoded query appended."""
        if not self.query:
            return self.base_url
        return f"{self.base_url}?{urlencode(self.query)}"


# ---------------------------------------------------------------------------
# Transport result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Response returned by the transport collaborator."""

    status: int
    headers: Headers
    body: bytes = field(repr=False)
    reason: str = ""
    http_version: str = "HTTP/1.1"
    url: str = ""
    """Final URL after any redirects."""

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "") or ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300
