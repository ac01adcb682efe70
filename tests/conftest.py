"""Shared pytest fixtures and configuration for the req test suite.

Guidelines
----------
* No internet access in any test.
* httpx is exercised only through ``httpx.MockTransport``.
* Core tests must be pure — no side effects.
* Tests must not depend on OS state (TTY, ``NO_COLOR``, cwd).
"""

from __future__ import annotations

import io
from collections.abc import Callable
from typing import Any

import pytest

from req_cli.core.models import Headers, HttpResponse


class FakeTransport:
    """Records the last exchange and replays a canned response."""

    def __init__(self, response: HttpResponse | Exception) -> None:
        self._response = response
        self.calls: list[dict[str, Any]] = []

    def send(
        self,
        method: str,
        url: str,
        headers: Headers,
        body: bytes | None,
    ) -> HttpResponse:
        self.calls.append({"method": method, "url": url, "headers": headers, "body": body})
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


def make_response(
    status: int = 200,
    body: bytes = b"",
    headers: tuple[tuple[str, str], ...] = (),
    *,
    reason: str = "OK",
    url: str = "http://localhost:5000/",
) -> HttpResponse:
    return HttpResponse(
        status=status,
        headers=Headers(items=headers),
        body=body,
        reason=reason,
        url=url,
    )


@pytest.fixture(name="make_response")
def make_response_fixture() -> Callable[..., HttpResponse]:
    return make_response


@pytest.fixture()
def streams() -> tuple[io.StringIO, io.StringIO]:
    return io.StringIO(), io.StringIO()


@pytest.fixture()
def fake_transport_factory() -> Callable[[HttpResponse | Exception], Callable[..., FakeTransport]]:
    """Build a ``transport_factory`` for :func:`req_cli.cli.app.main`."""

    def build(response: HttpResponse | Exception) -> Callable[..., FakeTransport]:
        transport = FakeTransport(response)

        def factory(_settings: object) -> FakeTransport:
            return transport

        factory.transport = transport  # type: ignore[attr-defined]
        return factory

    return build
