"""httpx-backed implementation of :class:`~req_cli.core.protocols.Transport`.

This module is the **only** place in the codebase that imports
``httpx``.  All httpx exceptions are caught here and re-raised as
:class:`~req_cli.exceptions.TransportError` — nothing raw escapes the
infrastructure boundary.
"""

from __future__ import annotations

import logging
from typing import Any

from req_cli.core.models import DEFAULT_TIMEOUT, Headers, HttpResponse
from req_cli.exceptions import EnvironmentError, TransportError

logger = logging.getLogger(__name__)


def _import_httpx() -> Any:
    """Import httpx lazily so ``--help`` works without it."""
    try:
        import httpx
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "httpx is not installed. Install with: pip install httpx",
        ) from exc
    return httpx


class HttpxTransport:
    """Concrete :class:`Transport` backed by ``httpx.Client``.

    Usage::

        transport = HttpxTransport(follow_redirects=True, timeout=10.0)
        response = transport.send("GET", "http://localhost:5000/", headers, None)

    Parameters
    ----------
    follow_redirects:
        Follow 3xx responses (the default, like the ``req`` CLI).
    timeout:
        Seconds for connect/read/write/pool; ``None`` disables it.
    client_factory:
        Optional zero-argument callable returning an ``httpx.Client``.
        Tests use it to inject an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        *,
        follow_redirects: bool = True,
        timeout: float | None = DEFAULT_TIMEOUT,
        client_factory: Any | None = None,
    ) -> None:
        self._follow_redirects = follow_redirects
        self._timeout = timeout
        self._client_factory = client_factory

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def send(
        self,
        method: str,
        url: str,
        headers: Headers,
        body: bytes | None,
    ) -> HttpResponse:
        """Perform the exchange and return the complete response.

        Raises
        ------
        TransportError
            For every httpx failure (connect, DNS, TLS, timeout,
            redirect loops, protocol errors).
        """
        httpx = _import_httpx()
        logger.debug("-> %s %s (%d headers, %s body bytes)",
                     method, url, len(headers), len(body) if body else 0)

        try:
            with self._open_client(httpx) as client:
                response = client.request(
                    method,
                    url,
                    headers=list(headers),
                    content=body,
                    follow_redirects=self._follow_redirects,
                )
                content = response.read()
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"timed out ({str(exc) or type(exc).__name__})",
                hint="Increase the limit with --timeout SECONDS.",
            ) from exc
        except httpx.ConnectError as exc:
            raise TransportError(
                f"could not connect to {url} ({exc})",
                hint="Check the host name and port, and that the server is running.",
            ) from exc
        except httpx.TooManyRedirects as exc:
            raise TransportError(
                f"too many redirects ({exc})",
                hint="Use -F/--no-follow to inspect the redirect.",
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        logger.debug("<- %s %s (%d bytes)", response.status_code, response.url, len(content))
        return HttpResponse(
            status=response.status_code,
            headers=Headers(items=tuple(
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in response.headers.raw
            )),
            body=content,
            reason=response.reason_phrase,
            http_version=response.http_version,
            url=str(response.url),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _open_client(self, httpx: Any) -> Any:
        if self._client_factory is not None:
            return self._client_factory()
        return httpx.Client(timeout=self._timeout)
