"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from req_cli.core.models import Headers, HttpResponse


class Transport(Protocol):
    """Contract for the component that performs the network exchange.

    Any object that implements :meth:`send` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def send(
        self,
        method: str,
        url: str,
        headers: Headers,
        body: bytes | None,
    ) -> HttpResponse:
        """Issue *method* against *url* and return the full response.

        Implementations must map all backend-specific exceptions to
        :class:`~req_cli.exceptions.TransportError`.  They must not
        retry.

        Raises
        ------
        TransportError
            On DNS failure, refused connection, TLS failure, timeout or
            any other failure to complete the exchange.
        """
        ...  # pragma: no cover


class FileLoader(Protocol):
    """Contract for reading a request body from disk (``--file``)."""

    def __call__(self, path: Path) -> bytes:
        """Return the bytes stored at *path*.

        Raises
        ------
        UsageError
            When *path* cannot be read.
        """
        ...  # pragma: no cover
