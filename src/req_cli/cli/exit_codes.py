"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The HTTP exchange completed (any status unless ``--fail`` is set)."""

USAGE_ERROR: int = 1
"""The command line could not be turned into a request."""

TRANSPORT_ERROR: int = 2
"""Network/TLS/DNS failure, or the user interrupted the request."""

FILE_ERROR: int = 3
"""The response body could not be saved to disk."""

HTTP_ERROR: int = 4
"""Non-2xx response while ``--fail`` was requested."""

ENVIRONMENT_ERROR: int = 69
"""A required runtime dependency (httpx, rich) is missing (EX_UNAVAILABLE)."""

UNEXPECTED_ERROR: int = 70
"""An unhandled exception escaped all known error boundaries (EX_SOFTWARE)."""
