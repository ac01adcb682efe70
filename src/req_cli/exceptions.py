"""Custom exception hierarchy for req.

All exceptions that cross layer boundaries must inherit from
:class:`ReqError`.  Raw third-party exceptions (e.g. from httpx) must
NEVER propagate beyond the infrastructure layer — they must be caught
and re-raised as a typed subclass defined here.

Hierarchy
---------
ReqError
├── UsageError
├── TransportError
├── FileSaveError
├── RenderWarning
└── EnvironmentError
"""

from __future__ import annotations


class ReqError(Exception):
    """Base exception for all req errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Argument interpretation -----------------------------------------------

class UsageError(ReqError):
    """Raised when the command line cannot be turned into a request."""

    def __init__(
        self,
        message: str,
        *,
        token: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.token: str | None = token
        """The offending shell token, when one can be named."""


# --- Network ---------------------------------------------------------------

class TransportError(ReqError):
    """Raised when the HTTP exchange itself fails (DNS, TLS, timeout…)."""

    def __init__(self, cause: str, *, hint: str | None = None) -> None:
        super().__init__(f"Request failed: {cause}", hint=hint)
        self.cause: str = cause


# --- Output ----------------------------------------------------------------

class FileSaveError(ReqError):
    """Raised when the response body cannot be written to disk."""


class RenderWarning(ReqError):
    """Non-fatal rendering problem.

    Never escapes the renderer: it is collected into the render outcome
    and printed to standard error while rendering carries on.
    """


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(ReqError):
    """Raised when a required runtime dependency is not available."""
