"""Host-fragment → absolute URL resolution.

Pure string handling; never touches DNS or the network.

Accepted shapes
---------------
* ``:5000/path``            → ``http://localhost:5000/path``
* ``localhost:3000``        → ``http://localhost:3000``
* ``example.com/a?b=c``     → ``http://example.com/a`` + query ``b=c``
* ``https://example.com``   → unchanged
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, urlsplit, urlunsplit

from req_cli.exceptions import UsageError

DEFAULT_SCHEME: str = "http"
DEFAULT_HOST: str = "localhost"
SUPPORTED_SCHEMES: frozenset[str] = frozenset({"http", "https"})

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def resolve_url(fragment: str) -> tuple[str, list[tuple[str, str]]]:
    """Resolve *fragment* into ``(base_url, query_pairs)``.

    The base URL carries scheme, host, port and path only.  Any query
    already present in the fragment is returned separately, in order,
    so later ``key=value`` pairs can be merged into it.

    Raises
    ------
    UsageError
        If the fragment is empty, contains whitespace, uses an
        unsupported scheme, or has no host or an invalid port.
    """
    text = fragment.strip()
    if not text:
        raise UsageError("URL must not be empty.", token=fragment)
    if any(char.isspace() for char in text):
        raise UsageError(f"Invalid URL: {fragment!r}", token=fragment)

    if text.startswith(":"):
        text = DEFAULT_HOST + text
    if not _SCHEME_RE.match(text):
        text = f"{DEFAULT_SCHEME}://{text}"

    parts = urlsplit(text)
    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise UsageError(
            f"Unsupported URL scheme: {parts.scheme!r}",
            token=fragment,
            hint="Only http:// and https:// URLs are supported.",
        )
    if not parts.hostname:
        raise UsageError(f"URL has no host: {fragment!r}", token=fragment)
    try:
        parts.port
    except ValueError as exc:
        raise UsageError(f"Invalid port in URL: {fragment!r}", token=fragment) from exc

    base_url = urlunsplit((scheme, parts.netloc, parts.path, "", ""))
    query = parse_qsl(parts.query, keep_blank_values=True)
    return base_url, query
