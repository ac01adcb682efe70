"""Pure response-body helpers used by the renderer.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.
"""

from __future__ import annotations

import json
from email.message import Message
from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

DEFAULT_CHARSET: str = "utf-8"
_BINARY_SNIFF_BYTES: int = 1024


# ---------------------------------------------------------------------------
# Content-type inspection
# ---------------------------------------------------------------------------

def _parse_header_params(value: str) -> Message:
    message = Message()
    message["content-type"] = value
    return message


def is_json_content_type(content_type: str) -> bool:
    """True for ``application/json`` and any ``+json`` media type.

    Matching is case-insensitive and ignores parameters such as
    ``charset``.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def charset_of(content_type: str) -> str:
    """Return the declared charset, falling back to UTF-8."""
    if not content_type:
        return DEFAULT_CHARSET
    charset = _parse_header_params(content_type).get_content_charset()
    return charset or DEFAULT_CHARSET


def decode_body(body: bytes, content_type: str) -> str:
    """Decode *body* for display; undecodable bytes are replaced."""
    try:
        return body.decode(charset_of(content_type), errors="replace")
    except LookupError:
        return body.decode(DEFAULT_CHARSET, errors="replace")


def looks_binary(body: bytes) -> bool:
    return b"\x00" in body[:_BINARY_SNIFF_BYTES]


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def format_json(body: bytes) -> str:
    """Re-serialize a JSON document with sorted keys and indentation.

    Raises
    ------
    ValueError
        If *body* is not valid JSON (including undecodable bytes).
    RecursionError
        If *body* nests deeper than the interpreter can decode.
    """
    document = json.loads(body)
    return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Save-file naming
# ---------------------------------------------------------------------------

def filename_from_disposition(content_disposition: str) -> str | None:
    """Extract ``filename*`` / ``filename`` from a Content-Disposition value."""
    if not content_disposition:
        return None
    message = Message()
    message["content-disposition"] = content_disposition
    return message.get_filename()


def derive_filename(content_disposition: str, url: str) -> str | None:
    """Pick a local file name for a downloaded body.

    The Content-Disposition filename wins over the last URL path
    segment.  Only the final path component is ever used; ``None`` is
    returned when no usable name exists.
    """
    candidates = (
        filename_from_disposition(content_disposition),
        unquote(urlsplit(url).path.rsplit("/", 1)[-1]) if url else None,
    )
    for candidate in candidates:
        name = _safe_basename(candidate)
        if name is not None:
            return name
    return None


def _safe_basename(candidate: str | None) -> str | None:
    if not candidate:
        return None
    name = PurePosixPath(candidate.replace("\\", "/")).name.strip()
    if name in ("", ".", ".."):
        return None
    return name
