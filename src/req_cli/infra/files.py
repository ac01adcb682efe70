"""Infrastructure: local file access for request and response bodies.

Rules
-----
* Scoped acquisition only — every handle is opened with ``with`` so it
  is flushed and closed on every exit path.
* ``OSError`` never escapes; it is re-raised as a typed
  :class:`~req_cli.exceptions.ReqError` subclass.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import logging
from pathlib import Path

from req_cli.exceptions import FileSaveError, UsageError

logger = logging.getLogger(__name__)


def read_body_file(path: Path) -> bytes:
    """Read a request body for ``--file`` (satisfies ``FileLoader``)."""
    try:
        with path.open("rb") as handle:
            return handle.read()
    except OSError as exc:
        raise UsageError(
            f"Cannot read {path}: {exc.strerror or exc}",
            token=str(path),
        ) from exc


def write_body(path: Path, body: bytes) -> int:
    """Write *body* to *path*, replacing any existing file.

    Returns the number of bytes written.

    Raises
    ------
    FileSaveError
        When the file cannot be created or fully written.
    """
    try:
        with path.open("wb") as handle:
            written = handle.write(body)
    except OSError as exc:
        raise FileSaveError(
            f"Cannot save response to {path}: {exc.strerror or exc}",
            hint="Check that the directory exists and is writable.",
        ) from exc
    logger.debug("saved %d bytes to %s", written, path)
    return written
