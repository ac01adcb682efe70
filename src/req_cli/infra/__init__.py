"""Infrastructure layer — external system integration.

This layer wraps all interaction with httpx and the local filesystem.
Every raw third-party exception must be caught here and re-raised as
a :class:`~req_cli.exceptions.ReqError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from req_cli.infra.files import read_body_file, write_body
from req_cli.infra.httpx_transport import HttpxTransport

__all__: list[str] = [
    "HttpxTransport",
    "read_body_file",
    "write_body",
]
