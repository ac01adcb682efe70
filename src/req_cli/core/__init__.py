"""Core / service layer — argument interpretation and request synthesis.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from req_cli.core.exchange_service import ExchangeService
from req_cli.core.models import (
    BasicAuth,
    BearerAuth,
    BodyMode,
    EmptyBody,
    FormBody,
    Headers,
    HttpResponse,
    InvocationSettings,
    JsonBody,
    RawBody,
    RequestPlan,
    SaveTarget,
)
from req_cli.core.protocols import FileLoader, Transport
from req_cli.core.synthesizer import synthesize

__all__: list[str] = [
    "BasicAuth",
    "BearerAuth",
    "BodyMode",
    "EmptyBody",
    "ExchangeService",
    "FileLoader",
    "FormBody",
    "Headers",
    "HttpResponse",
    "InvocationSettings",
    "JsonBody",
    "RawBody",
    "RequestPlan",
    "SaveTarget",
    "Transport",
    "synthesize",
]
