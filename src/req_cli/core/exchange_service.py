"""Core exchange service — hands a plan to the transport.

This service delegates the actual network round-trip to a
:class:`~req_cli.core.protocols.Transport` injected at construction
time.  It is responsible for:

* Encoding the plan's body into bytes.
* Delegating to the transport.
* Ensuring only :class:`~req_cli.exceptions.ReqError` subclasses escape.

Guarantees
----------
* Pure orchestration — no I/O of its own, no ``print()``.
* No httpx import.
"""

from __future__ import annotations

from req_cli.core.models import HttpResponse, RequestPlan
from req_cli.core.protocols import Transport
from req_cli.exceptions import ReqError, TransportError


class ExchangeService:
    """Stateless service that performs one request/response exchange.

    Parameters
    ----------
    transport:
        Any object satisfying the :class:`Transport` protocol.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport: Transport = transport

    def send(self, plan: RequestPlan) -> HttpResponse:
        """Send *plan* and return the response, whatever its status.

        Raises
        ------
        TransportError
            When the exchange could not be completed.
        """
        try:
            return self._transport.send(
                plan.method,
                plan.url,
                plan.headers,
                plan.body.encode(),
            )
        except ReqError:
            # Already typed; propagate unchanged.
            raise
        except Exception as exc:
            raise TransportError(f"unexpected transport error: {exc}") from exc
