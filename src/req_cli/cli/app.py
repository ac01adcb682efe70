"""CLI application entry point and request dispatch for req.

This module is the **sole error boundary** for the entire application.
It catches :class:`~req_cli.exceptions.ReqError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via
Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — argument interpretation belongs to the
  core synthesizer, the network exchange to the infrastructure layer.
* Environment detection (TTY, ``NO_COLOR``) happens here, once, and is
  handed to the renderer as :class:`~req_cli.cli.render.RenderOptions`.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Sequence
from typing import TextIO

from req_cli.cli import exit_codes
from req_cli.cli.console import configure_logging, console
from req_cli.core.models import InvocationSettings, RequestPlan
from req_cli.core.protocols import Transport
from req_cli.core.tokens import Flag, tokenize
from req_cli.exceptions import (
    EnvironmentError,
    FileSaveError,
    ReqError,
    TransportError,
    UsageError,
)
from req_cli.version import __version__

TransportFactory = Callable[[InvocationSettings], Transport]

_EXIT_CODES: tuple[tuple[type[ReqError], int], ...] = (
    (UsageError, exit_codes.USAGE_ERROR),
    (TransportError, exit_codes.TRANSPORT_ERROR),
    (FileSaveError, exit_codes.FILE_ERROR),
    (EnvironmentError, exit_codes.ENVIRONMENT_ERROR),
)


def exit_code_for(exc: ReqError) -> int:
    """Map a domain error to its process exit code."""
    for error_class, code in _EXIT_CODES:
        if isinstance(exc, error_class):
            return code
    return exit_codes.UNEXPECTED_ERROR


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _default_transport(settings: InvocationSettings) -> Transport:
    from req_cli.infra.httpx_transport import HttpxTransport

    return HttpxTransport(
        follow_redirects=settings.follow_redirects,
        timeout=settings.timeout,
    )


def _handle_help(stdout: TextIO) -> int:
    from req_cli.cli.help import render_help
    from req_cli.cli.render import RenderOptions

    render_help(stdout, color=RenderOptions.for_stream(stdout).color)
    return exit_codes.SUCCESS


def _handle_request(
    plan: RequestPlan,
    transport_factory: TransportFactory,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Send *plan* and render the response.

    Flow:
    1. Build render options from each output stream.
    2. Dump the request to stderr when ``-v`` is set.
    3. Perform the exchange through the transport.
    4. Render (or save) the response.
    5. Derive the exit code from ``--fail`` and the status.
    """
    from req_cli.cli.render import RenderOptions, ResponseRenderer
    from req_cli.core.exchange_service import ExchangeService

    renderer = ResponseRenderer(
        RenderOptions.for_stream(stdout),
        out=stdout,
        err=stderr,
        err_options=RenderOptions.for_stream(stderr),
    )
    if plan.settings.verbose:
        renderer.render_request(plan)

    service = ExchangeService(transport_factory(plan.settings))
    response = service.send(plan)
    outcome = renderer.render(response, plan)

    if plan.settings.fail_on_error and not outcome.is_success:
        return exit_codes.HTTP_ERROR
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    transport_factory: TransportFactory | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run the req CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    transport_factory:
        Builds the transport from the invocation settings; defaults to
        the httpx adapter.
    stdout, stderr:
        Output streams; default to the process streams.

    Returns
    -------
    int
        OS process exit code.

    Raises
    ------
    ReqError
        Left to :func:`cli` to report.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    out = sys.stdout if stdout is None else stdout
    err = sys.stderr if stderr is None else stderr

    if not args:
        return _handle_help(out)

    tokens = tokenize(args)
    requested = {token.dest for token in tokens if isinstance(token, Flag)}
    if "help" in requested:
        return _handle_help(out)
    if "version" in requested:
        print(f"req {__version__}", file=out)
        return exit_codes.SUCCESS

    from req_cli.core.synthesizer import synthesize_tokens
    from req_cli.infra.files import read_body_file

    plan = synthesize_tokens(tokens, file_loader=read_body_file)
    configure_logging(plan.settings.verbose)
    return _handle_request(plan, transport_factory or _default_transport, out, err)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def _report(exc: ReqError) -> None:
    console.error(str(exc))
    token = getattr(exc, "token", None)
    if token and token not in str(exc):
        console.error(f"offending argument: {token!r}")
    if exc.hint:
        console.hint(exc.hint)


def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except ReqError as exc:
        _report(exc)
        sys.exit(exit_code_for(exc))
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.TRANSPORT_ERROR)
    except BrokenPipeError:
        # Downstream reader went away (e.g. ``| head``); silence the
        # interpreter's flush of the dead stdout at exit.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(exit_codes.SUCCESS)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
