"""Response rendering — status, headers and body for a human reader.

This module lives in the CLI layer: it writes to the streams it is
given and may import from ``infra`` to persist a body.  All terminal
styling decisions come from :class:`RenderOptions`, which the caller
builds once; nothing here inspects ``sys.stdout`` or the environment.

Behaviour
---------
* Status line and headers are always printed.
* ``-O``/``-o``: the body goes to a file instead of the terminal.  A
  write failure raises :class:`~req_cli.exceptions.FileSaveError`
  after status and headers were already shown.
* JSON bodies (``application/json`` or ``+json``) are re-serialized
  with sorted keys and colored.  A body that claims to be JSON but is
  not is printed verbatim with a warning.
* Non-2xx responses render exactly like 2xx ones.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from req_cli.cli.console import get_rich_console
from req_cli.core.formatting import (
    decode_body,
    derive_filename,
    format_json,
    is_json_content_type,
    looks_binary,
)
from req_cli.core.models import HttpResponse, RequestPlan, SaveTarget
from req_cli.exceptions import EnvironmentError, RenderWarning
from req_cli.infra.files import write_body


# ---------------------------------------------------------------------------
# Options and outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Terminal formatting configuration, passed in explicitly."""

    color: bool = False
    color_system: str | None = "auto"

    @classmethod
    def for_stream(
        cls,
        stream: TextIO,
        environ: Mapping[str, str] | None = None,
    ) -> RenderOptions:
        """Color only real terminals, and honour ``NO_COLOR``."""
        env = os.environ if environ is None else environ
        isatty = getattr(stream, "isatty", None)
        is_tty = bool(isatty and isatty())
        return cls(color=is_tty and not env.get("NO_COLOR"))


@dataclass(frozen=True, slots=True)
class RenderOutcome:
    """What happened while rendering one response."""

    status: int
    saved_to: Path | None = None
    warnings: tuple[str, ...] = ()

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


# ---------------------------------------------------------------------------
# Stream adapter
# ---------------------------------------------------------------------------

def _status_style(status: int) -> str:
    if status < 300:
        return "bold green"
    if status < 400:
        return "bold yellow"
    return "bold red"


class _Stream:
    """Write plain or Rich-styled text to one stream."""

    def __init__(self, stream: TextIO, options: RenderOptions) -> None:
        self._stream = stream
        self._console: Any = None
        if options.color:
            try:
                self._console = get_rich_console(
                    stream, color=True, color_system=options.color_system,
                )
            except EnvironmentError:
                self._console = None

    def line(self, *parts: tuple[str, str | None]) -> None:
        """Write one line made of ``(text, style)`` segments."""
        if self._console is None:
            self._stream.write("".join(text for text, _ in parts) + "\n")
            return
        from rich.text import Text

        rendered = Text()
        for text, style in parts:
            rendered.append(text, style=style or "")
        self._console.print(rendered)

    def json(self, formatted: str) -> None:
        if self._console is None:
            self._stream.write(formatted + "\n")
            return
        from rich.highlighter import JSONHighlighter
        from rich.text import Text

        rendered = Text(formatted)
        JSONHighlighter().highlight(rendered)
        self._console.print(rendered)

    def verbatim(self, text: str) -> None:
        self._stream.write(text if text.endswith("\n") else text + "\n")
        self._stream.flush()

    def binary(self, data: bytes) -> None:
        buffer = getattr(self._stream, "buffer", None)
        if buffer is None:
            self.verbatim(data.decode("utf-8", errors="replace"))
            return
        self._stream.flush()
        buffer.write(data)
        buffer.flush()


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------

class ResponseRenderer:
    """Render responses (and, with ``-v``, requests) to terminal streams.

    Parameters
    ----------
    options:
        Formatting configuration for *out*; see :meth:`RenderOptions.for_stream`.
    out:
        Destination for status, headers and body (normally stdout).
    err:
        Destination for warnings and the verbose request dump.
    err_options:
        Formatting configuration for *err*; defaults to *options*.
    """

    def __init__(
        self,
        options: RenderOptions,
        *,
        out: TextIO,
        err: TextIO,
        err_options: RenderOptions | None = None,
    ) -> None:
        self._options = options
        self._out = _Stream(out, options)
        self._err = _Stream(err, options if err_options is None else err_options)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, response: HttpResponse, plan: RequestPlan) -> RenderOutcome:
        """Render *response*; save its body when *plan* asks for it.

        Raises
        ------
        FileSaveError
            When the body cannot be written to the resolved path.
        """
        warnings: list[str] = []
        self._render_head(response)

        if plan.save_to_file is not None:
            try:
                target = self._resolve_save_path(plan.save_to_file, response, plan)
            except RenderWarning as warning:
                self._warn(str(warning), warnings)
            else:
                written = write_body(target, response.body)
                self._err.line((f"Saved {written} bytes to {target}", "dim"))
                return RenderOutcome(
                    status=response.status, saved_to=target, warnings=tuple(warnings),
                )

        self._render_body(response, plan, warnings)
        return RenderOutcome(status=response.status, warnings=tuple(warnings))

    def render_request(self, plan: RequestPlan) -> None:
        """Dump the outgoing request to the error stream (``-v``)."""
        self._err.line(("> ", "dim"), (f"{plan.method} {plan.url}", "bold"))
        for name, value in plan.headers:
            self._err.line(("> ", "dim"), (f"{name}: ", "cyan"), (value, None))

        payload = plan.body.encode()
        if payload:
            if looks_binary(payload):
                self._err.line((f"<{len(payload)} bytes>", "dim"))
            else:
                self._err.verbatim(payload.decode("utf-8", errors="replace"))
        self._err.line(("=" * 10, "dim"))

    # ------------------------------------------------------------------
    # Head
    # ------------------------------------------------------------------

    def _render_head(self, response: HttpResponse) -> None:
        status_text = f"{response.status} {response.reason}".rstrip()
        self._out.line(
            (f"{response.http_version} ", "blue"),
            (status_text, _status_style(response.status)),
        )
        for name, value in response.headers:
            self._out.line((f"{name}: ", "cyan"), (value, None))

    # ------------------------------------------------------------------
    # Body
    # ------------------------------------------------------------------

    def _render_body(
        self,
        response: HttpResponse,
        plan: RequestPlan,
        warnings: list[str],
    ) -> None:
        body = response.body
        if not body:
            return
        self._out.line()

        if looks_binary(body):
            if self._options.color:
                self._warn(
                    f"Binary response body not shown ({len(body)} bytes); "
                    "use -O or -o FILE to save it.",
                    warnings,
                )
                return
            self._out.binary(body)
            return

        content_type = response.content_type
        if plan.settings.pretty and is_json_content_type(content_type):
            try:
                formatted = format_json(body)
            except (ValueError, RecursionError) as exc:
                self._warn(
                    f"Response claims to be JSON but could not be parsed ({exc}); "
                    "showing the raw body.",
                    warnings,
                )
            else:
                self._out.json(formatted)
                return

        self._out.verbatim(decode_body(body, content_type))

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_save_path(
        target: SaveTarget,
        response: HttpResponse,
        plan: RequestPlan,
    ) -> Path:
        if target.path is not None:
            return target.path
        name = derive_filename(
            response.headers.get("content-disposition", "") or "",
            response.url or plan.base_url,
        )
        if name is None:
            raise RenderWarning(
                "Could not derive a file name from the response or URL; "
                "printing the body instead.",
                hint="Name the file explicitly with -o PATH.",
            )
        return Path(name)

    def _warn(self, message: str, warnings: list[str]) -> None:
        warnings.append(message)
        self._err.line(("Warning: ", "bold yellow"), (message, None))
