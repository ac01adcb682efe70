"""``req --help`` — usage, options and examples.

The option table is generated from
:data:`~req_cli.core.tokens.FLAG_SPECS`, the same grammar the token
classifier uses, so the help can never drift from the parser.  Renders
a Rich table when Rich is installed and a plain aligned listing
otherwise.
"""

from __future__ import annotations

from typing import TextIO

from req_cli.core.tokens import FLAG_SPECS, FlagSpec
from req_cli.version import __version__

USAGE: str = "req <url> [key=value ...] [options]"

DESCRIPTION: str = (
    "Send an HTTP request built from terse arguments and pretty-print the response.\n"
    "<url> is permissive: :5000, localhost:3000/api, example.com, https://example.com.\n"
    "key=value (or key:value) pairs become query parameters, or body fields with\n"
    "--json or --form. Dotted JSON keys nest: a.b=1."
)

EXAMPLES: tuple[tuple[str, str], ...] = (
    ("Plain GET request", "req jsonip.com"),
    ("GET request with a URL encoded parameter", "req jsonip.com apiKey='foo bar'"),
    (
        "POST a JSON body",
        "req localhost:5000/signup --json email=test@example.com password=test",
    ),
    (
        "JSON POST with URL params already in the URL",
        "req 'localhost:5000/search?cache=0' --json query='search query'",
    ),
    ("Basic auth and save the body to a file", "req -u alice:secret example.com/report.pdf -O"),
)


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------

def _option_label(spec: FlagSpec) -> str:
    label = ", ".join(spec.names)
    if spec.metavar is not None:
        label = f"{label} {spec.metavar}"
    return label


def _option_rows() -> list[tuple[str, str]]:
    return [(_option_label(spec), spec.help) for spec in FLAG_SPECS]


def _print_plain_help(stream: TextIO) -> None:
    """Render help without Rich."""
    rows = _option_rows()
    width = max(len(label) for label, _ in rows)
    print(f"req {__version__}\n", file=stream)
    print(f"Usage: {USAGE}\n", file=stream)
    print(DESCRIPTION + "\n", file=stream)
    print("Options:", file=stream)
    for label, text in rows:
        print(f"  {label:<{width}}  {text}", file=stream)
    print("\nExamples:", file=stream)
    for title, command in EXAMPLES:
        print(f"  # {title}\n  {command}\n", file=stream)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def render_help(stream: TextIO, *, color: bool = False) -> None:
    """Write the full help text to *stream*."""
    try:
        from rich.console import Console
        from rich.table import Table
        from rich.text import Text
    except ModuleNotFoundError:
        _print_plain_help(stream)
        return

    console = Console(
        file=stream,
        force_terminal=color,
        no_color=not color,
        highlight=False,
        soft_wrap=True,
    )
    console.print(Text(f"req {__version__}", style="bold"))
    console.print()
    console.print(Text.assemble(("Usage: ", "yellow"), USAGE))
    console.print()
    console.print(Text(DESCRIPTION))
    console.print()

    table = Table(
        title="Options",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
        title_justify="left",
    )
    table.add_column("Option", style="bold", no_wrap=True)
    table.add_column("Description")
    for label, text in _option_rows():
        table.add_row(label, text)
    console.print(table)
    console.print()

    console.print(Text("Examples:", style="yellow"))
    for title, command in EXAMPLES:
        console.print(Text(f"  # {title}", style="dim"))
        console.print(Text(f"  {command}"))
        console.print()
