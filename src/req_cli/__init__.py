"""req — a terse command-line HTTP client.

Turns a short sequence of shell tokens into a fully formed HTTP request,
sends it, and renders the response for a human reading a terminal.
"""

from req_cli.version import __version__

__all__: list[str] = ["__version__"]
