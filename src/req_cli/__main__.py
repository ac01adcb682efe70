"""Allow ``python -m req_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m req_cli`` behaves identically to the ``req`` console
script.
"""

from __future__ import annotations

from req_cli.cli.app import cli

if __name__ == "__main__":
    cli()
