"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

from req_cli.exceptions import EnvironmentError

PACKAGE_LOGGER: str = "req_cli"


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(
	file: TextIO | None = None,
	*,
	color: bool = True,
	color_system: str | None = "auto",
) -> Any:
	"""Create a Rich console.

	Without *file* the console targets stderr with Rich's own terminal
	detection.  With *file* every styling decision is taken from the
	arguments, never from the ambient process state.
	"""
	console_class = _load_rich_console_class()
	if file is None:
		return console_class(stderr=True)
	return console_class(
		file=file,
		force_terminal=color,
		no_color=not color,
		color_system=color_system if color else None,
		highlight=False,
		markup=False,
		emoji=False,
		soft_wrap=True,
	)


def _escape(text: str) -> str:
	try:
		from rich.markup import escape
	except ModuleNotFoundError:
		return text
	return escape(text)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*objects, file=sys.stderr)
			return
		rich_console.print(*objects)

	def _styled(self, label: str, style: str, message: str) -> None:
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(f"{label} {message}", file=sys.stderr)
			return
		rich_console.print(f"[{style}]{label}[/{style}] {_escape(message)}")

	def error(self, message: str) -> None:
		self._styled("Error:", "bold red", message)

	def hint(self, message: str) -> None:
		self._styled("Hint:", "yellow", message)


console = _ConsoleProxy()


def configure_logging(verbose: bool) -> None:
	"""Attach a stderr handler to the package logger.

	``-v`` turns on DEBUG records from the infrastructure layer; they are
	rendered with Rich's log handler when Rich is installed.
	"""
	package_logger = logging.getLogger(PACKAGE_LOGGER)
	for handler in list(package_logger.handlers):
		package_logger.removeHandler(handler)

	try:
		from rich.logging import RichHandler
	except ModuleNotFoundError:
		handler: logging.Handler = logging.StreamHandler(sys.stderr)
		handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
	else:
		handler = RichHandler(console=get_rich_console(), show_path=False, markup=False)

	package_logger.addHandler(handler)
	package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
	package_logger.propagate = False
