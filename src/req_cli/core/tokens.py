"""Shell-token classification.

Every raw argument is classified exactly once, here, into one of three
variants:

* :class:`Flag` — a known option, with its value when it takes one.
* :class:`HostFragment` — the first positional token (``:5000``,
  ``example.com/path``, ``https://api.example.com``…).
* :class:`Pair` — any later positional token carrying an unescaped
  ``=`` or ``:`` separator.

Nothing outside this module inspects string prefixes to decide what a
token is.

Rules
-----
* Long flags accept ``--name value`` and ``--name=value``.
* Short flags may be clustered (``-vO``); a value-taking short flag
  consumes the rest of the cluster or the next token (``-uuser:pass``).
* A literal ``--`` ends flag processing.
* Inside a pair key, ``\\=``, ``\\:``, ``\\.`` and ``\\\\`` are escapes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from req_cli.exceptions import UsageError


# ---------------------------------------------------------------------------
# Flag grammar
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FlagSpec:
    """Static description of one command-line option."""

    dest: str
    names: tuple[str, ...]
    help: str
    metavar: str | None = None
    """Name of the value placeholder; ``None`` for boolean switches."""

    @property
    def takes_value(self) -> bool:
        return self.metavar is not None


FLAG_SPECS: tuple[FlagSpec, ...] = (
    FlagSpec("json", ("--json",), "Send pairs as a JSON object body (implies POST)."),
    FlagSpec("form", ("--form",), "Send pairs as a URL-encoded form body (implies POST)."),
    FlagSpec(
        "method", ("-m", "--method", "-X"),
        "Request method. Defaults to GET, or POST with a body.", "METHOD",
    ),
    FlagSpec(
        "header", ("-H", "--header"),
        "Set a header; repeatable. Separator can be ':' or '='.", "NAME:VALUE",
    ),
    FlagSpec("cookie", ("-c", "--cookie"), "Add a cookie; repeatable.", "NAME=VALUE"),
    FlagSpec("bearer", ("--bearer",), "Set 'Authorization: Bearer <token>'.", "TOKEN"),
    FlagSpec("token", ("--token",), "Alias of --bearer.", "TOKEN"),
    FlagSpec(
        "user", ("-u", "--user"),
        "Basic auth, like curl -u. Sends 'Authorization: Basic <base64>'.", "USER:PASS",
    ),
    FlagSpec("data", ("-d", "--data"), "Send TEXT verbatim as the request body.", "TEXT"),
    FlagSpec("file", ("--file",), "Send the contents of PATH as the request body.", "PATH"),
    FlagSpec(
        "remote_name", ("-O", "--remote-name"),
        "Save the body to a file named after the remote resource.",
    ),
    FlagSpec("output", ("-o", "--output"), "Save the body to PATH.", "PATH"),
    FlagSpec("raw", ("-r", "--raw"), "Print the body as received, without pretty-printing."),
    FlagSpec("verbose", ("-v", "--verbose"), "Dump the request and response to stderr."),
    FlagSpec("fail", ("--fail",), "Exit with a non-zero status on a non-2xx response."),
    FlagSpec("no_follow", ("-F", "--no-follow"), "Do not follow redirects."),
    FlagSpec("timeout", ("--timeout",), "Network timeout in seconds.", "SECONDS"),
    FlagSpec("help", ("-h", "--help"), "Show this help and exit."),
    FlagSpec("version", ("-V", "--version"), "Show the version and exit."),
)

_BY_NAME: dict[str, FlagSpec] = {
    name: spec for spec in FLAG_SPECS for name in spec.names
}

PAIR_SEPARATORS: frozenset[str] = frozenset("=:")
KEY_ESCAPABLE: frozenset[str] = frozenset("=:.\\")


# ---------------------------------------------------------------------------
# Token variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Flag:
    spec: FlagSpec
    value: str | None
    token: str
    """The raw token the flag was read from, for error messages."""

    @property
    def dest(self) -> str:
        return self.spec.dest


@dataclass(frozen=True, slots=True)
class HostFragment:
    text: str


@dataclass(frozen=True, slots=True)
class Pair:
    """A ``key=value`` (or ``key:value``) positional argument."""

    key: str
    """Key with escapes decoded; dots kept literally."""

    path: tuple[str, ...]
    """Key split on unescaped dots, for nested JSON fields."""

    value: str
    token: str


Token = Flag | HostFragment | Pair


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def tokenize(args: Sequence[str]) -> list[Token]:
    """Classify *args* left to right into :data:`Token` variants.

    Raises
    ------
    UsageError
        For unknown flags, flags missing their value, positional tokens
        that are neither the host nor a pair, and undecodable key escapes.
    """
    tokens: list[Token] = []
    host_seen = False
    flags_done = False
    index = 0

    while index < len(args):
        raw = args[index]
        index += 1

        if not flags_done and raw == "--":
            flags_done = True
            continue

        if not flags_done and _looks_like_flag(raw):
            for spec, inline in _split_flag_token(raw):
                value = inline
                if spec.takes_value and value is None:
                    if index >= len(args):
                        raise UsageError(
                            f"Option {raw} requires a value.",
                            token=raw,
                            hint=f"Usage: {spec.names[-1]} {spec.metavar}",
                        )
                    value = args[index]
                    index += 1
                tokens.append(Flag(spec=spec, value=value, token=raw))
            continue

        if not host_seen:
            tokens.append(HostFragment(text=raw))
            host_seen = True
            continue

        pair = parse_pair(raw)
        if pair is None:
            raise UsageError(
                f"Cannot interpret argument: {raw!r}",
                token=raw,
                hint="Extra arguments must look like key=value or key:value.",
            )
        tokens.append(pair)

    return tokens


def parse_pair(raw: str) -> Pair | None:
    """Split *raw* at its first unescaped separator.

    Returns ``None`` when the token has no unescaped ``=`` or ``:``.
    """
    split_at = _find_separator(raw)
    if split_at is None:
        return None

    key_text = raw[:split_at]
    if not key_text:
        raise UsageError(f"Missing key in {raw!r}", token=raw)

    key, path = _decode_key(key_text, raw)
    return Pair(key=key, path=path, value=raw[split_at + 1:], token=raw)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _looks_like_flag(raw: str) -> bool:
    return raw.startswith("-") and raw != "-"


def _split_flag_token(raw: str) -> list[tuple[FlagSpec, str | None]]:
    """Expand one flag token into ``(spec, inline_value)`` entries."""
    if raw.startswith("--"):
        name, eq, inline = raw.partition("=")
        spec = _BY_NAME.get(name)
        if spec is None:
            raise UsageError(f"Unknown option: {name}", token=raw, hint="See 'req --help'.")
        if eq and not spec.takes_value:
            raise UsageError(f"Option {name} does not take a value.", token=raw)
        return [(spec, inline if eq else None)]

    found: list[tuple[FlagSpec, str | None]] = []
    letters = raw[1:]
    for position, letter in enumerate(letters):
        spec = _BY_NAME.get(f"-{letter}")
        if spec is None:
            raise UsageError(f"Unknown option: -{letter}", token=raw, hint="See 'req --help'.")
        if spec.takes_value:
            rest = letters[position + 1:]
            found.append((spec, rest or None))
            break
        found.append((spec, None))
    return found


def _find_separator(raw: str) -> int | None:
    """Index of the first separator not preceded by a backslash escape."""
    index = 0
    while index < len(raw):
        char = raw[index]
        if char == "\\":
            index += 2
            continue
        if char in PAIR_SEPARATORS:
            return index
        index += 1
    return None


def _decode_key(key_text: str, raw: str) -> tuple[str, tuple[str, ...]]:
    flat: list[str] = []
    segment: list[str] = []
    path: list[str] = []
    index = 0
    while index < len(key_text):
        char = key_text[index]
        if char == "\\":
            escaped = key_text[index + 1:index + 2]
            if escaped not in KEY_ESCAPABLE:
                raise UsageError(
                    f"Invalid escape sequence in key of {raw!r}",
                    token=raw,
                    hint=r"Only \=, \:, \. and \\ are recognised in keys.",
                )
            flat.append(escaped)
            segment.append(escaped)
            index += 2
            continue
        if char == ".":
            path.append("".join(segment))
            segment = []
        else:
            segment.append(char)
        flat.append(char)
        index += 1
    path.append("".join(segment))
    return "".join(flat), tuple(path)
