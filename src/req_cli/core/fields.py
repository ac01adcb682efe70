"""Pure ``key=value`` → query/body field transformations.

Every function here is a deterministic transformation over already
classified :class:`~req_cli.core.tokens.Pair` tokens.  Duplicate keys
resolve last-write-wins while keeping the position of the first
occurrence.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

from req_cli.core.tokens import Pair
from req_cli.exceptions import UsageError

_INT_RE = re.compile(r"-?(?:0|[1-9]\d*)")
_FLOAT_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")


# ---------------------------------------------------------------------------
# Value inference (JSON mode only)
# ---------------------------------------------------------------------------

def infer_value(text: str) -> Any:
    """Infer a JSON scalar from a command-line value.

    * ``42`` / ``-5`` → ``int``
    * ``-5.5`` / ``1e3`` → ``float``
    * ``true`` / ``false`` → ``bool``
    * anything else (including ``007``, ``{`` and out-of-range numbers
      such as ``1e400``) → the string itself
    """
    if text == "true":
        return True
    if text == "false":
        return False
    if _INT_RE.fullmatch(text):
        return int(text)
    if _FLOAT_RE.fullmatch(text):
        value = float(text)
        return value if math.isfinite(value) else text
    return text


# ---------------------------------------------------------------------------
# Flat mappings (query string, form body)
# ---------------------------------------------------------------------------

def merge_flat(
    pairs: Iterable[Pair],
    initial: Iterable[tuple[str, str]] = (),
) -> tuple[tuple[str, str], ...]:
    """Collapse pairs into unique string fields, last write wins."""
    merged: dict[str, str] = dict(initial)
    for pair in pairs:
        merged[pair.key] = pair.value
    return tuple(merged.items())


# ---------------------------------------------------------------------------
# Nested mapping (JSON body)
# ---------------------------------------------------------------------------

def build_json_object(pairs: Iterable[Pair]) -> dict[str, Any]:
    """Build a JSON object; dotted keys create nested objects.

    ``credential.user=a credential.pass=b`` →
    ``{"credential": {"user": "a", "pass": "b"}}``.  A later pair whose
    path runs through an existing scalar replaces that scalar with an
    object.
    """
    root: dict[str, Any] = {}
    for pair in pairs:
        if any(part == "" for part in pair.path):
            raise UsageError(
                f"Empty segment in key {pair.key!r}",
                token=pair.token,
                hint=r"Escape literal dots in keys as \.",
            )
        current = root
        for part in pair.path[:-1]:
            child = current.get(part)
            if not isinstance(child, dict):
                child = {}
                current[part] = child
            current = child
        current[pair.path[-1]] = infer_value(pair.value)
    return root
