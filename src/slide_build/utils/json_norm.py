"""Canonical JSON serialization — single dump path for CLI reports.

Guarantees:
  - Stable key ordering (``sort_keys=True``)
  - Trailing newline at EOF
  - ``Path`` objects → POSIX strings
  - Floats rounded to a fixed number of digits when requested
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Mapping


def _to_builtin(obj: Any) -> Any:
    """Convert common non-JSON types into JSON-safe builtins."""
    if obj is None:
        return None
    if isinstance(obj, (str, int, bool, float)):
        return obj
    if isinstance(obj, Path):
        return obj.as_posix()
    if isinstance(obj, Mapping):
        return {str(k): _to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_to_builtin(v) for v in obj]
    return str(obj)


def _round_floats(obj: Any, *, ndigits: int) -> Any:
    if isinstance(obj, float):
        # JSON has no NaN/inf
        if obj != obj or obj in (float("inf"), float("-inf")):
            return str(obj)
        return round(obj, ndigits)
    if isinstance(obj, Mapping):
        return {k: _round_floats(v, ndigits=ndigits) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_round_floats(v, ndigits=ndigits) for v in obj]
    return obj


def stable_json_dumps(
    obj: Any,
    *,
    ndigits: int | None = 4,
    indent: int | None = 2,
) -> str:
    """Serialize *obj* with sorted keys and a trailing newline."""
    built = _to_builtin(obj)
    if ndigits is not None:
        built = _round_floats(built, ndigits=ndigits)
    s = json.dumps(built, indent=indent, sort_keys=True, ensure_ascii=False)
    return s + "\n"


def stable_json_dump(
    obj: Any,
    fp: IO[str],
    *,
    ndigits: int | None = 4,
    indent: int | None = 2,
) -> None:
    fp.write(stable_json_dumps(obj, ndigits=ndigits, indent=indent))
