"""
Balanced-brace JSON scanning over free text.

Braces are counted naively: a `{` or `}` inside a JSON string literal still
moves the depth counter, so a prompt containing unmatched braces can make a
span fail to parse (reported as "nothing usable here") or pair with the wrong
closing brace. Callers treat a None result as "try the next format".
"""
from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any, NamedTuple


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON.
    raise ValueError(f"invalid JSON constant {name}")


class ScannedJSON(NamedTuple):
    value: Any
    # Exclusive offset just past the closing brace.
    end: int


def _matching_brace(text: str, start: int) -> int:
    depth = 0
    for idx in range(start, len(text)):
        ch = text[idx]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return idx
    return -1


def scan_next(text: str, start_pos: int = 0) -> ScannedJSON | None:
    """
    Parse the next brace-balanced JSON object at or after `start_pos`.

    Returns None when there is no `{`, when the braces never balance, or when
    the balanced span is not valid JSON.
    """
    if not isinstance(text, str):
        return None
    start = text.find("{", max(0, start_pos))
    if start == -1:
        return None
    end = _matching_brace(text, start)
    if end == -1:
        return None
    try:
        value = json.loads(text[start:end + 1], parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None
    return ScannedJSON(value, end + 1)


def iter_json_objects(text: str, start_pos: int = 0) -> Iterator[ScannedJSON]:
    """
    Yield successive objects, resuming after each one.

    Stops at the first span that is missing, unbalanced or unparseable; every
    yielded `end` is strictly past the previous one, so the loop is bounded by
    the text length.
    """
    pos = start_pos
    while True:
        found = scan_next(text, pos)
        if found is None:
            return
        yield found
        pos = found.end
