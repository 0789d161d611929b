"""
Rendering of checker reports.

Reports hold multisets, sets, tuples and model states; these helpers
turn them into JSON-compatible values for display.
"""

from __future__ import annotations

import json
from collections import Counter
from typing import Any, Iterable, List, Tuple


def integer_interval_set_str(values: Iterable[int]) -> str:
    """
    Compact, sorted representation of a set of integers.

    Consecutive runs collapse into ``start..end``, e.g.
    ``{1, 2, 3, 5}`` renders as ``#{1..3 5}``.
    """
    runs: List[Tuple[int, int]] = []
    for cur in sorted(set(values)):
        if runs and runs[-1][1] == cur - 1:
            runs[-1] = (runs[-1][0], cur)
        else:
            runs.append((cur, cur))
    parts = [str(s) if s == e else f"{s}..{e}" for s, e in runs]
    return "#{" + " ".join(parts) + "}"


def _sorted(items: List[Any]) -> List[Any]:
    try:
        return sorted(items)
    except TypeError:
        return sorted(items, key=repr)


def _is_int(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def to_jsonable(value: Any) -> Any:
    """
    Convert a report value into JSON-compatible data.

    - multisets become sorted element lists, repeated by multiplicity;
    - sets of integers become interval strings, other sets sorted lists;
    - tuples become lists, mapping keys become strings;
    - anything else JSON cannot encode is rendered with ``repr``.
    """
    if isinstance(value, Counter):
        return [to_jsonable(x) for x in _sorted(list(value.elements()))]
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        if all(_is_int(x) for x in value):
            return integer_interval_set_str(value)
        return [to_jsonable(x) for x in _sorted(list(value))]
    if isinstance(value, (list, tuple)):
        return [to_jsonable(x) for x in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return repr(value)


def format_report(report: Any, indent: int = 2) -> str:
    """Render a report as indented JSON."""
    return json.dumps(to_jsonable(report), indent=indent)
