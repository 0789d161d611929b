"""
EDN helpers for histories.

Convenience functions for turning EDN text into Python values and
history operations.
"""

from __future__ import annotations

from typing import Any

from histcheck.core.operation import Operation
from histcheck.parser.grammar import EDNParser, ParseError


_parser = EDNParser()


def parse_edn(text: str) -> Any:
    """
    Parse an EDN string into a Python value.

    Raises:
        LexerError: If the text contains an invalid character.
        ParseError: If the text is syntactically invalid.
    """
    return _parser.parse(text)


def parse_operation(text: str) -> Operation:
    """
    Parse one EDN operation map, such as
    ``{:process 0, :type :invoke, :f :read, :value nil}``.

    Raises:
        ParseError: If the text is not an EDN map.
        ValueError: If the map is not a valid operation.
    """
    data = parse_edn(text)
    if not isinstance(data, dict):
        raise ParseError(f"Expected an operation map, got {data!r}")
    return Operation.from_mapping(data)
