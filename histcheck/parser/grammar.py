"""
Parser for EDN-encoded history operations.

Builds Python values from the token stream: maps become dicts,
vectors and lists become tuples, sets become frozensets, keywords and
symbols become strings.  Collections are immutable wherever they may
end up as multiset or set elements.
"""

from __future__ import annotations

from typing import Any

import sly

from histcheck.parser.lexer import EDNLexer


class ParseError(Exception):
    """Exception raised for parsing errors."""

    pass


class _SLYParser(sly.Parser):
    """
    SLY-based parser for a single EDN value.
    """

    tokens = EDNLexer.tokens

    @_("scalar", "collection")
    def value(self, p):
        return p[0]

    # --- Scalars ---

    @_("NIL")
    def scalar(self, p):
        return None

    @_("TRUE")
    def scalar(self, p):
        return True

    @_("FALSE")
    def scalar(self, p):
        return False

    @_("INT", "FLOAT", "STRING", "KEYWORD", "SYMBOL")
    def scalar(self, p):
        return p[0]

    # --- Collections ---

    @_("LBRACE RBRACE")
    def collection(self, p):
        return {}

    @_("LBRACE entries RBRACE")
    def collection(self, p):
        return dict(p.entries)

    @_("LBRACKET RBRACKET", "LPAREN RPAREN")
    def collection(self, p):
        return ()

    @_("LBRACKET items RBRACKET", "LPAREN items RPAREN")
    def collection(self, p):
        return tuple(p.items)

    @_("SET_OPEN RBRACE")
    def collection(self, p):
        return frozenset()

    @_("SET_OPEN items RBRACE")
    def collection(self, p):
        return frozenset(p.items)

    @_("items value")
    def items(self, p):
        return p.items + [p.value]

    @_("value")
    def items(self, p):
        return [p.value]

    @_("entries value value")
    def entries(self, p):
        return p.entries + [(p.value0, p.value1)]

    @_("value value")
    def entries(self, p):
        return [(p.value0, p.value1)]

    def error(self, token):
        if token:
            raise ParseError(
                f"Syntax error at '{token.value}' " f"(type: {token.type}, index: {token.index})"
            )
        raise ParseError("Syntax error: unexpected end of input")


class EDNParser:
    """
    Parser for EDN values.

    Wraps the SLY-based parser with a clean public interface.
    """

    def __init__(self) -> None:
        self._lexer = EDNLexer()
        self._parser = _SLYParser()

    def parse(self, text: str) -> Any:
        """
        Parse a string holding exactly one EDN value.

        Args:
            text: The EDN text to parse.

        Returns:
            The corresponding Python value.

        Raises:
            LexerError: If the text contains an invalid character.
            ParseError: If the text is syntactically invalid or empty.
        """
        text = text.strip()
        if not text:
            raise ParseError("Syntax error: empty input")

        return self._parser.parse(self._lexer.tokenize(text))
