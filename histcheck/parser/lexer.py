"""
Lexical analyzer for EDN-encoded history operations.

Tokenizes the EDN subset used to persist histories (maps, vectors,
lists, sets, keywords, symbols, strings and numbers) into a token
stream for the parser.
"""

from __future__ import annotations

import json

import sly


class LexerError(Exception):
    """Exception raised for lexical analysis errors."""
    pass


class EDNLexer(sly.Lexer):
    """
    Lexical analyzer for EDN values.

    Token Types:
        NIL, TRUE, FALSE        - Literal constants
        INT, FLOAT, STRING      - Scalars (values already converted)
        KEYWORD                 - ``:name`` (value without the colon)
        SYMBOL                  - Bare identifiers
        LBRACE, RBRACE          - Map delimiters
        LBRACKET, RBRACKET      - Vector delimiters
        LPAREN, RPAREN          - List delimiters
        SET_OPEN                - ``#{`` (closed by RBRACE)
    """

    tokens = {
        NIL, TRUE, FALSE,
        INT, FLOAT, STRING,
        KEYWORD, SYMBOL,
        LBRACE, RBRACE,
        LBRACKET, RBRACKET,
        LPAREN, RPAREN,
        SET_OPEN,
    }

    # Commas are whitespace in EDN
    ignore = " \t\r,"

    @_(r"\n+")
    def ignore_newline(self, t):
        self.lineno += len(t.value)

    ignore_comment = r";[^\n]*"

    SET_OPEN = r"\#\{"
    LBRACE = r"\{"
    RBRACE = r"\}"
    LBRACKET = r"\["
    RBRACKET = r"\]"
    LPAREN = r"\("
    RPAREN = r"\)"

    @_(r'"(?:[^"\\]|\\.)*"')
    def STRING(self, t):
        t.value = json.loads(t.value)
        return t

    # FLOAT must come before INT
    @_(r"[-+]?\d+(?:\.\d*(?:[eE][-+]?\d+)?|[eE][-+]?\d+)M?")
    def FLOAT(self, t):
        t.value = float(t.value.rstrip("M"))
        return t

    @_(r"[-+]?\d+N?")
    def INT(self, t):
        t.value = int(t.value.rstrip("N"))
        return t

    @_(r":[a-zA-Z0-9_*+!?<>=/.\-]+")
    def KEYWORD(self, t):
        t.value = t.value[1:]
        return t

    # Numbers are matched first, so a leading sign followed by a digit
    # never reaches this rule.
    @_(r"[a-zA-Z_*+!?<>=/.\-][a-zA-Z0-9_*+!?<>=/.\-#']*")
    def SYMBOL(self, t):
        literals = {
            "nil": "NIL",
            "true": "TRUE",
            "false": "FALSE",
        }
        t.type = literals.get(t.value, "SYMBOL")
        return t

    def error(self, t):
        """Handle invalid characters."""
        raise LexerError(
            f"Invalid character '{t.value[0]}' at index {self.index}"
        )
