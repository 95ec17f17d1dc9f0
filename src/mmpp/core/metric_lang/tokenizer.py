"""
Tokenizer for the mmpp metric language.

Converts a metric expression string into a sequence of typed tokens.
"""

from __future__ import annotations

import re
from enum import StrEnum, auto

from mmpp.core.errors import MetricSyntaxError


class TokenKind(StrEnum):
    """Token types for the metric language."""

    # Literals
    NUMBER = auto()
    WORD = auto()
    STRING = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    COLON = auto()
    SLASH = auto()

    # End of input
    EOF = auto()


class Token:
    """A single token from the metric tokenizer."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: TokenKind, value: str, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"

    def describe(self) -> str:
        """Human-readable form used in error messages."""
        if self.kind == TokenKind.EOF:
            return "end of input"
        if self.kind == TokenKind.STRING:
            return f"string {self.value!r}"
        return repr(self.value)


# Decimal number with optional sign and exponent: 10.0, 3.140e10, -31.4
NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
# Bare identifier characters
BARE_RE = re.compile(r"[A-Za-z0-9._*\-]+")

_PUNCTUATION: dict[str, TokenKind] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
    "/": TokenKind.SLASH,
}


def tokenize(source: str) -> list[Token]:
    """Tokenize a metric expression into a list of tokens.

    Raises:
        MetricSyntaxError: On an unexpected character or unterminated quote.
    """
    tokens: list[Token] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        # Skip whitespace
        if c in " \t\n\r":
            i += 1
            continue

        # Quoted identifiers
        if c in ('"', "'"):
            i, tok = _read_string(source, i)
            tokens.append(tok)
            continue

        if c in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[c], c, i))
            i += 1
            continue

        # A number wins only if no longer bare word starts here,
        # so 1e+10 is a number while 3mo and 22CXRB3pZmu are words
        num_m = NUMBER_RE.match(source, i)
        word_m = BARE_RE.match(source, i)
        if num_m and (word_m is None or num_m.end() >= word_m.end()):
            tokens.append(Token(TokenKind.NUMBER, num_m.group(0), i))
            i = num_m.end()
            continue
        if word_m:
            tokens.append(Token(TokenKind.WORD, word_m.group(0), i))
            i = word_m.end()
            continue

        raise MetricSyntaxError(f"Unexpected character: {c!r}", i)

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens


def _read_string(source: str, start: int) -> tuple[int, Token]:
    """Read a quoted identifier. The content is taken literally, with no escapes."""
    quote = source[start]
    end = source.find(quote, start + 1)
    if end == -1:
        raise MetricSyntaxError("Unterminated quoted identifier", start)
    return end + 1, Token(TokenKind.STRING, source[start + 1 : end], start)
