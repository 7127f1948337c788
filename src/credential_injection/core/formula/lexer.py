"""Tokenizer for the formula expression language."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from credential_injection.core.exceptions import FormulaSyntaxError


class TokenKind(str, Enum):
    """Lexical token categories."""

    STRING = "string"
    NUMBER = "number"
    IDENT = "ident"
    MERGE_FIELD = "merge_field"
    AMP = "&"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    """A lexical token.

    Args:
        kind: Token category.
        value: Decoded text (string contents, identifier, dotted path).
        position: Offset of the token within the formula body.
    """

    kind: TokenKind
    value: str
    position: int


_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_MERGE_FIELD = re.compile(r"\$([A-Za-z0-9_\-]+(?:\.[A-Za-z0-9_\-]+)+)")

_ESCAPES = {"\\": "\\", "'": "'", '"': '"', "n": "\n", "t": "\t"}

_PUNCTUATION = {
    "&": TokenKind.AMP,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
}


def scan_string(text: str, start: int) -> tuple[str, int]:
    """Decode the quoted string starting at ``text[start]``.

    Args:
        text: Source text.
        start: Offset of the opening quote.

    Returns:
        The decoded contents and the offset just past the closing quote.

    Raises:
        FormulaSyntaxError: On an unterminated string or unknown escape.
    """
    quote = text[start]
    chars: list[str] = []
    pos = start + 1
    while pos < len(text):
        ch = text[pos]
        if ch == "\\":
            if pos + 1 >= len(text):
                break
            escaped = _ESCAPES.get(text[pos + 1])
            if escaped is None:
                raise FormulaSyntaxError(text, f"unknown escape '\\{text[pos + 1]}'", pos)
            chars.append(escaped)
            pos += 2
            continue
        if ch == quote:
            return "".join(chars), pos + 1
        chars.append(ch)
        pos += 1
    raise FormulaSyntaxError(text, "unterminated string literal", start)


def tokenize(text: str) -> list[Token]:
    """Split a formula body into tokens, ending with an ``EOF`` token.

    Raises:
        FormulaSyntaxError: On any character outside the grammar.
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch.isspace():
            pos += 1
            continue

        if ch in ("'", '"'):
            value, end = scan_string(text, pos)
            tokens.append(Token(TokenKind.STRING, value, pos))
            pos = end
            continue

        if ch in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[ch], ch, pos))
            pos += 1
            continue

        if ch == "$":
            match = _MERGE_FIELD.match(text, pos)
            if match is None:
                raise FormulaSyntaxError(text, "malformed merge field", pos)
            tokens.append(Token(TokenKind.MERGE_FIELD, match.group(1), pos))
            pos = match.end()
            continue

        match = _NUMBER.match(text, pos) or _IDENT.match(text, pos)
        if match is None:
            raise FormulaSyntaxError(text, f"unexpected character {ch!r}", pos)
        kind = TokenKind.NUMBER if ch.isdigit() else TokenKind.IDENT
        tokens.append(Token(kind, match.group(0), pos))
        pos = match.end()

    tokens.append(Token(TokenKind.EOF, "", len(text)))
    return tokens
