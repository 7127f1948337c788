"""Recursive-descent parser for formula expressions.

Grammar::

    expression := term ("&" term)*
    term       := STRING | NUMBER | MERGE_FIELD
                | IDENT "(" [expression ("," expression)*] ")"
                | "(" expression ")"
"""

from __future__ import annotations

from credential_injection.core.exceptions import FormulaSyntaxError
from credential_injection.core.formula.lexer import Token, TokenKind, tokenize
from credential_injection.core.formula.nodes import (
    Concat,
    FunctionCall,
    MergeField,
    Node,
    NumberLiteral,
    StringLiteral,
)

# Deepest allowed nesting of parentheses and function calls.
MAX_NESTING_DEPTH = 64


class _Parser:
    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = tokenize(text)
        self._index = 0
        self._depth = 0

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _expect(self, kind: TokenKind) -> Token:
        token = self._advance()
        if token.kind != kind:
            raise self._error(f"expected '{kind.value}'", token)
        return token

    def _error(self, reason: str, token: Token) -> FormulaSyntaxError:
        found = "end of formula" if token.kind == TokenKind.EOF else repr(token.value)
        return FormulaSyntaxError(self._text, f"{reason}, found {found}", token.position)

    def parse(self) -> Node:
        if self._peek().kind == TokenKind.EOF:
            raise FormulaSyntaxError(self._text, "empty formula", 0)
        node = self._expression()
        token = self._peek()
        if token.kind != TokenKind.EOF:
            raise self._error("unexpected trailing input", token)
        return node

    def _expression(self) -> Node:
        operands = [self._term()]
        while self._peek().kind == TokenKind.AMP:
            self._advance()
            operands.append(self._term())
        if len(operands) == 1:
            return operands[0]
        return Concat(tuple(operands))

    def _term(self) -> Node:
        token = self._advance()
        if token.kind == TokenKind.STRING:
            return StringLiteral(token.value)
        if token.kind == TokenKind.NUMBER:
            return NumberLiteral(token.value)
        if token.kind == TokenKind.MERGE_FIELD:
            return MergeField(tuple(token.value.split(".")))
        if token.kind == TokenKind.LPAREN:
            self._enter(token)
            node = self._expression()
            self._expect(TokenKind.RPAREN)
            self._depth -= 1
            return node
        if token.kind == TokenKind.IDENT:
            if self._peek().kind != TokenKind.LPAREN:
                raise self._error(f"'{token.value}' must be called as a function", self._peek())
            self._enter(token)
            call = self._call(token.value)
            self._depth -= 1
            return call
        raise self._error("expected a value", token)

    def _enter(self, token: Token) -> None:
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise FormulaSyntaxError(self._text, "formula nested too deeply", token.position)

    def _call(self, name: str) -> FunctionCall:
        self._expect(TokenKind.LPAREN)
        args: list[Node] = []
        if self._peek().kind != TokenKind.RPAREN:
            args.append(self._expression())
            while self._peek().kind == TokenKind.COMMA:
                self._advance()
                args.append(self._expression())
        self._expect(TokenKind.RPAREN)
        return FunctionCall(name, tuple(args))


def parse_formula(text: str) -> Node:
    """Parse a formula body (the text between ``{!`` and ``}``).

    Args:
        text: Formula source.

    Returns:
        The root node of the expression tree.

    Raises:
        FormulaSyntaxError: If *text* is empty, not a valid expression, or
            nests parentheses and calls deeper than ``MAX_NESTING_DEPTH``.
    """
    return _Parser(text).parse()
