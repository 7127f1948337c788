"""Expression tree for parsed formulas.

Nodes are immutable so a parsed formula can be cached and shared
between threads.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class NumberLiteral:
    """A numeric literal, kept exactly as written."""

    text: str


@dataclass(frozen=True)
class MergeField:
    """A ``$Namespace.Part...`` reference."""

    path: tuple[str, ...]

    @property
    def namespace(self) -> str:
        return self.path[0]

    @property
    def parts(self) -> tuple[str, ...]:
        return self.path[1:]

    @property
    def reference(self) -> str:
        return "$" + ".".join(self.path)


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: tuple[Node, ...]


@dataclass(frozen=True)
class Concat:
    operands: tuple[Node, ...]


Node = Union[StringLiteral, NumberLiteral, MergeField, FunctionCall, Concat]


def iter_merge_fields(node: Node) -> Iterator[MergeField]:
    """Yield every merge field in *node*, depth-first, left to right."""
    if isinstance(node, MergeField):
        yield node
    elif isinstance(node, FunctionCall):
        for arg in node.args:
            yield from iter_merge_fields(arg)
    elif isinstance(node, Concat):
        for operand in node.operands:
            yield from iter_merge_fields(operand)
