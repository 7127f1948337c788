"""Header template compilation.

A header template mixes literal text with at most one formula block::

    Bearer {!$Credential.GitHub.Token}
    {!'Basic ' & BASE64($Credential.Jira.User & ':' & $Credential.Jira.Token)}

The block opens with ``{!`` and closes at the first ``}`` outside a string
literal. Text without ``{!`` compiles to a single literal and is emitted
unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from credential_injection.core.exceptions import FormulaSyntaxError, MalformedTemplateError
from credential_injection.core.formula.evaluator import FormulaEvaluator
from credential_injection.core.formula.lexer import scan_string
from credential_injection.core.formula.nodes import MergeField, Node, iter_merge_fields
from credential_injection.core.formula.parser import parse_formula
from credential_injection.core.resolution.context import ResolutionContext
from credential_injection.core.resolution.merge_fields import CREDENTIAL_NAMESPACE

FORMULA_OPEN = "{!"
FORMULA_CLOSE = "}"


@dataclass(frozen=True)
class LiteralSegment:
    text: str


@dataclass(frozen=True)
class FormulaSegment:
    source: str
    node: Node


Segment = Union[LiteralSegment, FormulaSegment]


@dataclass(frozen=True)
class CompiledTemplate:
    """An executable header template.

    Args:
        source: Original template text.
        segments: Literal and formula segments in source order.
        allow_formula: Whether formula evaluation was enabled at compile time.
    """

    source: str
    segments: tuple[Segment, ...]
    allow_formula: bool = True

    @property
    def has_formula(self) -> bool:
        return any(isinstance(s, FormulaSegment) for s in self.segments)

    def references(self) -> tuple[MergeField, ...]:
        """Return every merge field used by the formula segment."""
        fields: list[MergeField] = []
        for segment in self.segments:
            if isinstance(segment, FormulaSegment):
                fields.extend(iter_merge_fields(segment.node))
        return tuple(fields)

    def credential_references(self) -> tuple[tuple[str, str], ...]:
        """Return ``(container, parameter)`` pairs referenced via ``$Credential``.

        Duplicates are removed; first-use order is kept.
        """
        seen: dict[tuple[str, str], None] = {}
        for field in self.references():
            if field.namespace == CREDENTIAL_NAMESPACE and len(field.parts) == 2:
                seen.setdefault((field.parts[0], field.parts[1]), None)
        return tuple(seen)

    def render(self, context: ResolutionContext, evaluator: FormulaEvaluator | None = None) -> str:
        """Evaluate the template against *context*.

        Literal segments are emitted verbatim; the formula segment is
        evaluated and spliced in at its original position.
        """
        if not self.has_formula:
            return "".join(s.text for s in self.segments if isinstance(s, LiteralSegment))

        formula_evaluator = evaluator or FormulaEvaluator()
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, LiteralSegment):
                parts.append(segment.text)
            else:
                parts.append(formula_evaluator.evaluate(segment.node, context))
        return "".join(parts)


def _find_formula_end(text: str, body_start: int) -> int:
    """Return the offset of the ``}`` closing the block that starts at *body_start*."""
    pos = body_start
    while pos < len(text):
        ch = text[pos]
        if ch in ("'", '"'):
            try:
                _, pos = scan_string(text, pos)
            except FormulaSyntaxError as exc:
                raise MalformedTemplateError(text, exc.reason, exc.position) from exc
            continue
        if text.startswith(FORMULA_OPEN, pos):
            raise MalformedTemplateError(text, "nested formula block", pos)
        if ch == FORMULA_CLOSE:
            return pos
        pos += 1
    raise MalformedTemplateError(text, "unterminated formula block", body_start - 2)


def compile_template(text: str, allow_formula: bool = True) -> CompiledTemplate:
    """Compile header template text.

    Args:
        text: Template text.
        allow_formula: When false, the whole text is a literal even if it
            contains ``{!``.

    Returns:
        The compiled template.

    Raises:
        MalformedTemplateError: On an unterminated, nested, repeated, or
            empty formula block.
        FormulaSyntaxError: If the formula body is not a valid expression.
    """
    if not allow_formula:
        return CompiledTemplate(text, (LiteralSegment(text),) if text else (), allow_formula=False)

    start = text.find(FORMULA_OPEN)
    if start < 0:
        return CompiledTemplate(text, (LiteralSegment(text),) if text else ())

    body_start = start + len(FORMULA_OPEN)
    end = _find_formula_end(text, body_start)
    body = text[body_start:end]
    if not body.strip():
        raise MalformedTemplateError(text, "empty formula block", start)

    try:
        node = parse_formula(body)
    except FormulaSyntaxError as exc:
        offset = body_start + (exc.position or 0)
        raise FormulaSyntaxError(text, exc.reason, offset) from exc

    second = text.find(FORMULA_OPEN, end + 1)
    if second >= 0:
        raise MalformedTemplateError(text, "only one formula block is allowed", second)

    segments: list[Segment] = []
    if start > 0:
        segments.append(LiteralSegment(text[:start]))
    segments.append(FormulaSegment(body, node))
    if end + 1 < len(text):
        segments.append(LiteralSegment(text[end + 1:]))
    return CompiledTemplate(text, tuple(segments))
