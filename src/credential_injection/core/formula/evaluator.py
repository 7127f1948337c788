"""Formula evaluation against a resolution context."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from credential_injection.core.exceptions import (
    ResolveError,
    TypeMismatchError,
    UnresolvedReferenceError,
)
from credential_injection.core.formula.functions import FunctionRegistry, Number, Value, default_functions
from credential_injection.core.formula.nodes import (
    Concat,
    FunctionCall,
    MergeField,
    Node,
    NumberLiteral,
    StringLiteral,
)
from credential_injection.core.formula.parser import parse_formula
from credential_injection.core.resolution.context import ResolutionContext
from credential_injection.core.resolution.merge_fields import (
    CREDENTIAL_NAMESPACE,
    MergeFieldResolver,
    NamespaceResolver,
)


class FormulaEvaluator:
    """Evaluate parsed formulas to header text.

    Evaluation is pure given a context: the evaluator holds no per-call
    state, so one instance can serve concurrent requests.

    Args:
        functions: Function registry. Defaults to :func:`default_functions`.
        namespaces: Merge-field namespace resolvers keyed by namespace.
            Defaults to ``{"Credential": MergeFieldResolver()}``.
    """

    def __init__(
        self,
        functions: FunctionRegistry | None = None,
        namespaces: Mapping[str, NamespaceResolver] | None = None,
    ) -> None:
        self._functions = functions if functions is not None else default_functions()
        self._namespaces: dict[str, NamespaceResolver] = dict(
            namespaces if namespaces is not None else {CREDENTIAL_NAMESPACE: MergeFieldResolver()}
        )

    @property
    def functions(self) -> FunctionRegistry:
        return self._functions

    def evaluate(self, expression: str | Node, context: ResolutionContext) -> str:
        """Evaluate *expression* and return its text.

        Args:
            expression: Formula source or an already-parsed node.
            context: Per-request resolution context.

        Returns:
            The formula result as text. Numbers are rendered as written.

        Raises:
            FormulaSyntaxError: If *expression* is source text that does not parse.
            UnresolvedReferenceError: If a merge field cannot be resolved.
            TypeMismatchError: If a function gets an incompatible argument
                or the result is binary.
            UnknownFunctionError: If a called function is not registered.
            ArgumentCountError: If a function gets the wrong argument count.
        """
        node = parse_formula(expression) if isinstance(expression, str) else expression
        result = self.evaluate_node(node, context)
        if isinstance(result, bytes):
            raise TypeMismatchError("formula result", "text", result)
        return str(result)

    def evaluate_node(self, node: Node, context: ResolutionContext) -> Value:
        """Evaluate *node* to a raw formula value."""
        if isinstance(node, StringLiteral):
            return node.value
        if isinstance(node, NumberLiteral):
            return Number(node.text)
        if isinstance(node, MergeField):
            return self._resolve(node, context)
        if isinstance(node, FunctionCall):
            function = self._functions.get(node.name)
            args = [self.evaluate_node(arg, context) for arg in node.args]
            return function(*args)
        if isinstance(node, Concat):
            return "".join(self._concat_operand(self.evaluate_node(op, context)) for op in node.operands)
        raise TypeError(f"Unknown formula node: {type(node).__name__}")

    def _resolve(self, field: MergeField, context: ResolutionContext) -> str:
        resolver = self._namespaces.get(field.namespace)
        if resolver is None:
            raise UnresolvedReferenceError(field.reference, f"unknown namespace '${field.namespace}'")
        try:
            return resolver.resolve_path(field.parts, context)
        except ResolveError as exc:
            raise UnresolvedReferenceError(field.reference, str(exc)) from exc

    @staticmethod
    def _concat_operand(value: Value) -> str:
        if isinstance(value, bytes):
            raise TypeMismatchError("&", "text or number", value)
        if isinstance(value, Decimal):
            return str(value)
        return value


_default_evaluator = FormulaEvaluator()


def evaluate(expression: str | Node, context: ResolutionContext) -> str:
    """Evaluate *expression* with the builtin functions and ``$Credential`` namespace."""
    return _default_evaluator.evaluate(expression, context)
