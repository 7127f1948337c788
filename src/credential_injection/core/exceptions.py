"""Error taxonomy for template compilation, evaluation, and header building.

Messages never include secret values, only container, parameter, and
header names.
"""

from __future__ import annotations


class CredentialInjectionError(Exception):
    """Base exception for all credential-injection errors."""

    pass


# ---------------------------------------------------------------------------
# Compile time
# ---------------------------------------------------------------------------


class ParseError(CredentialInjectionError):
    """A header template or formula could not be parsed."""

    pass


class MalformedTemplateError(ParseError):
    """Template text is malformed (unterminated or nested delimiters)."""

    def __init__(self, template: str, reason: str, position: int | None = None) -> None:
        self.template = template
        self.reason = reason
        self.position = position
        where = f" at offset {position}" if position is not None else ""
        super().__init__(f"Malformed template{where}: {reason}")


class FormulaSyntaxError(MalformedTemplateError):
    """Formula body violates the expression grammar."""

    pass


class TemplateRegistrationError(ParseError):
    """A configured template failed to compile and was not activated."""

    def __init__(self, owner: str, header_name: str, cause: ParseError) -> None:
        self.owner = owner
        self.header_name = header_name
        self.cause = cause
        super().__init__(f"Header '{header_name}' on '{owner}' rejected: {cause}")
        self.__cause__ = cause


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class EvalError(CredentialInjectionError):
    """A formula failed to evaluate."""

    pass


class UnresolvedReferenceError(EvalError):
    """A merge field could not be resolved."""

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Unresolved reference '{reference}': {reason}")


class TypeMismatchError(EvalError):
    """A function or operator received an incompatible argument."""

    def __init__(self, operation: str, expected: str, actual: object) -> None:
        self.operation = operation
        self.expected = expected
        self.actual_type = type(actual).__name__
        super().__init__(f"{operation} expects {expected}, got {self.actual_type}")


class UnknownFunctionError(EvalError):
    """A formula called a function that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown function: {name}")


class ArgumentCountError(EvalError):
    """A function was called with the wrong number of arguments."""

    def __init__(self, name: str, expected: str, actual: int) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f"{name}() takes {expected} argument(s), got {actual}")


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolveError(CredentialInjectionError):
    """A merge field could not be resolved from the resolution context."""

    pass


class SecretNotFoundError(ResolveError):
    """No winning value exists for the given container and parameter."""

    def __init__(self, container: str, parameter: str, reason: str | None = None) -> None:
        self.container = container
        self.parameter = parameter
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"No value for '{container}.{parameter}'{detail}")


# ---------------------------------------------------------------------------
# Header building
# ---------------------------------------------------------------------------


class AugmentError(CredentialInjectionError):
    """Headers could not be built for a request."""

    pass


class AmbiguousSequenceError(AugmentError):
    """Two candidates share the lowest sequence number."""

    def __init__(self, kind: str, target: str, sequence_number: int, candidates: list[str]) -> None:
        self.kind = kind
        self.target = target
        self.sequence_number = sequence_number
        self.candidates = candidates
        super().__init__(
            f"Ambiguous {kind} for '{target}': {', '.join(candidates)} "
            f"share sequence number {sequence_number}"
        )


class NoApplicableMappingError(AugmentError):
    """The principal holds no permission set granting a mapping for a container."""

    def __init__(self, container: str, principal: str) -> None:
        self.container = container
        self.principal = principal
        super().__init__(f"Principal '{principal}' has no applicable mapping for container '{container}'")


class EvalFailedError(AugmentError):
    """Evaluating a header template failed."""

    def __init__(self, header_name: str, cause: Exception) -> None:
        self.header_name = header_name
        self.cause = cause
        super().__init__(f"Header '{header_name}' failed to evaluate: {cause}")
        self.__cause__ = cause
