"""Merge-field resolution against a :class:`ResolutionContext`."""

from __future__ import annotations

from typing import Protocol

from credential_injection.core.exceptions import ResolveError, SecretNotFoundError
from credential_injection.core.resolution.context import ResolutionContext

CREDENTIAL_NAMESPACE = "Credential"


class NamespaceResolver(Protocol):
    """Resolves the parts after ``$Namespace.`` in a merge field."""

    def resolve_path(self, parts: tuple[str, ...], context: ResolutionContext) -> str:
        ...


class MergeFieldResolver:
    """Resolve ``$Credential.<Container>.<Parameter>`` references.

    Reads the winning value pre-computed in the context; it never
    consults the secret store or compares sequence numbers itself.
    """

    def resolve(self, container: str, parameter: str, context: ResolutionContext) -> str:
        """Return the winning value of *container*.*parameter*.

        Raises:
            SecretNotFoundError: If the container is not bound or the
                parameter has no value in its binding.
        """
        binding = context.binding(container)
        if binding is None:
            raise SecretNotFoundError(container, parameter, "container is not bound for this request")

        value = binding.values.get(parameter)
        if value is None:
            reason = binding.missing.get(parameter, f"not bound by mapping '{binding.mapping}'")
            raise SecretNotFoundError(container, parameter, reason)
        return value

    def resolve_path(self, parts: tuple[str, ...], context: ResolutionContext) -> str:
        if len(parts) != 2:
            raise ResolveError(f"${CREDENTIAL_NAMESPACE} references take the form Container.Parameter")
        return self.resolve(parts[0], parts[1], context)


def resolve(container: str, parameter: str, context: ResolutionContext) -> str:
    """Return the winning value of *container*.*parameter* from *context*.

    Raises:
        SecretNotFoundError: If no value is bound.
    """
    return MergeFieldResolver().resolve(container, parameter, context)
