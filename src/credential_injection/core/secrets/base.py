"""Secret store abstractions and models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class SecretLookupStatus(str, Enum):
    """Outcome of a secret lookup."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class SecretReference:
    """Address of a secret in a store.

    Args:
        container: Auth container name.
        key: Secret key within the container.
    """

    container: str
    key: str

    def __str__(self) -> str:
        return f"{self.container}/{self.key}"


@dataclass
class SecretLookupResult:
    """Result of looking up a secret.

    The ``value`` field is masked in ``__repr__`` to prevent accidental
    leakage in logs or tracebacks.

    Args:
        reference: The reference that was looked up.
        status: Outcome of the lookup.
        value: The secret value (only set on success).
        error: Error description (only set on failure).
    """

    reference: SecretReference
    status: SecretLookupStatus
    value: str | None = None
    error: str | None = None

    def __repr__(self) -> str:
        masked = "***" if self.value is not None else "None"
        return (
            f"SecretLookupResult("
            f"reference={self.reference!r}, "
            f"status={self.status!r}, "
            f"value={masked}, "
            f"error={self.error!r})"
        )

    @property
    def found(self) -> bool:
        return self.status == SecretLookupStatus.SUCCESS

    @classmethod
    def success(cls, reference: SecretReference, value: str) -> SecretLookupResult:
        return cls(reference=reference, status=SecretLookupStatus.SUCCESS, value=value)

    @classmethod
    def not_found(cls, reference: SecretReference, error: str) -> SecretLookupResult:
        return cls(reference=reference, status=SecretLookupStatus.NOT_FOUND, error=error)

    @classmethod
    def failed(cls, reference: SecretReference, error: str) -> SecretLookupResult:
        return cls(reference=reference, status=SecretLookupStatus.ERROR, error=error)


class SecretStore(ABC):
    """Base class for secret stores.

    Stores are opaque to the engine: values are looked up by
    ``(container, key)`` and handed to the resolution context without
    being logged or persisted. Subclasses implement :meth:`lookup` and
    report failures through the result status instead of raising.
    """

    @property
    @abstractmethod
    def store_name(self) -> str:
        """Short name for this store (e.g. ``"env"``, ``"vault"``)."""
        ...

    @abstractmethod
    def lookup(self, container: str, key: str) -> SecretLookupResult:
        """Look up a single secret."""
        ...

    def lookup_all(self, references: list[SecretReference]) -> list[SecretLookupResult]:
        """Look up multiple secrets."""
        return [self.lookup(ref.container, ref.key) for ref in references]
