"""Acting principals and the permission-set check."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Principal:
    """The user or service on whose behalf a request is made.

    Args:
        name: Principal identifier.
        permission_sets: Permission sets the principal holds.
    """

    name: str
    permission_sets: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name is required")
        object.__setattr__(self, "permission_sets", frozenset(self.permission_sets))


@runtime_checkable
class PermissionChecker(Protocol):
    """Answers whether a principal holds a permission set.

    Backed by an external authorization service; the engine only asks
    the question and never enforces permissions itself.
    """

    def holds(self, principal: Principal, permission_set: str) -> bool:
        ...


class StaticPermissionChecker:
    """Answer from :attr:`Principal.permission_sets`."""

    def holds(self, principal: Principal, permission_set: str) -> bool:
        return permission_set in principal.permission_sets
