"""Per-request resolution context.

A :class:`ResolutionContext` is built once per ``build_headers`` call and
discarded afterwards. It binds each required container to the mapping that
won for the acting principal, plus the parameter values fetched for it.
Values are kept private and masked in ``repr``; the merge-field resolver
is the only reader.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class ContainerBinding:
    """Winning parameter set for one container.

    Args:
        container: Container name.
        mapping: Name of the permission-set mapping that won.
        sequence_number: Sequence number of the winning mapping.
        values: Parameter name -> secret value, for fetched parameters.
        missing: Parameter name -> reason, for parameters that could not
            be fetched or are not bound by the winning mapping.
    """

    container: str
    mapping: str
    sequence_number: int
    values: Mapping[str, str] = field(default_factory=dict, repr=False)
    missing: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(self, "missing", MappingProxyType(dict(self.missing)))

    def __repr__(self) -> str:
        return (
            f"ContainerBinding(container={self.container!r}, mapping={self.mapping!r}, "
            f"sequence_number={self.sequence_number}, values=<{len(self.values)} masked>, "
            f"missing={sorted(self.missing)!r})"
        )


class ResolutionContext:
    """Immutable container name -> :class:`ContainerBinding` map.

    Args:
        bindings: Bindings for every container required by the request.
        principal: Name of the acting principal, for error messages.
    """

    def __init__(self, bindings: Mapping[str, ContainerBinding] | None = None, principal: str = "") -> None:
        self._bindings: Mapping[str, ContainerBinding] = MappingProxyType(dict(bindings or {}))
        self._principal = principal

    @property
    def principal(self) -> str:
        return self._principal

    def binding(self, container: str) -> ContainerBinding | None:
        """Return the binding for *container*, or ``None`` if not bound."""
        return self._bindings.get(container)

    def containers(self) -> Iterator[str]:
        return iter(self._bindings)

    def __contains__(self, container: object) -> bool:
        return container in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"ResolutionContext(principal={self._principal!r}, containers={sorted(self._bindings)!r})"
