"""Header building result models."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import overload

from credential_injection.core.utils import MASK


@dataclass(frozen=True)
class Header:
    """A single computed HTTP header.

    The value is masked in ``repr`` because it usually carries a
    credential.
    """

    name: str
    value: str

    def __repr__(self) -> str:
        return f"Header(name={self.name!r}, value={MASK!r})"

    def as_tuple(self) -> tuple[str, str]:
        return (self.name, self.value)


class HeaderSet(Sequence[Header]):
    """Immutable, ordered set of computed headers for one request.

    Args:
        endpoint: Endpoint the headers were built for.
        headers: Headers in template-declaration order.
    """

    def __init__(self, endpoint: str, headers: Sequence[Header] = ()) -> None:
        self._endpoint = endpoint
        self._headers: tuple[Header, ...] = tuple(headers)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def names(self) -> list[str]:
        """Return header names in order."""
        return [h.name for h in self._headers]

    @overload
    def __getitem__(self, index: int) -> Header: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Header]: ...

    def __getitem__(self, index: int | slice) -> Header | Sequence[Header]:
        return self._headers[index]

    def __len__(self) -> int:
        return len(self._headers)

    def __iter__(self) -> Iterator[Header]:
        return iter(self._headers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderSet):
            return NotImplemented
        return self._endpoint == other._endpoint and self._headers == other._headers

    def __hash__(self) -> int:
        return hash((self._endpoint, self._headers))

    def get(self, name: str) -> str | None:
        """Return the value of header *name* (case-insensitive), or ``None``."""
        wanted = name.lower()
        for header in self._headers:
            if header.name.lower() == wanted:
                return header.value
        return None

    def as_list(self) -> list[tuple[str, str]]:
        """Return ``(name, value)`` pairs in order."""
        return [h.as_tuple() for h in self._headers]

    def as_dict(self) -> dict[str, str]:
        """Return headers as an insertion-ordered dict, e.g. for ``httpx``."""
        return dict(self.as_list())

    def __repr__(self) -> str:
        return f"HeaderSet(endpoint={self._endpoint!r}, headers={self.names!r})"
