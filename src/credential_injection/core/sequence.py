"""Winner selection by sequence number.

Used for both header templates targeting the same header and
permission-set mappings competing for a container. Lowest sequence
number wins; equal lowest numbers either fail or fall back to
declaration order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

from credential_injection.core.exceptions import AmbiguousSequenceError

T = TypeVar("T")


def lowest_ties(items: Sequence[T], sequence_of: Callable[[T], int]) -> list[T]:
    """Return the items sharing the lowest sequence number, in input order."""
    if not items:
        return []
    lowest = min(sequence_of(item) for item in items)
    return [item for item in items if sequence_of(item) == lowest]


def pick_lowest(
    items: Sequence[T],
    sequence_of: Callable[[T], int],
    name_of: Callable[[T], str],
    *,
    fail_on_tie: bool,
    kind: str,
    target: str,
) -> T:
    """Return the item with the lowest sequence number.

    Args:
        items: Candidates in declaration order.
        sequence_of: Returns an item's sequence number.
        name_of: Returns an item's display name for error messages.
        fail_on_tie: Raise on equal lowest numbers instead of taking
            the first declared.
        kind: Candidate kind for error messages (e.g. ``"header"``).
        target: What the candidates compete for.

    Raises:
        ValueError: If *items* is empty.
        AmbiguousSequenceError: If the lowest number is shared and
            *fail_on_tie* is set.
    """
    tied = lowest_ties(items, sequence_of)
    if not tied:
        raise ValueError(f"No {kind} candidates for '{target}'")
    if len(tied) > 1 and fail_on_tie:
        raise AmbiguousSequenceError(kind, target, sequence_of(tied[0]), [name_of(item) for item in tied])
    return tied[0]


def group_by_header(items: Sequence[T], header_of: Callable[[T], str]) -> dict[str, list[T]]:
    """Group items by case-insensitive header name, keeping first-seen order."""
    groups: dict[str, list[T]] = {}
    for item in items:
        groups.setdefault(header_of(item).lower(), []).append(item)
    return groups
