"""Ordered set of domain labels attached to a learning experience."""

from __future__ import annotations

from itertools import combinations
from typing import Iterable, Iterator, Tuple


def canonical_edge_key(a: str, b: str) -> Tuple[str, str]:
    """Return the lexicographically ordered key for the unordered pair ``{a, b}``."""
    if a == b:
        raise ValueError(f"Self-loop edge is not allowed: {a!r}")
    return (a, b) if a < b else (b, a)


class DomainSet:
    """Immutable set of domain labels that remembers first-seen order.

    Duplicates are dropped on construction. Equality ignores order, iteration
    and ``labels`` follow insertion order so renderers can keep the learner's
    own ordering.
    """

    __slots__ = ("_labels", "_members")

    def __init__(self, labels: Iterable[str] = ()) -> None:
        seen: dict[str, None] = {}
        for label in labels:
            seen.setdefault(label, None)
        self._labels: Tuple[str, ...] = tuple(seen)
        self._members = frozenset(self._labels)

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    def pairs(self) -> Iterator[Tuple[str, str]]:
        """Yield the canonical key of every unordered pair of distinct labels."""
        for a, b in combinations(self._labels, 2):
            yield canonical_edge_key(a, b)

    def union(self, other: Iterable[str]) -> "DomainSet":
        return DomainSet((*self._labels, *other))

    def intersection(self, other: Iterable[str]) -> "DomainSet":
        other_members = frozenset(other)
        return DomainSet(label for label in self._labels if label in other_members)

    def __contains__(self, label: object) -> bool:
        return label in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __bool__(self) -> bool:
        return bool(self._labels)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DomainSet):
            return self._members == other._members
        if isinstance(other, (set, frozenset)):
            return self._members == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"DomainSet({list(self._labels)!r})"
