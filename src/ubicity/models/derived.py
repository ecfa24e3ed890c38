"""Derived analytics views: hotspots, the domain graph and learner journeys.

All views are rebuilt from the sanitized record set on every call and carry no
identity of their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .domains import DomainSet, canonical_edge_key
from .experience import SanitizedExperience


@dataclass(frozen=True)
class Hotspot:
    """A location whose sanitized experience count met the threshold.

    Attributes:
        location: Location name the records were grouped under
        experience_ids: Record ids in input order
        count: Number of records at the location
        diversity_score: Distinct domain labels divided by ``count``, in (0, 1]
        domains: The distinct labels seen at the location
    """

    location: str
    experience_ids: Tuple[str, ...]
    count: int
    diversity_score: float
    domains: DomainSet = field(default_factory=DomainSet)


@dataclass(frozen=True)
class DomainEdge:
    """Undirected weighted edge between two domain labels.

    ``source`` always sorts before ``target``.
    """

    source: str
    target: str
    weight: int

    def __post_init__(self) -> None:
        if canonical_edge_key(self.source, self.target) != (self.source, self.target):
            raise ValueError(f"Edge endpoints must be in canonical order: {self.source!r}, {self.target!r}")
        if self.weight < 1:
            raise ValueError("Edge weight must be positive")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.source, self.target)


@dataclass(frozen=True)
class DomainGraph:
    """Domain co-occurrence network."""

    nodes: frozenset = field(default_factory=frozenset)
    edges: Mapping[Tuple[str, str], DomainEdge] = field(default_factory=lambda: MappingProxyType({}))

    def weight(self, a: str, b: str) -> int:
        """Co-occurrence count for ``{a, b}``; 0 when the pair never appeared."""
        if a == b:
            return 0
        edge = self.edges.get(canonical_edge_key(a, b))
        return edge.weight if edge else 0

    def neighbors(self, label: str) -> List[str]:
        found = []
        for source, target in self.edges:
            if source == label:
                found.append(target)
            elif target == label:
                found.append(source)
        return sorted(found)

    def degree(self, label: str) -> int:
        return len(self.neighbors(label))

    def edge_list(self) -> List[DomainEdge]:
        """Edges by descending weight, ties by canonical key."""
        return sorted(self.edges.values(), key=lambda edge: (-edge.weight, edge.key))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DomainGraph):
            return NotImplemented
        return self.nodes == other.nodes and dict(self.edges) == dict(other.edges)

    def __hash__(self) -> int:
        return hash((self.nodes, frozenset(self.edges.items())))


@dataclass(frozen=True)
class Journey:
    """One learner's sanitized experiences in chronological order."""

    learner_id: str
    entries: Tuple[SanitizedExperience, ...]

    @property
    def first_seen(self) -> Optional[datetime]:
        return self.entries[0].timestamp if self.entries else None

    @property
    def last_seen(self) -> Optional[datetime]:
        return self.entries[-1].timestamp if self.entries else None

    @property
    def domains(self) -> DomainSet:
        """Labels across the journey in order of first appearance."""
        return DomainSet(label for entry in self.entries for label in entry.domains)

    @property
    def locations(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for entry in self.entries:
            name = entry.location_name
            if name:
                seen.setdefault(name, None)
        return tuple(seen)

    def __len__(self) -> int:
        return len(self.entries)
