"""Interdisciplinary connections and domain similarity."""

from __future__ import annotations

from typing import Iterable, List, Mapping

from ubicity.models import Journey, SanitizedExperience

from .base import ensure_sanitized

CONNECTION_SEPARATOR = "→"


def interdisciplinary_experiences(
    sanitized: Iterable[SanitizedExperience],
    min_domains: int = 2,
) -> List[SanitizedExperience]:
    """Experiences touching at least ``min_domains`` distinct domains, in input order."""
    if min_domains < 1:
        raise ValueError("min_domains must be >= 1")
    return [
        record
        for record in ensure_sanitized(sanitized, "interdisciplinary_experiences")
        if len(record.domains) >= min_domains
    ]


def domain_connections(sanitized: Iterable[SanitizedExperience]) -> List[str]:
    """Every canonical domain pair per experience, rendered ``"a→b"``.

    One entry per experience and pair, so repeated pairs show up repeatedly.
    """
    connections = []
    for record in ensure_sanitized(sanitized, "domain_connections"):
        for a, b in record.domains.pairs():
            connections.append(f"{a}{CONNECTION_SEPARATOR}{b}")
    return connections


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B|; two empty collections score 0.0."""
    left, right = set(a), set(b)
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


def learner_similarity(journeys: Mapping[str, Journey], learner_a: str, learner_b: str) -> float:
    """Jaccard similarity of two learners' domain interests.

    Raises:
        KeyError: if either learner has no journey.
    """
    return jaccard_similarity(journeys[learner_a].domains, journeys[learner_b].domains)
