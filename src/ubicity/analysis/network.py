"""Domain co-occurrence network.

Nodes are domain labels; an undirected edge joins two labels each time a single
experience lists both, and its weight counts those experiences. Edge keys are
the lexicographically sorted label pair, so ``(art, electronics)`` and
``(electronics, art)`` address the same edge.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Optional, Set, Tuple

from ubicity.models import DomainEdge, DomainGraph, SanitizedExperience
from ubicity.observability import MetricsCollector, measure

from .base import ensure_sanitized

logger = logging.getLogger(__name__)


class DomainNetworkBuilder:
    def __init__(self, *, metrics: Optional[MetricsCollector] = None) -> None:
        self._metrics = metrics

    def build_network(self, sanitized: Iterable[SanitizedExperience]) -> DomainGraph:
        """Build the weighted co-occurrence graph.

        Single-label records add a node and no edge. Duplicate labels inside
        one record count once.
        """
        nodes: Set[str] = set()
        weights: Dict[Tuple[str, str], int] = {}

        with measure("analysis.network", self._metrics):
            for record in ensure_sanitized(sanitized, "DomainNetworkBuilder"):
                domains = record.domains
                nodes.update(domains)
                for key in domains.pairs():
                    weights[key] = weights.get(key, 0) + 1

            edges = {
                key: DomainEdge(source=key[0], target=key[1], weight=weight)
                for key, weight in sorted(weights.items())
            }

        logger.debug("Built domain network: %d nodes, %d edges", len(nodes), len(edges))
        return DomainGraph(nodes=frozenset(nodes), edges=MappingProxyType(edges))


def build_network(sanitized: Iterable[SanitizedExperience]) -> DomainGraph:
    return DomainNetworkBuilder().build_network(sanitized)
