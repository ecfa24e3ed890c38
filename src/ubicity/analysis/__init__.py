"""Aggregate views over sanitized learning experiences.

Every analyzer takes the output of :class:`ubicity.privacy.PrivacyFilter` and
returns a freshly built result. Inputs are never mutated or retained.
"""

from .connections import (
    domain_connections,
    interdisciplinary_experiences,
    jaccard_similarity,
    learner_similarity,
)
from .hotspots import DEFAULT_MIN_COUNT, HotspotDetector, detect_hotspots, diversity_score, group_by_location
from .journeys import JourneyTracker, build_journeys
from .network import DomainNetworkBuilder, build_network

__all__ = [
    "DEFAULT_MIN_COUNT",
    "DomainNetworkBuilder",
    "HotspotDetector",
    "JourneyTracker",
    "build_journeys",
    "build_network",
    "detect_hotspots",
    "diversity_score",
    "domain_connections",
    "group_by_location",
    "interdisciplinary_experiences",
    "jaccard_similarity",
    "learner_similarity",
]
