"""Learning hotspot detection.

A hotspot is a named location where the number of sanitized experiences meets
a caller-chosen threshold. Each hotspot carries a diversity score: the number
of distinct domain labels seen there divided by the number of experiences.

The threshold has no single canonical value (dashboards have used 2, bulk
reports 5), so it is always a parameter.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ubicity.models import DomainSet, Hotspot, SanitizedExperience
from ubicity.observability import MetricsCollector, measure

from .base import ensure_sanitized

logger = logging.getLogger(__name__)

DEFAULT_MIN_COUNT = 2


def diversity_score(records: Sequence[SanitizedExperience]) -> float:
    """Distinct domain labels per experience, clamped into (0, 1].

    A group whose records carry no labels at all scores ``1 / len(records)``,
    the same as a group sharing a single label.

    Raises:
        ValueError: for an empty group, which has no defined score.
    """
    if not records:
        raise ValueError("diversity score is undefined for an empty group")
    distinct = len(DomainSet(label for record in records for label in record.domains))
    return max(1, min(distinct, len(records))) / len(records)


class HotspotDetector:
    """Group sanitized experiences by location and flag busy ones.

    Example:
        >>> detector = HotspotDetector(min_count=2)
        >>> hotspots = detector.detect_hotspots(privacy_filter.sanitize_all(records))
        >>> hotspots[0].location, hotspots[0].count
        ('Makerspace A', 2)
    """

    def __init__(self, min_count: int = DEFAULT_MIN_COUNT, *, metrics: Optional[MetricsCollector] = None) -> None:
        _check_min_count(min_count)
        self.min_count = min_count
        self._metrics = metrics

    def group_by_location(
        self, sanitized: Iterable[SanitizedExperience]
    ) -> Dict[str, List[SanitizedExperience]]:
        """Group records by location name in first-seen order.

        Records without a location name are left out.
        """
        groups: Dict[str, List[SanitizedExperience]] = {}
        for record in ensure_sanitized(sanitized, "HotspotDetector"):
            name = record.location_name
            if not name:
                continue
            groups.setdefault(name, []).append(record)
        return groups

    def detect_hotspots(
        self,
        sanitized: Iterable[SanitizedExperience],
        min_count: Optional[int] = None,
    ) -> List[Hotspot]:
        """Return hotspots by descending count, ties by ascending location name."""
        threshold = self.min_count if min_count is None else min_count
        _check_min_count(threshold)

        with measure("analysis.hotspots", self._metrics):
            hotspots = [
                Hotspot(
                    location=location,
                    experience_ids=tuple(record.id for record in records),
                    count=len(records),
                    diversity_score=diversity_score(records),
                    domains=DomainSet(label for record in records for label in record.domains),
                )
                for location, records in self.group_by_location(sanitized).items()
                if len(records) >= threshold
            ]
            hotspots.sort(key=lambda hotspot: (-hotspot.count, hotspot.location))

        logger.debug("Detected %d hotspots (min_count=%d)", len(hotspots), threshold)
        return hotspots


def group_by_location(sanitized: Iterable[SanitizedExperience]) -> Dict[str, List[SanitizedExperience]]:
    return HotspotDetector().group_by_location(sanitized)


def detect_hotspots(
    sanitized: Iterable[SanitizedExperience],
    min_count: int = DEFAULT_MIN_COUNT,
) -> List[Hotspot]:
    return HotspotDetector(min_count).detect_hotspots(sanitized)


def _check_min_count(value: int) -> None:
    if value < 1:
        raise ValueError(f"min_count must be >= 1, got {value}")
