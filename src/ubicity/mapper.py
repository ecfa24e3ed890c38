"""Urban knowledge mapper: the analytics pipeline in one object.

Wires validation, privacy filtering and the analyzers together so hosts that
hold a batch of raw records can ask for every derived view without handling
the sanitized set themselves.

Example:
    >>> mapper = UrbanKnowledgeMapper()
    >>> mapper.load(records)
    >>> report = mapper.report()
    >>> [hotspot.location for hotspot in report.hotspots]
    ['Makerspace A']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ubicity.analysis import (
    DomainNetworkBuilder,
    HotspotDetector,
    JourneyTracker,
    interdisciplinary_experiences,
)
from ubicity.configuration import AnalyticsSettings
from ubicity.errors import RecordValidationError
from ubicity.models import DomainGraph, Hotspot, Journey, SanitizedExperience
from ubicity.models.validation import RawRecord
from ubicity.observability import MetricsCollector, init_observability, measure
from ubicity.privacy import PrivacyFilter, SanitizationReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapperReport:
    """Every derived view over one sanitized snapshot."""

    total_records: int
    sanitized_records: int
    excluded_private: int
    rejected: Tuple[RecordValidationError, ...]
    hotspots: Tuple[Hotspot, ...]
    network: DomainGraph
    journeys: Dict[str, Journey]
    interdisciplinary_count: int

    @property
    def learner_count(self) -> int:
        return len(self.journeys)


class UrbanKnowledgeMapper:
    """Run the privacy filter once and derive views from its output.

    Args:
        settings: Resolved analytics settings; defaults apply when omitted
        metrics: Optional collector shared by every stage
    """

    def __init__(
        self,
        settings: Optional[AnalyticsSettings] = None,
        *,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.settings = settings or AnalyticsSettings()
        self._metrics = metrics
        self.privacy_filter = PrivacyFilter.from_settings(self.settings.privacy, metrics=metrics)
        self.hotspot_detector = HotspotDetector(self.settings.analysis.hotspot_min_count, metrics=metrics)
        self.network_builder = DomainNetworkBuilder(metrics=metrics)
        self.journey_tracker = JourneyTracker(metrics=metrics)
        self._last_report: Optional[SanitizationReport] = None

    @classmethod
    def with_observability(cls, settings: Optional[AnalyticsSettings] = None) -> "UrbanKnowledgeMapper":
        """Build a mapper reporting into a fresh process-wide collector.

        The collector size and logger level come from ``settings.observability``.
        """
        settings = settings or AnalyticsSettings()
        collector = init_observability(
            settings.observability.max_metrics,
            log_level=settings.observability.log_level,
        )
        return cls(settings, metrics=collector)

    @property
    def experiences(self) -> Tuple[SanitizedExperience, ...]:
        """The current sanitized snapshot (empty before :meth:`load`)."""
        return self._last_report.records if self._last_report else ()

    def load(self, records: Iterable[RawRecord]) -> SanitizationReport:
        """Validate and sanitize ``records``, replacing the current snapshot.

        Invalid records are skipped and reported, never fatal.
        """
        report = self.privacy_filter.sanitize_batch(records, skip_invalid=True)
        self._last_report = report
        logger.info(
            "Loaded %d sanitized experiences (%d private, %d rejected)",
            len(report.records),
            report.excluded_private,
            len(report.rejected),
        )
        return report

    def hotspots(self, min_count: Optional[int] = None) -> List[Hotspot]:
        return self.hotspot_detector.detect_hotspots(self.experiences, min_count)

    def network(self) -> DomainGraph:
        return self.network_builder.build_network(self.experiences)

    def journeys(self) -> Dict[str, Journey]:
        return self.journey_tracker.build_journeys(self.experiences)

    def report(self, *, min_count: Optional[int] = None) -> MapperReport:
        with measure("mapper.report", self._metrics):
            loaded = self._last_report
            rejected = loaded.rejected if loaded else ()
            excluded = loaded.excluded_private if loaded else 0
            sanitized = self.experiences
            return MapperReport(
                total_records=len(sanitized) + excluded + len(rejected),
                sanitized_records=len(sanitized),
                excluded_private=excluded,
                rejected=rejected,
                hotspots=tuple(self.hotspots(min_count)),
                network=self.network(),
                journeys=self.journeys(),
                interdisciplinary_count=len(
                    interdisciplinary_experiences(
                        sanitized, self.settings.analysis.min_interdisciplinary_domains
                    )
                ),
            )
