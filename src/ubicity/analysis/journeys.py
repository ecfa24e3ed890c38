"""Per-learner chronological journeys."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ubicity.models import Journey, SanitizedExperience
from ubicity.observability import MetricsCollector, measure

from .base import ensure_sanitized

logger = logging.getLogger(__name__)


class JourneyTracker:
    """Group sanitized experiences by learner and order them in time.

    Anonymous records are grouped under their hashed learner id, so an
    anonymous learner still has one coherent journey without being named.
    """

    def __init__(self, *, metrics: Optional[MetricsCollector] = None) -> None:
        self._metrics = metrics

    def build_journeys(self, sanitized: Iterable[SanitizedExperience]) -> Dict[str, Journey]:
        """Return learner id -> journey; records without a learner id are skipped.

        Entries are sorted by timestamp with a stable sort, so experiences
        sharing a timestamp keep their input order.
        """
        grouped: Dict[str, List[SanitizedExperience]] = {}
        skipped = 0

        with measure("analysis.journeys", self._metrics):
            for record in ensure_sanitized(sanitized, "JourneyTracker"):
                learner_id = record.learner_id
                if not learner_id:
                    skipped += 1
                    continue
                grouped.setdefault(learner_id, []).append(record)

            journeys = {
                learner_id: Journey(
                    learner_id=learner_id,
                    entries=tuple(sorted(records, key=lambda record: record.timestamp)),
                )
                for learner_id, records in grouped.items()
            }

        if skipped:
            logger.debug("Skipped %d records without a learner id", skipped)
        return journeys

    def journey_for(self, sanitized: Iterable[SanitizedExperience], learner_id: str) -> Optional[Journey]:
        return self.build_journeys(sanitized).get(learner_id)


def build_journeys(sanitized: Iterable[SanitizedExperience]) -> Dict[str, Journey]:
    return JourneyTracker().build_journeys(sanitized)
