"""Privacy-tier enforcement for learning experience records.

``PrivacyFilter`` is the single entry point between raw records and the
analyzers. It validates every record, then applies its tier:

- ``private``: dropped, nothing is produced
- ``anonymous``: learner id hashed, learner name and coordinates removed
- ``public`` (or no tier): passed through unchanged

Its output, a sequence of :class:`SanitizedExperience`, is the only input the
hotspot, network and journey builders accept.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, List, Mapping, Optional, Tuple

from ubicity.errors import RecordValidationError
from ubicity.models import (
    Learner,
    LearningExperience,
    PrivacyTier,
    SanitizedExperience,
    validate_batch,
    validate_experience,
)
from ubicity.models.validation import RawRecord
from ubicity.observability import measure

from .anonymization import AnonymizationEngine, HashlibHasher

if TYPE_CHECKING:
    from ubicity.configuration.settings import PrivacySettings
    from ubicity.observability import MetricsCollector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanitizationReport:
    """Result of sanitizing a batch, including what was left out and why."""

    records: Tuple[SanitizedExperience, ...]
    rejected: Tuple[RecordValidationError, ...]
    excluded_private: int
    tier_counts: Mapping[str, int]


class PrivacyFilter:
    """Apply per-record privacy tiers.

    The optional behaviours are off by default so the three tiers behave
    exactly as documented above.

    Args:
        engine: Anonymization engine for the ``anonymous`` tier
        redact_descriptions: Redact emails/phones in anonymous descriptions
        fuzz_public_coordinates: Round public coordinates to ``coordinate_precision``
        coordinate_precision: Decimal places kept when fuzzing
        metrics: Optional collector that receives per-batch timings
    """

    def __init__(
        self,
        engine: Optional[AnonymizationEngine] = None,
        *,
        redact_descriptions: bool = False,
        fuzz_public_coordinates: bool = False,
        coordinate_precision: Optional[int] = None,
        metrics: Optional["MetricsCollector"] = None,
    ) -> None:
        self.engine = engine or AnonymizationEngine()
        self.redact_descriptions = redact_descriptions
        self.fuzz_public_coordinates = fuzz_public_coordinates
        self.coordinate_precision = coordinate_precision
        self._metrics = metrics

    @classmethod
    def from_settings(
        cls,
        settings: "PrivacySettings",
        *,
        metrics: Optional["MetricsCollector"] = None,
    ) -> "PrivacyFilter":
        key = settings.hash_key.get_secret_value().encode("utf-8") if settings.hash_key else None
        engine = AnonymizationEngine(
            HashlibHasher(algorithm=settings.hash_algorithm, key=key),
            default_precision=settings.coordinate_precision,
        )
        return cls(
            engine,
            redact_descriptions=settings.redact_descriptions,
            fuzz_public_coordinates=settings.fuzz_public_coordinates,
            coordinate_precision=settings.coordinate_precision,
            metrics=metrics,
        )

    def apply_tier(self, record: RawRecord) -> Optional[SanitizedExperience]:
        """Validate ``record`` and return its sanitized form, or ``None`` if private.

        Raises:
            RecordValidationError: if the record lacks a usable id or timestamp.
        """
        return self._apply(validate_experience(record))

    def sanitize_all(
        self,
        records: Iterable[RawRecord],
        *,
        skip_invalid: bool = True,
    ) -> List[SanitizedExperience]:
        """Sanitize ``records`` in input order, dropping private and invalid ones."""
        return list(self.sanitize_batch(records, skip_invalid=skip_invalid).records)

    shareable = sanitize_all

    def sanitize_batch(
        self,
        records: Iterable[RawRecord],
        *,
        skip_invalid: bool = True,
    ) -> SanitizationReport:
        with measure("privacy.sanitize", self._metrics):
            validated = validate_batch(records, skip_invalid=skip_invalid)
            tiers: Counter = Counter()
            sanitized: List[SanitizedExperience] = []
            for record in validated.accepted:
                tiers[record.privacy.value] += 1
                result = self._apply(record)
                if result is not None:
                    sanitized.append(result)

        excluded = tiers[PrivacyTier.PRIVATE.value]
        logger.debug(
            "Sanitized %d of %d records (%d private, %d rejected)",
            len(sanitized),
            validated.total,
            excluded,
            len(validated.rejected),
        )
        return SanitizationReport(
            records=tuple(sanitized),
            rejected=validated.rejected,
            excluded_private=excluded,
            tier_counts=MappingProxyType(dict(tiers)),
        )

    def _apply(self, record: LearningExperience) -> Optional[SanitizedExperience]:
        if record.privacy is PrivacyTier.PRIVATE:
            return None
        if isinstance(record, SanitizedExperience) and record.tier_violation() is None:
            return record
        if record.privacy is PrivacyTier.ANONYMOUS:
            return self._anonymize(record)
        return self._publish(record)

    def _anonymize(self, record: LearningExperience) -> SanitizedExperience:
        learner = None
        if record.learner_id is not None:
            learner = Learner(id=self.engine.hash_identifier(record.learner_id))

        context = record.context
        location = record.location
        if location is not None and location.coordinates is not None:
            context = context.model_copy(update={"location": location.model_copy(update={"coordinates": None})})

        experience = record.experience
        if self.redact_descriptions and experience.description:
            experience = experience.model_copy(
                update={"description": self.engine.redact_pii(experience.description)}
            )

        return _sanitized(record, learner=learner, context=context, experience=experience)

    def _publish(self, record: LearningExperience) -> SanitizedExperience:
        context = record.context
        coordinates = record.coordinates
        if self.fuzz_public_coordinates and coordinates is not None:
            fuzzed = self.engine.fuzz_coordinates(coordinates.lat, coordinates.lon, self.coordinate_precision)
            context = context.model_copy(
                update={"location": record.location.model_copy(update={"coordinates": fuzzed})}
            )
        return _sanitized(record, learner=record.learner, context=context, experience=record.experience)


def _sanitized(record: LearningExperience, *, learner, context, experience) -> SanitizedExperience:
    return SanitizedExperience(
        id=record.id,
        timestamp=record.timestamp,
        learner=learner,
        context=context,
        experience=experience,
        privacy=record.privacy,
    )
