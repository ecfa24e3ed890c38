"""Record validation with skip-and-continue batch support."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ubicity.errors import RecordValidationError, summarize_rejections

from .experience import LearningExperience

logger = logging.getLogger(__name__)

RawRecord = Union[LearningExperience, Mapping[str, Any]]


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating a batch of raw records."""

    accepted: Tuple[LearningExperience, ...]
    rejected: Tuple[RecordValidationError, ...]

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)


def validate_experience(record: RawRecord, *, index: Optional[int] = None) -> LearningExperience:
    """Return ``record`` as a validated :class:`LearningExperience`.

    Raises:
        RecordValidationError: when ``id`` or ``timestamp`` is missing or
            unparseable, or any other field has the wrong shape.
    """
    if isinstance(record, LearningExperience):
        return record
    if not isinstance(record, Mapping):
        raise RecordValidationError(
            [f"record: expected a mapping, got {type(record).__name__}"],
            index=index,
        )
    try:
        return LearningExperience.model_validate(dict(record))
    except ValidationError as exc:
        raise RecordValidationError(
            _describe_problems(exc),
            record_id=_peek_id(record),
            index=index,
        ) from exc


def validate_batch(records: Iterable[RawRecord], *, skip_invalid: bool = True) -> ValidationReport:
    """Validate every record, keeping input order.

    With ``skip_invalid`` the failures are collected in the report and the
    remaining records are still processed; otherwise the first failure is
    raised.
    """
    accepted: List[LearningExperience] = []
    rejected: List[RecordValidationError] = []
    for index, record in enumerate(records):
        try:
            accepted.append(validate_experience(record, index=index))
        except RecordValidationError as exc:
            if not skip_invalid:
                raise
            rejected.append(exc)

    if rejected:
        logger.warning("Skipped invalid learning experiences: %s", summarize_rejections(rejected))
    return ValidationReport(accepted=tuple(accepted), rejected=tuple(rejected))


def _describe_problems(exc: ValidationError) -> List[str]:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "record"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return problems


def _peek_id(record: Mapping[str, Any]) -> Optional[str]:
    value = record.get("id")
    if isinstance(value, str) and value.strip():
        return value
    return None
