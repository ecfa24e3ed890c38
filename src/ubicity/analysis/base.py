"""Shared input checks for the analyzers."""

from __future__ import annotations

from typing import Iterable, Tuple

from ubicity.errors import PrivacyViolationError
from ubicity.models import SanitizedExperience


def ensure_sanitized(records: Iterable[SanitizedExperience], component: str) -> Tuple[SanitizedExperience, ...]:
    """Snapshot ``records``, refusing anything PrivacyFilter did not produce.

    A sanitized record whose tier rules no longer hold (a private tier, or an
    anonymous one with identifying fields) is refused as well.
    """
    snapshot = tuple(records)
    for record in snapshot:
        if not isinstance(record, SanitizedExperience) or record.tier_violation() is not None:
            raise PrivacyViolationError(component, record_id=getattr(record, "id", None))
    return snapshot
