"""Shared fixtures for the UbiCity test suite."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from ubicity.models import SanitizedExperience
from ubicity.privacy import PrivacyFilter


def make_record(
    record_id: str,
    *,
    timestamp: str = "2025-01-01T10:00:00Z",
    learner_id: Optional[str] = "alice",
    learner_name: Optional[str] = None,
    location: Optional[str] = "Makerspace A",
    coordinates: Optional[Dict[str, float]] = None,
    domains: Sequence[str] = ("electronics",),
    description: Optional[str] = None,
    privacy: Optional[str] = None,
    experience_type: str = "workshop",
) -> Dict[str, Any]:
    """Build a raw learning experience mapping as the capture layer would."""
    record: Dict[str, Any] = {
        "id": record_id,
        "timestamp": timestamp,
        "experience": {"type": experience_type, "domain": list(domains)},
    }
    if learner_id is not None or learner_name is not None:
        record["learner"] = {"id": learner_id, "name": learner_name}
    if location is not None or coordinates is not None:
        location_payload: Dict[str, Any] = {"name": location}
        if coordinates is not None:
            location_payload["coordinates"] = coordinates
        record["context"] = {"location": location_payload}
    if description is not None:
        record["experience"]["description"] = description
    if privacy is not None:
        record["privacy"] = privacy
    return record


@pytest.fixture
def record_factory() -> Callable[..., Dict[str, Any]]:
    return make_record


@pytest.fixture
def privacy_filter() -> PrivacyFilter:
    return PrivacyFilter()


@pytest.fixture
def sanitize(privacy_filter: PrivacyFilter) -> Callable[[List[Dict[str, Any]]], List[SanitizedExperience]]:
    """Run raw mappings through the default privacy filter."""

    def _sanitize(records: List[Dict[str, Any]]) -> List[SanitizedExperience]:
        return privacy_filter.sanitize_all(records)

    return _sanitize


@pytest.fixture
def mixed_tier_records() -> List[Dict[str, Any]]:
    return [
        make_record(
            "exp-001",
            learner_id="alice@example.com",
            learner_name="Alice Johnson",
            coordinates={"lat": 37.7749295, "lon": -122.4194155},
            domains=("electronics", "art"),
            privacy="public",
        ),
        make_record(
            "exp-002",
            timestamp="2025-01-02T10:00:00Z",
            learner_id="alice@example.com",
            learner_name="Alice Johnson",
            coordinates={"lat": 37.7749295, "lon": -122.4194155},
            domains=("art", "sculpture"),
            description="Met mentor at bob@example.com, call 555-123-4567",
            privacy="anonymous",
        ),
        make_record(
            "exp-003",
            timestamp="2025-01-03T10:00:00Z",
            learner_id="carol",
            learner_name="Carol",
            domains=("secret-domain", "electronics"),
            privacy="private",
        ),
    ]
