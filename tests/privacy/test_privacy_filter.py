"""Tests for privacy tier enforcement."""

import pytest
from pydantic import ValidationError

from ubicity.configuration import PrivacySettings
from ubicity.errors import RecordValidationError
from ubicity.models import LearningExperience, PrivacyTier, SanitizedExperience
from ubicity.observability import MetricsCollector
from ubicity.privacy import (
    EMAIL_PLACEHOLDER,
    PHONE_PLACEHOLDER,
    PrivacyFilter,
    hash_identifier,
)


class TestApplyTier:
    def test_private_record_is_excluded(self, privacy_filter, record_factory):
        record = record_factory(
            "exp-001",
            learner_id="alice@example.com",
            learner_name="Alice Johnson",
            coordinates={"lat": 37.7749295, "lon": -122.4194155},
            description="Met with mentor Bob Smith",
            privacy="private",
        )

        assert privacy_filter.apply_tier(record) is None

    def test_anonymous_record_is_anonymized(self, privacy_filter, record_factory):
        record = record_factory(
            "exp-001",
            learner_id="alice@example.com",
            learner_name="Alice Johnson",
            coordinates={"lat": 37.7749295, "lon": -122.4194155},
            domains=("electronics", "art"),
            description="Built a light-up sculpture",
            privacy="anonymous",
        )

        sanitized = privacy_filter.apply_tier(record)

        assert isinstance(sanitized, SanitizedExperience)
        assert sanitized.learner_id == hash_identifier("alice@example.com")
        assert "@" not in sanitized.learner_id
        assert sanitized.learner.name is None
        assert sanitized.coordinates is None
        assert sanitized.location_name == "Makerspace A"
        assert sanitized.experience.domain == ("electronics", "art")
        assert sanitized.experience.description == "Built a light-up sculpture"
        assert sanitized.privacy is PrivacyTier.ANONYMOUS
        assert sanitized.id == "exp-001"

    def test_public_record_passes_through(self, privacy_filter, record_factory):
        record = record_factory(
            "exp-001",
            learner_id="alice",
            learner_name="Alice",
            coordinates={"lat": 37.7749295, "lon": -122.4194155},
            privacy="public",
        )

        sanitized = privacy_filter.apply_tier(record)
        original = LearningExperience.model_validate(record)

        assert sanitized.model_dump() == original.model_dump()
        assert sanitized.learner.name == "Alice"
        assert sanitized.coordinates.lat == 37.7749295

    def test_missing_tier_defaults_to_public(self, privacy_filter, record_factory):
        record = record_factory("exp-001", learner_id="alice", learner_name="Alice")

        sanitized = privacy_filter.apply_tier(record)

        assert sanitized.privacy is PrivacyTier.PUBLIC
        assert sanitized.learner_id == "alice"

    def test_anonymous_without_learner(self, privacy_filter, record_factory):
        record = record_factory("exp-001", learner_id=None, privacy="anonymous")

        sanitized = privacy_filter.apply_tier(record)

        assert sanitized.learner is None

    def test_input_is_not_mutated(self, privacy_filter, record_factory):
        record = record_factory(
            "exp-001",
            learner_id="alice",
            learner_name="Alice",
            coordinates={"lat": 1.5, "lon": 2.5},
            privacy="anonymous",
        )
        model = LearningExperience.model_validate(record)

        privacy_filter.apply_tier(model)

        assert model.learner_id == "alice"
        assert model.coordinates is not None
        assert record["learner"]["name"] == "Alice"

    def test_sanitized_record_is_not_reprocessed(self, privacy_filter, record_factory):
        sanitized = privacy_filter.apply_tier(record_factory("exp-001", privacy="anonymous"))

        assert privacy_filter.apply_tier(sanitized) is sanitized

    @pytest.mark.parametrize("missing", ["id", "timestamp"])
    def test_missing_required_field_rejected(self, privacy_filter, record_factory, missing):
        record = record_factory("exp-001", privacy="private")
        del record[missing]

        with pytest.raises(RecordValidationError) as exc_info:
            privacy_filter.apply_tier(record)

        assert any(problem.startswith(missing) for problem in exc_info.value.problems)


class TestSanitizeAll:
    def test_order_preserved_and_private_dropped(self, privacy_filter, mixed_tier_records):
        sanitized = privacy_filter.sanitize_all(mixed_tier_records)

        assert [record.id for record in sanitized] == ["exp-001", "exp-002"]
        assert all(record.privacy is not PrivacyTier.PRIVATE for record in sanitized)

    def test_invalid_records_skipped_by_default(self, privacy_filter, record_factory):
        records = [
            record_factory("exp-001"),
            {"timestamp": "2025-01-01T10:00:00Z"},
            record_factory("exp-003", timestamp="not a date"),
            record_factory("exp-004"),
        ]

        sanitized = privacy_filter.sanitize_all(records)

        assert [record.id for record in sanitized] == ["exp-001", "exp-004"]

    def test_invalid_record_raises_when_not_skipping(self, privacy_filter, record_factory):
        records = [record_factory("exp-001"), record_factory("exp-002", timestamp="")]

        with pytest.raises(RecordValidationError) as exc_info:
            privacy_filter.sanitize_all(records, skip_invalid=False)

        assert exc_info.value.record_id == "exp-002"
        assert exc_info.value.index == 1

    def test_empty_and_all_private_inputs(self, privacy_filter, record_factory):
        assert privacy_filter.sanitize_all([]) == []
        assert privacy_filter.sanitize_all([record_factory("exp-001", privacy="private")]) == []

    def test_shareable_matches_sanitize_all(self, privacy_filter, mixed_tier_records):
        assert privacy_filter.shareable(mixed_tier_records) == privacy_filter.sanitize_all(mixed_tier_records)

    def test_extra_fields_are_minimized(self, privacy_filter, record_factory):
        record = record_factory("exp-001", learner_name="Alice")
        record["learner"]["email"] = "alice@example.com"
        record["learner"]["phone"] = "555-1234"
        record["context"]["weather"] = "sunny"

        sanitized = privacy_filter.apply_tier(record)
        dumped = sanitized.model_dump()

        assert "email" not in dumped["learner"]
        assert "phone" not in dumped["learner"]
        assert "weather" not in dumped["context"]


class TestSanitizeBatch:
    def test_report_counts(self, privacy_filter, mixed_tier_records, record_factory):
        records = mixed_tier_records + [{"id": "broken"}]

        report = privacy_filter.sanitize_batch(records)

        assert len(report.records) == 2
        assert report.excluded_private == 1
        assert len(report.rejected) == 1
        assert report.rejected[0].record_id == "broken"
        assert report.tier_counts == {"public": 1, "anonymous": 1, "private": 1}

    def test_metrics_recorded(self, record_factory):
        collector = MetricsCollector()
        privacy_filter = PrivacyFilter(metrics=collector)

        privacy_filter.sanitize_all([record_factory("exp-001")])

        summary = collector.summary("privacy.sanitize")
        assert summary is not None
        assert summary.count == 1


class TestOptionalBehaviour:
    def test_redact_descriptions_for_anonymous(self, mixed_tier_records):
        privacy_filter = PrivacyFilter(redact_descriptions=True)

        sanitized = privacy_filter.sanitize_all(mixed_tier_records)
        description = sanitized[1].experience.description

        assert EMAIL_PLACEHOLDER in description
        assert PHONE_PLACEHOLDER in description

    def test_descriptions_untouched_by_default(self, privacy_filter, mixed_tier_records):
        sanitized = privacy_filter.sanitize_all(mixed_tier_records)

        assert "bob@example.com" in sanitized[1].experience.description

    def test_fuzz_public_coordinates(self, record_factory):
        privacy_filter = PrivacyFilter(fuzz_public_coordinates=True, coordinate_precision=2)
        record = record_factory("exp-001", coordinates={"lat": 37.7749295, "lon": -122.4194155})

        sanitized = privacy_filter.apply_tier(record)

        assert sanitized.coordinates.lat == 37.77
        assert sanitized.coordinates.lon == -122.42

    def test_from_settings_uses_keyed_hash(self, record_factory):
        settings = PrivacySettings(hash_key="pepper")
        privacy_filter = PrivacyFilter.from_settings(settings)

        sanitized = privacy_filter.apply_tier(record_factory("exp-001", learner_id="alice", privacy="anonymous"))

        assert sanitized.learner_id != hash_identifier("alice")
        assert len(sanitized.learner_id) == 64


class TestSanitizedTierIntegrity:
    def test_private_sanitized_record_cannot_be_built(self, record_factory):
        with pytest.raises(ValidationError):
            SanitizedExperience.model_validate(record_factory("exp-001", learner_id="carol", privacy="private"))

    def test_anonymous_sanitized_record_needs_hashed_id(self, record_factory):
        with pytest.raises(ValidationError):
            SanitizedExperience.model_validate(record_factory("exp-001", learner_id="carol", privacy="anonymous"))

    def test_private_copy_is_excluded(self, privacy_filter, record_factory):
        public = privacy_filter.apply_tier(record_factory("priv-1", learner_id="carol", learner_name="Carol"))
        private = public.model_copy(update={"privacy": PrivacyTier.PRIVATE})

        report = privacy_filter.sanitize_batch([private, private])

        assert report.records == ()
        assert report.excluded_private == 2
        assert privacy_filter.apply_tier(private) is None

    def test_anonymous_copy_is_anonymized_again(self, privacy_filter, record_factory):
        public = privacy_filter.apply_tier(
            record_factory(
                "exp-001",
                learner_id="carol",
                learner_name="Carol",
                coordinates={"lat": 37.7749295, "lon": -122.4194155},
            )
        )
        leaked = public.model_copy(update={"privacy": PrivacyTier.ANONYMOUS})

        sanitized = privacy_filter.apply_tier(leaked)

        assert sanitized is not leaked
        assert sanitized.learner_id == hash_identifier("carol")
        assert sanitized.learner.name is None
        assert sanitized.coordinates is None
