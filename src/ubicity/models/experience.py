"""Learning experience record models.

A learning experience is one discrete informal-learning event captured by a
learner: who took part, where it happened, which knowledge domains it touched,
and when. Records are handed to the analytics core by the capture/storage
layer and are immutable from then on.

The models keep only the WHO/WHERE/WHAT fields the analytics need. Anything
else a capture client sends (contact details, mood, weather) is dropped on
validation.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .domains import DomainSet


class PrivacyTier(str, Enum):
    """How a record may be exposed in derived views."""

    PUBLIC = "public"
    """Shown as captured."""

    ANONYMOUS = "anonymous"
    """Shown with a hashed learner id, no learner name and no coordinates."""

    PRIVATE = "private"
    """Never shown in any derived view."""


_RECORD_CONFIG = ConfigDict(frozen=True, extra="ignore")

_DIGEST_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 instant into an aware ``datetime``.

    Naive values are taken as UTC and a bare date is midnight UTC, so every
    timestamp in the core compares against every other.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("timestamp must not be empty")
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"timestamp is not ISO-8601: {value!r}") from exc
    else:
        raise ValueError(f"timestamp must be an ISO-8601 string, got {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Learner(BaseModel):
    """WHO: the person behind an experience."""

    model_config = _RECORD_CONFIG

    id: Optional[str] = None
    name: Optional[str] = None


class Coordinates(BaseModel):
    """Latitude/longitude pair in decimal degrees."""

    model_config = _RECORD_CONFIG

    lat: float = Field(..., ge=-90.0, le=90.0, validation_alias=AliasChoices("lat", "latitude"))
    lon: float = Field(..., ge=-180.0, le=180.0, validation_alias=AliasChoices("lon", "longitude"))

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ValueError("coordinates pair must have exactly two values")
            return {"lat": value[0], "lon": value[1]}
        return value


class Location(BaseModel):
    """WHERE: a named place, optionally with coordinates."""

    model_config = _RECORD_CONFIG

    name: Optional[str] = None
    type: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class Context(BaseModel):
    model_config = _RECORD_CONFIG

    location: Optional[Location] = None


class ExperienceDetails(BaseModel):
    """WHAT: the kind of experience and the domains it touched."""

    model_config = _RECORD_CONFIG

    type: Optional[str] = None
    domain: Tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("domain", "domains"),
    )
    description: Optional[str] = None

    @field_validator("domain", mode="before")
    @classmethod
    def _wrap_single_label(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value


class LearningExperience(BaseModel):
    """A single captured learning experience.

    Example:
        >>> record = LearningExperience.model_validate({
        ...     "id": "exp-001",
        ...     "timestamp": "2025-01-01T10:00:00Z",
        ...     "learner": {"id": "alice"},
        ...     "context": {"location": {"name": "Makerspace A"}},
        ...     "experience": {"domain": ["electronics", "art"]},
        ... })
        >>> record.domains.labels
        ('electronics', 'art')
    """

    model_config = _RECORD_CONFIG

    id: str
    timestamp: datetime
    learner: Optional[Learner] = None
    context: Optional[Context] = None
    experience: ExperienceDetails = Field(default_factory=ExperienceDetails)
    privacy: PrivacyTier = PrivacyTier.PUBLIC

    @field_validator("id")
    @classmethod
    def _require_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("id must not be empty")
        return value

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> datetime:
        return parse_timestamp(value)

    @field_validator("privacy", mode="before")
    @classmethod
    def _default_privacy(cls, value: Any) -> Any:
        if value is None:
            return PrivacyTier.PUBLIC
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def learner_id(self) -> Optional[str]:
        return self.learner.id if self.learner else None

    @property
    def location(self) -> Optional[Location]:
        return self.context.location if self.context else None

    @property
    def location_name(self) -> Optional[str]:
        location = self.location
        return location.name if location else None

    @property
    def coordinates(self) -> Optional[Coordinates]:
        location = self.location
        return location.coordinates if location else None

    @property
    def domains(self) -> DomainSet:
        """Distinct domain labels, duplicates in the captured list ignored."""
        return DomainSet(self.experience.domain)


class SanitizedExperience(LearningExperience):
    """A record that has passed through :class:`ubicity.privacy.PrivacyFilter`.

    Analyzers accept only this type. Its tier is never ``private``.
    """

    @model_validator(mode="after")
    def _check_tier(self) -> "SanitizedExperience":
        problem = self.tier_violation()
        if problem is not None:
            raise ValueError(problem)
        return self

    def tier_violation(self) -> Optional[str]:
        """Describe how this record breaks its tier, or ``None`` if it does not.

        ``model_copy`` skips validation, so consumers call this again rather
        than trusting the type alone.
        """
        if self.privacy is PrivacyTier.PRIVATE:
            return "private records cannot be sanitized"
        if self.privacy is PrivacyTier.ANONYMOUS:
            if self.learner is not None and self.learner.name is not None:
                return "anonymous records must not carry a learner name"
            if self.learner_id is not None and not _DIGEST_PATTERN.fullmatch(self.learner_id):
                return "anonymous records must carry a hashed learner id"
            if self.coordinates is not None:
                return "anonymous records must not carry coordinates"
        return None
