"""Data models for learning experiences and the views derived from them."""

from .derived import DomainEdge, DomainGraph, Hotspot, Journey
from .domains import DomainSet, canonical_edge_key
from .experience import (
    Context,
    Coordinates,
    ExperienceDetails,
    Learner,
    LearningExperience,
    Location,
    PrivacyTier,
    SanitizedExperience,
    parse_timestamp,
)
from .validation import ValidationReport, validate_batch, validate_experience

__all__ = [
    "Context",
    "Coordinates",
    "DomainEdge",
    "DomainGraph",
    "DomainSet",
    "ExperienceDetails",
    "Hotspot",
    "Journey",
    "Learner",
    "LearningExperience",
    "Location",
    "PrivacyTier",
    "SanitizedExperience",
    "ValidationReport",
    "canonical_edge_key",
    "parse_timestamp",
    "validate_batch",
    "validate_experience",
]
