"""Privacy utilities: tier enforcement, identifier hashing and redaction."""

from .anonymization import (
    EMAIL_PLACEHOLDER,
    PHONE_PLACEHOLDER,
    AnonymizationEngine,
    HashlibHasher,
    IdentifierHasher,
    fuzz_coordinates,
    hash_identifier,
    redact_pii,
)
from .filter import PrivacyFilter, SanitizationReport

__all__ = [
    "EMAIL_PLACEHOLDER",
    "PHONE_PLACEHOLDER",
    "AnonymizationEngine",
    "HashlibHasher",
    "IdentifierHasher",
    "PrivacyFilter",
    "SanitizationReport",
    "fuzz_coordinates",
    "hash_identifier",
    "redact_pii",
]
