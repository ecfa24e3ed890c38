"""Anonymization primitives: identifier hashing, coordinate fuzzing, PII redaction."""

from __future__ import annotations

import hashlib
import hmac
import math
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ubicity.errors import InvalidConfigError
from ubicity.models import Coordinates

EMAIL_PLACEHOLDER = "[EMAIL]"
PHONE_PLACEHOLDER = "[PHONE]"

_EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w.-]+\.\w+")
_PHONE_PATTERN = re.compile(r"\b\d{3}-\d{3}-\d{4}\b")

HASH_HEX_LENGTH = 64


class IdentifierHasher(Protocol):
    """Deterministic one-way mapping from a raw identifier to a hex digest."""

    def __call__(self, raw: str) -> str:
        ...


@dataclass(frozen=True)
class HashlibHasher:
    """Hash identifiers with a ``hashlib`` algorithm, keyed via HMAC when ``key`` is set."""

    algorithm: str = "sha256"
    key: Optional[bytes] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        try:
            digest = hashlib.new(self.algorithm)
        except ValueError as exc:
            raise InvalidConfigError(
                f"Unknown hash algorithm: {self.algorithm}",
                details={"algorithm": self.algorithm},
            ) from exc
        if digest.digest_size * 2 != HASH_HEX_LENGTH:
            raise InvalidConfigError(
                f"Hash algorithm {self.algorithm} does not produce a {HASH_HEX_LENGTH}-character digest",
                details={"algorithm": self.algorithm, "digest_size": digest.digest_size},
            )

    def __call__(self, raw: str) -> str:
        data = raw.encode("utf-8")
        if self.key is not None:
            return hmac.new(self.key, data, self.algorithm).hexdigest()
        return hashlib.new(self.algorithm, data).hexdigest()


class AnonymizationEngine:
    """Stateless helpers used by the ``anonymous`` privacy tier.

    Example:
        >>> engine = AnonymizationEngine()
        >>> len(engine.hash_identifier("alice@example.com"))
        64
        >>> engine.fuzz_coordinates(37.7749295, -122.4194155)
        Coordinates(lat=37.77, lon=-122.42)
    """

    def __init__(
        self,
        hasher: Optional[IdentifierHasher] = None,
        *,
        default_precision: int = 2,
    ) -> None:
        if default_precision < 0:
            raise ValueError("default_precision must be >= 0")
        self._hasher = hasher or HashlibHasher()
        self.default_precision = default_precision

    def hash_identifier(self, raw: str) -> str:
        """Return the one-way digest of ``raw``; identical input, identical output."""
        return self._hasher(raw)

    def fuzz_coordinates(self, lat: float, lon: float, precision_digits: Optional[int] = None) -> Coordinates:
        """Round both values to ``precision_digits`` decimal places.

        Two places is roughly 1 km. Halves round towards positive infinity
        (``0.125`` becomes ``0.13`` and ``-0.125`` becomes ``-0.12``), not to
        even as :func:`round` does. No jitter is added, so repeated calls on
        the same input always agree.
        """
        digits = self.default_precision if precision_digits is None else precision_digits
        if digits < 0:
            raise ValueError("precision_digits must be >= 0")
        return Coordinates(lat=_round_half_up(lat, digits), lon=_round_half_up(lon, digits))

    def redact_pii(self, text: Optional[str]) -> Optional[str]:
        """Replace email addresses and ``NNN-NNN-NNNN`` phone numbers with placeholders.

        Personal names are left untouched.
        """
        if not text:
            return text
        redacted = _EMAIL_PATTERN.sub(EMAIL_PLACEHOLDER, text)
        return _PHONE_PATTERN.sub(PHONE_PLACEHOLDER, redacted)


_DEFAULT_ENGINE: Optional[AnonymizationEngine] = None


def hash_identifier(raw: str) -> str:
    """Module-level shortcut using the default SHA-256 engine."""
    return _default_engine().hash_identifier(raw)


def fuzz_coordinates(lat: float, lon: float, precision_digits: int = 2) -> Coordinates:
    return _default_engine().fuzz_coordinates(lat, lon, precision_digits)


def redact_pii(text: Optional[str]) -> Optional[str]:
    return _default_engine().redact_pii(text)


def _default_engine() -> AnonymizationEngine:
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        _DEFAULT_ENGINE = AnonymizationEngine()
    return _DEFAULT_ENGINE


def _round_half_up(value: float, digits: int) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale
