"""Typed settings for the UbiCity analytics core.

This module wraps analytics configuration in Pydantic models so the privacy
filter, analyzers and observability layer can rely on validated values. The
core itself never reads files or the environment; hosts call
:func:`bootstrap_settings` and hand the result in.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from ubicity.errors import InvalidConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".ubicity" / "config.json"
SECRET_MASK = "***"
HASH_KEY_ENV = "UBICITY_HASH_KEY"


class PrivacySettings(BaseModel):
    """Anonymization parameters for the privacy filter."""

    hash_algorithm: str = Field("sha256", description="hashlib algorithm used for learner ids")
    hash_key: Optional[SecretStr] = Field(
        default=None, description="Optional HMAC key for keyed pseudonymisation"
    )
    coordinate_precision: int = Field(2, ge=0, le=8, description="Decimal places kept when fuzzing")
    redact_descriptions: bool = Field(False, description="Redact emails/phones in anonymous descriptions")
    fuzz_public_coordinates: bool = Field(False, description="Round coordinates of public records")

    @field_validator("hash_algorithm")
    def _validate_algorithm(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in hashlib.algorithms_available:
            raise ValueError(f"hash_algorithm {value!r} is not available in hashlib")
        return normalized

    @field_validator("hash_key")
    def _reject_mask(cls, value: Optional[SecretStr]) -> Optional[SecretStr]:
        if value is not None and value.get_secret_value() == SECRET_MASK:
            raise ValueError("hash_key is the saved mask, not a key")
        return value


class AnalysisSettings(BaseModel):
    """Thresholds for the analyzers."""

    hotspot_min_count: int = Field(2, ge=1, description="Experiences needed for a hotspot")
    min_interdisciplinary_domains: int = Field(2, ge=1)


class ObservabilitySettings(BaseModel):
    """Local logging and metrics."""

    log_level: str = Field("INFO")
    max_metrics: int = Field(1000, ge=1, le=1_000_000)

    @field_validator("log_level")
    def _validate_level(cls, value: str) -> str:
        normalized = value.upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized


class AnalyticsSettings(BaseModel):
    """Root configuration state."""

    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


def load_settings(path: Path = DEFAULT_CONFIG_PATH) -> AnalyticsSettings:
    """Load settings from disk or raise if invalid.

    A hash key saved as the mask is read from ``UBICITY_HASH_KEY`` instead;
    without that variable the file is rejected.
    """

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at {path}")
    payload = json.loads(path.read_text(encoding="utf-8"))
    payload = _resolve_masked_secrets(payload, path)
    try:
        return AnalyticsSettings.model_validate(payload)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc}", details={"path": str(path)}) from exc


def save_settings(settings: AnalyticsSettings, path: Path = DEFAULT_CONFIG_PATH) -> None:
    """Persist settings to disk with masked secrets."""

    payload = settings.model_dump(mode="json")
    payload = _mask_secret_fields(payload)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def bootstrap_settings(
    *,
    path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AnalyticsSettings:
    """Resolve settings from an optional file, explicit overrides and ``UBICITY_*`` variables.

    Later sources win: file, then ``overrides``, then the environment.
    """

    if path is not None and path.exists():
        settings = load_settings(path)
    else:
        settings = AnalyticsSettings()

    merged = settings.model_dump(mode="python")
    merged = _apply_overrides(merged, overrides or {})
    merged = _apply_env_overrides(merged)

    try:
        return AnalyticsSettings.model_validate(merged)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc}") from exc


def _apply_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = base.copy()
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    privacy = data.setdefault("privacy", {})
    _set_env_override(privacy, "hash_algorithm", "UBICITY_HASH_ALGORITHM")
    _set_env_override(privacy, "hash_key", HASH_KEY_ENV)
    _set_env_override(privacy, "coordinate_precision", "UBICITY_COORDINATE_PRECISION", cast_int=True)
    _set_env_override(privacy, "redact_descriptions", "UBICITY_REDACT_DESCRIPTIONS", cast_bool=True)
    _set_env_override(privacy, "fuzz_public_coordinates", "UBICITY_FUZZ_PUBLIC_COORDINATES", cast_bool=True)

    analysis = data.setdefault("analysis", {})
    _set_env_override(analysis, "hotspot_min_count", "UBICITY_HOTSPOT_MIN_COUNT", cast_int=True)

    observability = data.setdefault("observability", {})
    _set_env_override(observability, "log_level", "UBICITY_LOG_LEVEL")
    _set_env_override(observability, "max_metrics", "UBICITY_MAX_METRICS", cast_int=True)
    return data


def _set_env_override(
    mapping: Dict[str, Any],
    key: str,
    env_name: str,
    *,
    cast_bool: bool = False,
    cast_int: bool = False,
) -> None:
    raw = os.getenv(env_name)
    if raw is None:
        return
    if cast_bool:
        mapping[key] = raw.lower() in {"1", "true", "yes"}
    elif cast_int:
        try:
            mapping[key] = int(raw)
        except ValueError as exc:
            raise InvalidConfigError(f"{env_name} must be an integer", details={"env": env_name}) from exc
    else:
        mapping[key] = raw


def _mask_secret_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    privacy = payload.get("privacy", {})
    if privacy.get("hash_key"):
        privacy["hash_key"] = SECRET_MASK
    return payload


def _resolve_masked_secrets(payload: Dict[str, Any], path: Path) -> Dict[str, Any]:
    privacy = payload.get("privacy")
    if not isinstance(privacy, dict) or privacy.get("hash_key") != SECRET_MASK:
        return payload
    key = os.getenv(HASH_KEY_ENV)
    if not key:
        raise InvalidConfigError(
            f"privacy.hash_key is saved masked; set {HASH_KEY_ENV} to supply it",
            details={"path": str(path), "env": HASH_KEY_ENV},
        )
    privacy["hash_key"] = key
    return payload
