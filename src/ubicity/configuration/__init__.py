"""Configuration loading utilities for UbiCity."""

from .settings import (
    DEFAULT_CONFIG_PATH,
    AnalysisSettings,
    AnalyticsSettings,
    ObservabilitySettings,
    PrivacySettings,
    bootstrap_settings,
    load_settings,
    save_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AnalysisSettings",
    "AnalyticsSettings",
    "ObservabilitySettings",
    "PrivacySettings",
    "bootstrap_settings",
    "load_settings",
    "save_settings",
]
