"""Privacy-first local observability: metrics and timing, no remote telemetry."""

from .metrics import (
    DEFAULT_MAX_METRICS,
    Metric,
    MetricsCollector,
    MetricSummary,
    Timer,
    configure_logging,
    get_metrics,
    init_observability,
    measure,
    shutdown_observability,
)

__all__ = [
    "DEFAULT_MAX_METRICS",
    "Metric",
    "MetricSummary",
    "MetricsCollector",
    "Timer",
    "configure_logging",
    "get_metrics",
    "init_observability",
    "measure",
    "shutdown_observability",
]
