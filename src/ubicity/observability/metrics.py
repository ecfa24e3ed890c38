"""Local metrics collection for analytics operations.

Nothing leaves the process: metrics live in a bounded in-memory buffer that
hosts can inspect or export. Collectors are injected into the components that
report timings; the process-wide instance managed by :func:`init_observability`
exists for hosts that want a single shared collector.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_METRICS = 1000


@dataclass(frozen=True)
class Metric:
    """A single recorded value."""

    name: str
    value: float
    timestamp: datetime
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricSummary:
    """Distribution of the values recorded under one metric name."""

    count: int
    min: float
    max: float
    avg: float
    p50: float
    p95: float
    p99: float


class MetricsCollector:
    """Bounded ring buffer of metrics; the oldest entries are evicted first."""

    def __init__(self, max_metrics: int = DEFAULT_MAX_METRICS) -> None:
        if max_metrics < 1:
            raise ValueError("max_metrics must be >= 1")
        self.max_metrics = max_metrics
        self._metrics: Deque[Metric] = deque(maxlen=max_metrics)
        self._lock = threading.Lock()

    def record(self, name: str, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        metric = Metric(
            name=name,
            value=value,
            timestamp=datetime.now(timezone.utc),
            labels=dict(labels or {}),
        )
        with self._lock:
            self._metrics.append(metric)

    def get(self, name: str) -> List[Metric]:
        with self._lock:
            return [metric for metric in self._metrics if metric.name == name]

    def summary(self, name: str) -> Optional[MetricSummary]:
        values = sorted(metric.value for metric in self.get(name))
        if not values:
            return None
        return MetricSummary(
            count=len(values),
            min=values[0],
            max=values[-1],
            avg=sum(values) / len(values),
            p50=self._percentile(values, 50),
            p95=self._percentile(values, 95),
            p99=self._percentile(values, 99),
        )

    def export(self) -> List[Metric]:
        with self._lock:
            return list(self._metrics)

    def clear(self) -> None:
        with self._lock:
            self._metrics.clear()

    def __len__(self) -> int:
        return len(self._metrics)

    @staticmethod
    def _percentile(sorted_values: List[float], pct: int) -> float:
        index = min(len(sorted_values) - 1, len(sorted_values) * pct // 100)
        return sorted_values[index]


class Timer:
    """Monotonic stopwatch reporting milliseconds."""

    def __init__(self) -> None:
        self._start = time.perf_counter()

    def elapsed(self) -> float:
        return (time.perf_counter() - self._start) * 1000.0

    def stop(self) -> float:
        return self.elapsed()


@contextmanager
def measure(name: str, collector: Optional[MetricsCollector] = None) -> Iterator[Timer]:
    """Time the enclosed block and record it under ``name``.

    The duration is recorded with a ``status`` label of ``success`` or
    ``error``; exceptions propagate unchanged. Without a collector the block
    just runs.
    """
    timer = Timer()
    if collector is None:
        yield timer
        return
    try:
        yield timer
    except Exception:
        elapsed = timer.stop()
        collector.record(name, elapsed, {"status": "error"})
        logger.error("%s failed after %.2fms", name, elapsed)
        raise
    elapsed = timer.stop()
    collector.record(name, elapsed, {"status": "success"})
    logger.debug("%s completed in %.2fms", name, elapsed)


# Process-wide collector
_metrics: Optional[MetricsCollector] = None
_metrics_lock = threading.Lock()


def init_observability(
    max_metrics: int = DEFAULT_MAX_METRICS,
    *,
    log_level: Optional[str] = None,
) -> MetricsCollector:
    """Create the process-wide collector, replacing any existing one.

    Args:
        max_metrics: Ring buffer size
        log_level: When given, applied to the ``ubicity`` logger hierarchy
    """
    global _metrics

    if log_level is not None:
        configure_logging(log_level)
    with _metrics_lock:
        _metrics = MetricsCollector(max_metrics=max_metrics)
    return _metrics


def get_metrics() -> MetricsCollector:
    """Return the process-wide collector.

    Raises:
        RuntimeError: if :func:`init_observability` has not been called.
    """
    if _metrics is None:
        raise RuntimeError("Observability not initialised; call init_observability() first")
    return _metrics


def shutdown_observability() -> List[Metric]:
    """Drop the process-wide collector and return whatever it held."""
    global _metrics

    with _metrics_lock:
        remaining = _metrics.export() if _metrics is not None else []
        _metrics = None
    return remaining


def configure_logging(level: str = "INFO") -> None:
    """Set the level of the ``ubicity`` logger hierarchy.

    Handlers are left to the host application.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.getLogger("ubicity").setLevel(resolved)
