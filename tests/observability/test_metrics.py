"""Tests for the local metrics collector and lifecycle."""

import logging

import pytest

from ubicity.observability import (
    MetricsCollector,
    Timer,
    configure_logging,
    get_metrics,
    init_observability,
    measure,
    shutdown_observability,
)


class TestMetricsCollector:
    def test_record_and_get(self):
        collector = MetricsCollector()
        collector.record("latency", 5.0, {"stage": "hotspots"})
        collector.record("other", 1.0)

        metrics = collector.get("latency")

        assert len(metrics) == 1
        assert metrics[0].labels == {"stage": "hotspots"}

    def test_summary(self):
        collector = MetricsCollector()
        for value in range(1, 101):
            collector.record("latency", float(value))

        summary = collector.summary("latency")

        assert summary.count == 100
        assert summary.min == 1.0
        assert summary.max == 100.0
        assert summary.avg == pytest.approx(50.5)
        assert summary.p50 == 51.0
        assert summary.p95 == 96.0
        assert summary.p99 == 100.0

    def test_summary_of_unknown_metric(self):
        assert MetricsCollector().summary("missing") is None

    def test_ring_buffer_evicts_oldest(self):
        collector = MetricsCollector(max_metrics=3)
        for value in range(5):
            collector.record("m", float(value))

        assert [metric.value for metric in collector.export()] == [2.0, 3.0, 4.0]

    def test_clear(self):
        collector = MetricsCollector()
        collector.record("m", 1.0)
        collector.clear()

        assert len(collector) == 0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            MetricsCollector(max_metrics=0)


class TestMeasure:
    def test_success_recorded(self):
        collector = MetricsCollector()

        with measure("op", collector) as timer:
            assert isinstance(timer, Timer)

        metric = collector.get("op")[0]
        assert metric.labels == {"status": "success"}
        assert metric.value >= 0.0

    def test_error_recorded_and_reraised(self):
        collector = MetricsCollector()

        with pytest.raises(RuntimeError):
            with measure("op", collector):
                raise RuntimeError("boom")

        assert collector.get("op")[0].labels == {"status": "error"}

    def test_without_collector(self):
        with measure("op") as timer:
            pass

        assert timer.elapsed() >= 0.0


class TestLifecycle:
    def test_init_get_shutdown(self):
        collector = init_observability(max_metrics=10)
        try:
            assert get_metrics() is collector
            collector.record("m", 1.0)
        finally:
            remaining = shutdown_observability()

        assert [metric.name for metric in remaining] == ["m"]
        with pytest.raises(RuntimeError):
            get_metrics()

    def test_init_applies_log_level(self):
        try:
            init_observability(log_level="WARNING")
            assert logging.getLogger("ubicity").level == logging.WARNING
        finally:
            shutdown_observability()
            logging.getLogger("ubicity").setLevel(logging.NOTSET)

    def test_shutdown_without_init(self):
        assert shutdown_observability() == []


def test_configure_logging():
    configure_logging("debug")
    try:
        assert logging.getLogger("ubicity").level == logging.DEBUG
    finally:
        logging.getLogger("ubicity").setLevel(logging.NOTSET)

    with pytest.raises(ValueError):
        configure_logging("loud")
