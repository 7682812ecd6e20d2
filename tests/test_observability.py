"""Metrics sinks and logging setup."""

import logging

import pytest
from prometheus_client import CollectorRegistry

from chinese_astro.observability import (
    InMemoryMetrics, NullMetrics, PrometheusMetrics, create_metrics, setup_logging,
)


def test_in_memory_metrics():
    metrics = InMemoryMetrics()
    metrics.increment("calls")
    metrics.increment("calls", 2)
    metrics.observe("duration", 0.5)
    assert metrics.counters["calls"] == 3
    assert metrics.observations["duration"] == [0.5]


def test_null_metrics_accepts_everything():
    NullMetrics().increment("x")
    NullMetrics().observe("y", 1.0)


def test_prometheus_metrics_use_private_registry():
    registry = CollectorRegistry()
    metrics = PrometheusMetrics(registry=registry)
    metrics.increment("birth_chart_cache_hit")
    metrics.increment("birth_chart_cache_hit")
    metrics.observe("birth_chart_generation_duration", 0.25)
    assert metrics.sample("birth_chart_cache_hit") == 2
    assert metrics.sample("birth_chart_generation_duration") == 0.25
    assert registry.get_sample_value("chinese_astro_birth_chart_cache_hit_total") == 2


def test_two_prometheus_sinks_do_not_collide():
    PrometheusMetrics().increment("same_name")
    PrometheusMetrics().increment("same_name")


def test_setup_logging_sets_level():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        setup_logging("WARNING")
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)


def test_prometheus_exposition_text():
    metrics = PrometheusMetrics()
    metrics.increment("compatibility_calculations")
    text = metrics.exposition().decode()
    assert "chinese_astro_compatibility_calculations_total 1.0" in text


@pytest.mark.parametrize("backend, cls", [
    ("none", NullMetrics),
    ("memory", InMemoryMetrics),
    ("prometheus", PrometheusMetrics),
])
def test_create_metrics(backend, cls):
    assert isinstance(create_metrics(backend), cls)


def test_create_metrics_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_metrics("statsd")
