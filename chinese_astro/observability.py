"""
Logging setup and metrics sinks.

The calculators never log above DEBUG and never touch metrics. Components
that do (chart orchestrator, compatibility engine, horoscope system) take
a logger and a MetricsSink as constructor arguments.
"""

import logging
import sys
import threading
from collections import defaultdict
from typing import Optional, Protocol

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Console logging for the command line. Logs go to stderr so stdout stays JSON."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


class MetricsSink(Protocol):
    def increment(self, name: str, value: float = 1) -> None: ...

    def observe(self, name: str, value: float) -> None: ...


class NullMetrics:
    def increment(self, name: str, value: float = 1) -> None:
        pass

    def observe(self, name: str, value: float) -> None:
        pass


class InMemoryMetrics:
    """Keeps everything in dicts. Handy in tests and for health reports."""

    def __init__(self):
        self._lock = threading.Lock()
        self.counters: dict = defaultdict(float)
        self.observations: dict = defaultdict(list)

    def increment(self, name: str, value: float = 1) -> None:
        with self._lock:
            self.counters[name] += value

    def observe(self, name: str, value: float) -> None:
        with self._lock:
            self.observations[name].append(value)


class PrometheusMetrics:
    """
    Prometheus Counter/Histogram per metric name, created on first use.

    Uses its own CollectorRegistry so several instances (or test runs)
    never collide on the global default registry.
    """

    def __init__(self, namespace: str = "chinese_astro", registry: Optional[CollectorRegistry] = None):
        self.namespace = namespace
        self.registry = registry or CollectorRegistry()
        self._counters: dict = {}
        self._histograms: dict = {}
        self._lock = threading.Lock()

    def _counter(self, name: str) -> Counter:
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(
                    name, f"Total {name.replace('_', ' ')}",
                    namespace=self.namespace, registry=self.registry,
                )
            return self._counters[name]

    def _histogram(self, name: str) -> Histogram:
        with self._lock:
            if name not in self._histograms:
                self._histograms[name] = Histogram(
                    name, f"Distribution of {name.replace('_', ' ')}",
                    namespace=self.namespace, registry=self.registry,
                )
            return self._histograms[name]

    def increment(self, name: str, value: float = 1) -> None:
        self._counter(name).inc(value)

    def observe(self, name: str, value: float) -> None:
        self._histogram(name).observe(value)

    def sample(self, name: str) -> Optional[float]:
        """Current value of a counter (or histogram sum) from the registry."""
        value = self.registry.get_sample_value(f"{self.namespace}_{name}_total")
        if value is None:
            value = self.registry.get_sample_value(f"{self.namespace}_{name}_sum")
        return value

    def exposition(self) -> bytes:
        """Registry contents in the Prometheus text format."""
        return generate_latest(self.registry)


def create_metrics(backend: str = "none") -> MetricsSink:
    """Metrics sink for a backend name: "none", "memory" or "prometheus"."""
    if backend == "prometheus":
        return PrometheusMetrics()
    if backend == "memory":
        return InMemoryMetrics()
    if backend == "none":
        return NullMetrics()
    raise ValueError(f"unknown metrics backend: {backend!r}")
