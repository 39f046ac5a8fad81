"""
Prometheus metrics for the SSM parameter cache.
"""

import threading
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram


class MetricsCollector:
    """Metrics recorded by ``ParameterCache``.

    Metrics are registered on ``registry``; with no registry they are created
    unregistered, which keeps several caches in one process from colliding on
    the default registry.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up parameter cache metrics."""
        self._metrics["parameter_cache_loads_total"] = Counter(
            "parameter_cache_loads_total",
            "Total load requests by outcome",
            ["result"],
            registry=self.registry
        )

        self._metrics["parameter_batch_requests_total"] = Counter(
            "parameter_batch_requests_total",
            "Total GetParameters batch requests",
            ["status"],
            registry=self.registry
        )

        self._metrics["parameter_missing_total"] = Counter(
            "parameter_missing_total",
            "Total requested parameters not returned by the store",
            registry=self.registry
        )

        self._metrics["parameter_reload_duration_seconds"] = Histogram(
            "parameter_reload_duration_seconds",
            "Duration of a complete reload cycle in seconds",
            registry=self.registry
        )

        self._metrics["parameter_cache_age_seconds"] = Gauge(
            "parameter_cache_age_seconds",
            "Age of the cached parameters when last checked",
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def _resolve(self, metric_name: str, labels: Dict[str, str]):
        metric = self._metrics[metric_name]
        return metric.labels(**labels) if labels else metric

    def increment_counter(self, metric_name: str, amount: float = 1, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            with self._lock:
                self._resolve(metric_name, labels).inc(amount)

    def set_gauge(self, metric_name: str, value: float, **labels):
        """Set a gauge metric value."""
        if metric_name in self._metrics:
            with self._lock:
                self._resolve(metric_name, labels).set(value)

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        if metric_name in self._metrics:
            with self._lock:
                self._resolve(metric_name, labels).observe(value)
