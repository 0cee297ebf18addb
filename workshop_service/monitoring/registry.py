"""
registry.py
===========

Owned metric store for one application instance.

• Wraps a private `prometheus_client.CollectorRegistry`, so two apps built in
  the same process (tests!) never share counters.
• Metrics are declared once, up front, with a fixed label set.  Label
  *values* are created lazily on first use and never rejected.
• All mutation goes through `prometheus_client`'s per-value locks, so
  concurrent increments from threads or tasks never lose updates.

The app factory builds exactly one `MetricRegistry` and hands it to the
instrumentation middleware and the `/metrics` route.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Union

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram
from prometheus_client.metrics import MetricWrapperBase
from prometheus_client.metrics_core import Metric

# --------------------------------------------------------------------------- #
#  Metric names
# --------------------------------------------------------------------------- #
REQUESTS_TOTAL = "http_requests_total"
REQUEST_DURATION = "http_request_duration_seconds"
ACTIVE_REQUESTS = "http_active_requests"
WORKSHOP_GET_REQUESTS = "workshop_get_requests_total"
WORKSHOP_POST_REQUESTS = "workshop_post_requests_total"

Labels = Optional[Mapping[str, str]]


class MetricRegistry:
    """Named counters, histograms and gauges keyed by name + label values."""

    def __init__(self, *, buckets: Sequence[Union[float, str]] = Histogram.DEFAULT_BUCKETS):
        self._registry = CollectorRegistry(auto_describe=True)
        self._counters: Dict[str, Counter] = {}
        self._histograms: Dict[str, Histogram] = {}
        self._gauges: Dict[str, Gauge] = {}

        self._add_counter(
            REQUESTS_TOTAL,
            "Total number of HTTP requests",
            ["method", "endpoint", "status"],
        )
        self._histograms[REQUEST_DURATION] = Histogram(
            REQUEST_DURATION,
            "Duration of HTTP requests in seconds",
            ["method", "endpoint"],
            registry=self._registry,
            buckets=tuple(buckets),
        )
        self._gauges[ACTIVE_REQUESTS] = Gauge(
            ACTIVE_REQUESTS,
            "Number of active HTTP requests",
            registry=self._registry,
        )
        self._add_counter(
            WORKSHOP_GET_REQUESTS,
            "Total number of GET requests to /workshop endpoint",
        )
        self._add_counter(
            WORKSHOP_POST_REQUESTS,
            "Total number of POST requests to /workshop endpoint",
        )

    def _add_counter(self, name: str, documentation: str, labelnames: Sequence[str] = ()) -> None:
        self._counters[name] = Counter(
            name, documentation, list(labelnames), registry=self._registry
        )

    @staticmethod
    def _child(metric: MetricWrapperBase, labels: Labels) -> MetricWrapperBase:
        # unlabelled metrics are their own child
        if labels:
            return metric.labels(**labels)
        return metric

    # ----------------------------------------------------
    #  Mutation
    # ----------------------------------------------------
    def increment_counter(self, name: str, labels: Labels = None) -> None:
        self._child(self._counters[name], labels).inc()

    def observe_histogram(self, name: str, labels: Labels, value: float) -> None:
        self._child(self._histograms[name], labels).observe(value)

    def increment_gauge(self, name: str) -> None:
        self._gauges[name].inc()

    def decrement_gauge(self, name: str) -> None:
        self._gauges[name].dec()

    # ----------------------------------------------------
    #  Reads
    # ----------------------------------------------------
    def snapshot(self) -> List[Metric]:
        """
        Point-in-time view of every metric family.

        Each family is read under its own lock; there is no cross-metric
        consistency, so the gauge may be sampled a moment apart from the
        counters.
        """
        return list(self._registry.collect())

    def sample_value(self, name: str, labels: Labels = None) -> Optional[float]:
        """Return one sample, e.g. ``http_request_duration_seconds_count``, or None."""
        return self._registry.get_sample_value(name, dict(labels) if labels else None)

    @property
    def collector_registry(self) -> CollectorRegistry:
        return self._registry
