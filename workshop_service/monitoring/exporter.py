"""
exporter.py
===========

Prometheus text exposition for a `MetricRegistry`.

`/metrics` in `server.py` just calls `metrics_response()`, so the route
stays framework-agnostic (works with Starlette, FastAPI, etc.).
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_client.metrics_core import Metric
from starlette.responses import Response

from .registry import MetricRegistry


class _FrozenSnapshot:
    """Collector facade over an already-taken snapshot."""

    def __init__(self, families: Iterable[Metric]):
        self._families: List[Metric] = list(families)

    def collect(self) -> Iterator[Metric]:
        return iter(self._families)


def render(snapshot: Iterable[Metric]) -> bytes:
    """Render *snapshot* one line per metric per label set.  Pure; no state."""
    return generate_latest(_FrozenSnapshot(snapshot))  # type: ignore[arg-type]


def metrics_response(registry: MetricRegistry) -> Response:
    return Response(render(registry.snapshot()), media_type=CONTENT_TYPE_LATEST)
