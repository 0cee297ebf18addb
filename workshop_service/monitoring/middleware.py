"""
middleware.py
=============

Per-route instrumentation for ASGI handlers.

`InstrumentationMiddleware(registry).wrap("/workshop", app)` returns a new
ASGI app that behaves exactly like *app* and additionally

• keeps `http_active_requests` raised while the request is in flight;
• counts the request in `http_requests_total{method, endpoint, status}`;
• observes its latency in `http_request_duration_seconds{method, endpoint}`;
• optionally bumps a coarser per-verb counter (e.g. `workshop_get_requests_total`).

The endpoint label is supplied by the caller and must be static per route;
never pass the raw request path, or label cardinality becomes unbounded.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Mapping, Optional

from starlette.types import ASGIApp, Receive, Scope, Send

from .interceptor import ResponseInterceptor, status_text
from .registry import ACTIVE_REQUESTS, REQUEST_DURATION, REQUESTS_TOTAL, MetricRegistry

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class InstrumentedEndpoint:
    """
    ASGI app produced by `InstrumentationMiddleware.wrap`.

    A class rather than a closure so Starlette's `Route` mounts it as a raw
    ASGI app and leaves method dispatch to the wrapped handler.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        endpoint: str,
        app: ASGIApp,
        *,
        verb_counters: Optional[Mapping[str, str]] = None,
        clock: Clock = time.perf_counter,
    ):
        self.registry = registry
        self.endpoint = endpoint
        self.app = app
        self.verb_counters = dict(verb_counters or {})
        self.clock = clock

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        self.registry.increment_gauge(ACTIVE_REQUESTS)
        start = self.clock()
        interceptor = ResponseInterceptor(send)
        failed = False
        try:
            await self.app(scope, receive, interceptor)
        except Exception:
            failed = True
            raise
        finally:
            elapsed = self.clock() - start
            self.registry.decrement_gauge(ACTIVE_REQUESTS)

            status = interceptor.status_text
            if failed and not interceptor.started:
                # ServerErrorMiddleware answers for us
                status = status_text(500)
            self._record(method, status, elapsed)

    def _record(self, method: str, status: str, elapsed: float) -> None:
        self.registry.increment_counter(
            REQUESTS_TOTAL,
            {"method": method, "endpoint": self.endpoint, "status": status},
        )
        self.registry.observe_histogram(
            REQUEST_DURATION,
            {"method": method, "endpoint": self.endpoint},
            elapsed,
        )
        verb_counter = self.verb_counters.get(method)
        if verb_counter is not None:
            self.registry.increment_counter(verb_counter)

        logger.debug(
            "%s %s -> %s in %.4fs", method, self.endpoint, status, elapsed
        )


class InstrumentationMiddleware:
    """Factory binding one `MetricRegistry` (and clock) to many routes."""

    def __init__(self, registry: MetricRegistry, *, clock: Clock = time.perf_counter):
        self.registry = registry
        self.clock = clock

    def wrap(
        self,
        endpoint: str,
        app: ASGIApp,
        *,
        verb_counters: Optional[Mapping[str, str]] = None,
    ) -> InstrumentedEndpoint:
        return InstrumentedEndpoint(
            self.registry,
            endpoint,
            app,
            verb_counters=verb_counters,
            clock=self.clock,
        )
