from __future__ import annotations

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response

from .config import ServiceConfig
from .logging_setup import configure_logging
from .monitoring.exporter import metrics_response
from .monitoring.middleware import InstrumentationMiddleware
from .monitoring.registry import WORKSHOP_GET_REQUESTS, WORKSHOP_POST_REQUESTS, MetricRegistry
from .workshop import WorkshopStore, default_workshop, workshop_app

logger = logging.getLogger(__name__)

WORKSHOP_PATH = "/workshop"


# --------------------------------------------------------------------------- #
#  App factory
# --------------------------------------------------------------------------- #
def create_app(
    config: Optional[ServiceConfig] = None,
    *,
    registry: Optional[MetricRegistry] = None,
    store: Optional[WorkshopStore] = None,
) -> FastAPI:
    """
    Build the service.  One `MetricRegistry` and one `WorkshopStore` live for
    as long as the returned app; both are reachable through `app.state`.
    """
    config = config or ServiceConfig()
    configure_logging(console_level=config.log_level)

    registry = registry or MetricRegistry()
    store = store or WorkshopStore(default_workshop(config.default_sweater_score))
    instrumentation = InstrumentationMiddleware(registry)

    app = FastAPI(title="Workshop service")
    app.state.config = config
    app.state.metrics = registry
    app.state.workshop_store = store

    app.add_route(
        WORKSHOP_PATH,
        instrumentation.wrap(
            WORKSHOP_PATH,
            workshop_app(store),
            verb_counters={"GET": WORKSHOP_GET_REQUESTS, "POST": WORKSHOP_POST_REQUESTS},
        ),
        name="workshop",
    )

    @app.get("/metrics")
    async def metrics(request: Request) -> Response:
        return metrics_response(request.app.state.metrics)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    logger.info(
        "Workshop service ready (default sweaterScore=%d)", config.default_sweater_score
    )
    return app


def main() -> None:
    config = ServiceConfig()
    configure_logging(console_level=config.log_level)
    logger.info("Starting workshop service on %s:%d", config.host, config.port)
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
