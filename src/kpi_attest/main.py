# src/kpi_attest/main.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""ASGI application factory.

Run with ``uvicorn kpi_attest.main:create_app --factory``. The factory wires
JSON logging, the request-id middleware, the error-envelope handlers, the
``/v1/tee`` router and ``/metrics``; it holds no KPI logic of its own.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.routing import APIRoute

from kpi_attest import __version__
from kpi_attest.adapters.routers.metrics_router import router as metrics_router
from kpi_attest.adapters.routers.tee_router import router as tee_router
from kpi_attest.config.settings import Settings, get_settings
from kpi_attest.infrastructure.http.errors import install_exception_handlers
from kpi_attest.infrastructure.logging.logger import (
    configure_root_logging,
    get_json_logger,
)
from kpi_attest.infrastructure.middleware.request_id import RequestIdMiddleware

logger = get_json_logger(__name__)


def _stable_operation_id(route: APIRoute) -> str:
    """Deterministic operationId, e.g. ``post__v1_tee_compute``."""
    methods = ",".join(sorted(route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "")
    return f"{methods.lower()}_{path.lower()}"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the KPI Attest app.

    Args:
        settings: Settings to serve with; the cached :func:`get_settings` when omitted.
            Tests pass their own so signing keys and windows stay per-app.
    """
    settings = settings or get_settings()
    configure_root_logging(settings.log_level)

    app = FastAPI(
        title="KPI Attest",
        version=__version__,
        description="Deterministic KPI computation with signed, verifiable attestations.",
        docs_url=settings.docs_url,
        redoc_url=None,
        openapi_url=settings.openapi_url,
        generate_unique_id_function=_stable_operation_id,
    )
    app.state.settings = settings

    install_exception_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(tee_router)
    app.include_router(metrics_router)

    logger.info(
        "service_startup",
        extra={
            "service": "kpi-attest",
            "env": settings.environment.value,
            "version": __version__,
            "signing_enabled": settings.signing_enabled,
        },
    )
    return app


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "kpi_attest.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=int(os.getenv("PORT", "8080")),
    )
