# src/kpi_attest/adapters/routers/metrics_router.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (`/metrics`).

Layer:
    adapters/routers
"""

from __future__ import annotations

import prometheus_client as prom
from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from kpi_attest.infrastructure.observability.metrics import (
    get_attestation_build_seconds,
    get_attestations_built_total,
)

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics_probe() -> Response:
    """Expose Prometheus metrics in the text exposition format."""
    # Unlabelled collectors are created lazily; touch them so a cold scrape lists them.
    get_attestations_built_total()
    get_attestation_build_seconds()
    return Response(content=generate_latest(prom.REGISTRY), media_type=CONTENT_TYPE_LATEST)
