# src/kpi_attest/adapters/routers/base_router.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Versioned router for KPI Attest endpoints.

Routes mount under ``/{version}/{resource}`` (``/v1/tee``) and document the
error envelopes the exception handlers can return.

Layer:
    adapters/routers
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastapi import APIRouter

from kpi_attest.adapters.schemas.http.envelopes import ErrorEnvelope
from kpi_attest.infrastructure.logging.logger import get_json_logger

_LOGGER = get_json_logger(__name__)

_ERROR_DESCRIPTIONS: dict[int, str] = {
    400: "Malformed attestation or KPI computation error.",
    422: "Request validation failed.",
    500: "Internal server error.",
    503: "No attestation signing key is configured.",
}


class BaseRouter(APIRouter):
    """APIRouter with a ``/{version}/{resource}`` prefix."""

    def __init__(
        self,
        *,
        version: str,
        resource: str,
        tags: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> None:
        prefix = f"/{version}/{resource}"
        super().__init__(prefix=prefix, tags=list(tags or []), **kwargs)
        _LOGGER.info("router_initialized", extra={"prefix": prefix, "tags": list(tags or [])})

    @staticmethod
    def std_error_responses() -> dict[int | str, dict[str, Any]]:
        """Return OpenAPI ``responses`` for the error envelopes."""
        return {
            status: {"model": ErrorEnvelope, "description": description}
            for status, description in _ERROR_DESCRIPTIONS.items()
        }
