# src/kpi_attest/adapters/schemas/http/envelopes.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Response envelopes.

Every success body is ``{"data": ...}`` and every error body is
``{"error": {code, http_status, message, details, trace_id}}``. The error
payload itself is assembled by :mod:`kpi_attest.infrastructure.http.errors`;
these models document it in OpenAPI.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from kpi_attest.adapters.schemas.http.base import BaseHTTPSchema


class ErrorObject(BaseHTTPSchema):
    """Error payload.

    Codes: ``MALFORMED_ATTESTATION``, ``KPI_COMPUTATION_ERROR``,
    ``ATTESTATION_VERIFICATION_FAILED``, ``SIGNER_UNAVAILABLE``,
    ``VALIDATION_ERROR``, ``HTTP_ERROR``, ``INTERNAL_ERROR``.
    """

    model_config = ConfigDict(
        title="ErrorObject",
        json_schema_extra={
            "examples": [
                {
                    "code": "MALFORMED_ATTESTATION",
                    "http_status": 400,
                    "message": "Attestation must be exactly 144 bytes.",
                    "details": {"expected": 144, "actual": 143},
                    "trace_id": "req-123",
                }
            ]
        },
    )

    code: str
    http_status: int
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    trace_id: str | None = Field(default=None, description="Request id of the failed call.")


class ErrorEnvelope(BaseHTTPSchema):
    """``{"error": ErrorObject}``."""

    model_config = ConfigDict(title="ErrorEnvelope")

    error: ErrorObject


class SuccessEnvelope[T](BaseHTTPSchema):
    """``{"data": T}``."""

    model_config = ConfigDict(title="SuccessEnvelope")

    data: T


__all__ = ["ErrorEnvelope", "ErrorObject", "SuccessEnvelope"]
