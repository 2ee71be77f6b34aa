# src/kpi_attest/adapters/schemas/http/tee_schemas.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""HTTP schemas for the `/v1/tee` compute, verify and decode endpoints.

Layer:
    adapters/schemas/http

Notes:
    - Documents are accepted as arbitrary JSON values and passed through
      untouched: the attestation hash covers exactly what the caller sent.
    - KPI amounts are rendered as decimal strings; binary fields as lowercase hex.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import Field

from kpi_attest.adapters.schemas.http.base import BaseHTTPSchema


class ComputeOperation(str, Enum):
    """Computation mode requested by the caller."""

    SIMPLE = "simple"
    WITH_ATTESTATION = "with_attestation"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ComputeKpiHTTPRequest(BaseHTTPSchema):
    """Body of `POST /v1/tee/compute`."""

    documents: list[Any] = Field(
        ...,
        min_length=1,
        description="Parsed financial documents in evidence order.",
    )
    operation: ComputeOperation = Field(
        default=ComputeOperation.WITH_ATTESTATION,
        description="`simple` computes only; `with_attestation` also signs.",
    )
    initial_kpi: Decimal = Field(
        default=Decimal(0),
        description="Value the aggregation starts from.",
    )


class VerifyAttestationHTTPRequest(BaseHTTPSchema):
    """Body of `POST /v1/tee/verify`."""

    attestation_hex: str = Field(..., min_length=1, description="Hex-encoded 144-byte record.")
    expected_kpi_value: Decimal = Field(..., description="KPI the attestation should carry.")
    expected_documents: list[Any] = Field(
        ...,
        description="Documents the attestation is claimed to cover, in order.",
    )
    max_age_ms: int | None = Field(
        default=None,
        ge=0,
        description="Override of the configured maximum attestation age.",
    )
    short_circuit: bool = Field(
        default=False,
        description="Stop at the first failed check.",
    )


class DecodeAttestationHTTPRequest(BaseHTTPSchema):
    """Body of `POST /v1/tee/decode`."""

    attestation_hex: str = Field(..., min_length=1, description="Hex-encoded 144-byte record.")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class DocumentContributionHTTP(BaseHTTPSchema):
    """One entry of the per-document contribution log."""

    index: int
    kind: str
    amount: str
    status: str
    defaulted_fields: list[str] = Field(default_factory=list)


class KpiResultHTTP(BaseHTTPSchema):
    """Aggregated KPI."""

    value: str
    initial: str
    delta: str
    last_kind: str
    contributions: list[DocumentContributionHTTP] = Field(default_factory=list)


class AttestationHTTP(BaseHTTPSchema):
    """Decoded attestation fields."""

    kpi_value_scaled: int
    kpi_value: str = Field(..., description="kpi_value_scaled / 1000 as a decimal string.")
    input_hash: str
    timestamp: int
    signer_public_key: str
    signature: str


class ComputeKpiHTTPResponse(BaseHTTPSchema):
    """Result of `POST /v1/tee/compute`."""

    kpi_result: KpiResultHTTP
    attestation: AttestationHTTP | None = None
    attestation_hex: str | None = None
    attestation_bytes: list[int] | None = Field(
        default=None,
        description="The 144-byte record as a list of byte values, for ledger submission.",
    )


class VerificationFailureHTTP(BaseHTTPSchema):
    """A failed verification check."""

    kind: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class VerificationReportHTTP(BaseHTTPSchema):
    """Result of `POST /v1/tee/verify`."""

    is_valid: bool
    short_circuited: bool
    verified_at: int
    failures: list[VerificationFailureHTTP] = Field(default_factory=list)
    attestation: AttestationHTTP


__all__ = [
    "AttestationHTTP",
    "ComputeKpiHTTPRequest",
    "ComputeKpiHTTPResponse",
    "ComputeOperation",
    "DecodeAttestationHTTPRequest",
    "DocumentContributionHTTP",
    "KpiResultHTTP",
    "VerificationFailureHTTP",
    "VerificationReportHTTP",
    "VerifyAttestationHTTPRequest",
]
