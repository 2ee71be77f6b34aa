# src/kpi_attest/application/schemas/dto/kpi.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Application DTOs for KPI computation and attestation flows.

Purpose:
    Provide transport-agnostic request/response DTOs used by the KPI and
    attestation use cases. Presenters map these to HTTP schemas.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from kpi_attest.domain.entities.attestation import Attestation
from kpi_attest.domain.entities.verification import VerificationReport
from kpi_attest.domain.services.fixed_point import NumberLike


@dataclass(frozen=True, slots=True)
class ComputeKpiRequest:
    """Request DTO for KPI computation.

    Attributes:
        documents:
            Parsed financial documents in evidence order.
        initial:
            Value the aggregation starts from (for incremental computation).
    """

    documents: Sequence[Any]
    initial: NumberLike = 0


@dataclass(frozen=True, slots=True)
class VerifyAttestationRequest:
    """Request DTO for attestation verification.

    Attributes:
        attestation_hex:
            Hex-encoded 144-byte attestation record.
        expected_kpi_value:
            KPI value the verifier expects the attestation to carry.
        expected_documents:
            Documents the attestation is claimed to cover, in order.
        max_age_ms:
            Optional override of the configured maximum age.
        short_circuit:
            Stop at the first failed check instead of collecting all failures.
    """

    attestation_hex: str
    expected_kpi_value: NumberLike
    expected_documents: Sequence[Any]
    max_age_ms: int | None = None
    short_circuit: bool = False


@dataclass(frozen=True, slots=True)
class VerificationOutcome:
    """Decoded attestation together with its verification report."""

    attestation: Attestation
    report: VerificationReport
    verified_at: int
