# src/kpi_attest/adapters/routers/tee_router.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""TEE Router.

Summary:
    Endpoints for computing KPIs (optionally attested), verifying received
    attestations and decoding raw attestation records.

Layer:
    adapters/routers

Routes:
    POST /v1/tee/compute
    POST /v1/tee/verify
    POST /v1/tee/decode

Notes:
    Domain errors propagate to the envelope handlers installed by
    :func:`kpi_attest.infrastructure.http.errors.install_exception_handlers`.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, status

from kpi_attest.adapters.dependencies.tee import (
    get_compute_attested_kpi_uc,
    get_compute_kpi_uc,
    get_decode_attestation_uc,
    get_verify_attestation_uc,
)
from kpi_attest.adapters.presenters.tee_presenter import TeePresenter
from kpi_attest.adapters.routers.base_router import BaseRouter
from kpi_attest.adapters.schemas.http.envelopes import SuccessEnvelope
from kpi_attest.adapters.schemas.http.tee_schemas import (
    AttestationHTTP,
    ComputeKpiHTTPRequest,
    ComputeKpiHTTPResponse,
    ComputeOperation,
    DecodeAttestationHTTPRequest,
    VerificationReportHTTP,
    VerifyAttestationHTTPRequest,
)
from kpi_attest.application.schemas.dto.kpi import ComputeKpiRequest, VerifyAttestationRequest
from kpi_attest.application.use_cases.attestation.decode_attestation import DecodeAttestation
from kpi_attest.application.use_cases.attestation.verify_attestation import VerifyAttestation
from kpi_attest.application.use_cases.kpi.compute_attested_kpi import ComputeAttestedKpi
from kpi_attest.application.use_cases.kpi.compute_kpi import ComputeKpi

router = BaseRouter(version="v1", resource="tee", tags=["KPI Attestation"])
presenter = TeePresenter()


@router.post(
    "/compute",
    response_model=SuccessEnvelope[ComputeKpiHTTPResponse],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="Compute the KPI over a document set, optionally with a signed attestation.",
)
async def compute_kpi(
    body: ComputeKpiHTTPRequest,
    simple_uc: Annotated[ComputeKpi, Depends(get_compute_kpi_uc)],
    attested_uc: Annotated[ComputeAttestedKpi, Depends(get_compute_attested_kpi_uc)],
) -> SuccessEnvelope[ComputeKpiHTTPResponse]:
    """Compute the KPI.

    Behavior:
        * ``operation=simple`` returns only the KPI result and contribution log.
        * ``operation=with_attestation`` (default) also returns the signed
          144-byte attestation as hex and as a byte list. Fails with
          ``503 SIGNER_UNAVAILABLE`` when no signing key is configured.
    """
    req = ComputeKpiRequest(documents=body.documents, initial=body.initial_kpi)
    if body.operation == ComputeOperation.SIMPLE:
        return presenter.present_kpi(simple_uc.execute(req))
    return presenter.present_attested_kpi(attested_uc.execute(req))


@router.post(
    "/verify",
    response_model=SuccessEnvelope[VerificationReportHTTP],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="Verify an attestation against expected value, documents and freshness.",
)
async def verify_attestation(
    body: VerifyAttestationHTTPRequest,
    uc: Annotated[VerifyAttestation, Depends(get_verify_attestation_uc)],
) -> SuccessEnvelope[VerificationReportHTTP]:
    """Run every verification check.

    Returns 200 whether or not the attestation is valid; inspect ``is_valid``
    and ``failures``. Only a structurally malformed record yields 400.
    """
    outcome = uc.execute(
        VerifyAttestationRequest(
            attestation_hex=body.attestation_hex,
            expected_kpi_value=body.expected_kpi_value,
            expected_documents=body.expected_documents,
            max_age_ms=body.max_age_ms,
            short_circuit=body.short_circuit,
        )
    )
    return presenter.present_verification(outcome)


@router.post(
    "/decode",
    response_model=SuccessEnvelope[AttestationHTTP],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="Decode a 144-byte attestation record without verifying it.",
)
async def decode_attestation(
    body: DecodeAttestationHTTPRequest,
    uc: Annotated[DecodeAttestation, Depends(get_decode_attestation_uc)],
) -> SuccessEnvelope[AttestationHTTP]:
    """Decode the record's fields."""
    return presenter.present_decoded(uc.execute(body.attestation_hex))
