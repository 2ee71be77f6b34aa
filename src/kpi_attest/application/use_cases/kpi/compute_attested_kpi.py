# src/kpi_attest/application/use_cases/kpi/compute_attested_kpi.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Use case: Compute a KPI and issue a signed attestation.

Purpose:
    Run the attestation builder with the deployment's signing capability and
    return the KPI result, the attestation and its 144-byte encoding.

Layer:
    application/use_cases
"""

from __future__ import annotations

import time

from kpi_attest.application.exceptions import SignerUnavailableError
from kpi_attest.application.schemas.dto.kpi import ComputeKpiRequest
from kpi_attest.application.use_cases.kpi.compute_kpi import report_defaulted_fields
from kpi_attest.domain.entities.attestation import AttestedKpi
from kpi_attest.domain.interfaces.signing import AttestationSigner
from kpi_attest.domain.services.attestation_builder import AttestationBuilder
from kpi_attest.infrastructure.logging.logger import get_json_logger
from kpi_attest.infrastructure.observability.metrics import (
    get_attestation_build_seconds,
    get_attestations_built_total,
)

logger = get_json_logger(__name__)


class ComputeAttestedKpi:
    """Compute the KPI and sign an attestation over it.

    Args:
        builder: Attestation builder (aggregator and clock are configured on it).
        signer: Signing capability, or ``None`` when no key is configured.
    """

    def __init__(self, builder: AttestationBuilder, signer: AttestationSigner | None) -> None:
        self._builder = builder
        self._signer = signer

    def execute(self, req: ComputeKpiRequest) -> AttestedKpi:
        """Build the attestation.

        Raises:
            SignerUnavailableError: If no signer is configured.
            KpiComputationError: If inputs cannot be serialized or the scaled
                KPI does not fit a signed 64-bit integer.
            MalformedAttestation: If the signer returns material of the wrong width.
        """
        if self._signer is None:
            logger.warning(
                "kpi.attestation.signer_unavailable",
                extra={"document_count": len(req.documents)},
            )
            raise SignerUnavailableError(
                "No attestation signing key is configured for this deployment."
            )

        started = time.perf_counter()
        attested = self._builder.compute(req.documents, self._signer, initial=req.initial)
        get_attestation_build_seconds().observe(time.perf_counter() - started)
        get_attestations_built_total().inc()

        defaulted = report_defaulted_fields(attested.kpi_result)
        attestation = attested.attestation
        logger.info(
            "kpi.attestation.built",
            extra={
                "document_count": len(attested.kpi_result.contributions),
                "kpi_value": str(attested.kpi_result.value),
                "kpi_value_scaled": attestation.kpi_value_scaled,
                "input_hash": attestation.input_hash.hex(),
                "timestamp": attestation.timestamp,
                "signer_public_key": attestation.signer_public_key.hex(),
                "defaulted_field_count": defaulted,
            },
        )
        return attested


__all__ = ["ComputeAttestedKpi"]
