# src/kpi_attest/application/use_cases/attestation/verify_attestation.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Use case: Verify a received attestation.

Purpose:
    Decode a hex-encoded attestation and run every verification check
    against the expected KPI value, the expected documents and the freshness
    window. The outcome is always returned (never raised) so callers can show
    the verifier which checks failed.

Layer:
    application/use_cases

Notes:
    - A structurally malformed record is not a verification outcome; it
      raises :class:`MalformedAttestation`.
    - Outcomes are recorded in ``kpi_attestation_verifications_total`` and
      each failed check in ``kpi_attestation_verification_failures_total``.
"""

from __future__ import annotations

from kpi_attest.application.schemas.dto.kpi import VerificationOutcome, VerifyAttestationRequest
from kpi_attest.application.use_cases.attestation.decode_attestation import DecodeAttestation
from kpi_attest.domain.interfaces.signing import Clock
from kpi_attest.domain.services.attestation_builder import wall_clock_ms
from kpi_attest.domain.services.attestation_verifier import AttestationVerifier
from kpi_attest.infrastructure.logging.logger import get_json_logger
from kpi_attest.infrastructure.observability.metrics import (
    get_verification_failures_total,
    get_verifications_total,
)

logger = get_json_logger(__name__)


class VerifyAttestation:
    """Verify an attestation and report every failed check.

    Args:
        verifier: Configured domain verifier.
        clock: Optional millisecond clock; defaults to wall-clock time.
    """

    def __init__(self, verifier: AttestationVerifier, clock: Clock | None = None) -> None:
        self._verifier = verifier
        self._clock = clock or wall_clock_ms
        self._decoder = DecodeAttestation()

    def execute(self, req: VerifyAttestationRequest) -> VerificationOutcome:
        """Decode and verify.

        Raises:
            MalformedAttestation: If the record cannot be decoded.
            KpiComputationError: If the expected documents cannot be
                serialized or the expected value is not a finite number.
        """
        attestation = self._decoder.execute(req.attestation_hex)
        now = self._clock()
        report = self._verifier.verify(
            attestation,
            req.expected_kpi_value,
            req.expected_documents,
            now=now,
            max_age_ms=req.max_age_ms,
            short_circuit=req.short_circuit,
        )

        outcome = "valid" if report.is_valid else "invalid"
        get_verifications_total().labels(outcome=outcome).inc()
        failures_counter = get_verification_failures_total()
        for kind in report.failure_kinds:
            failures_counter.labels(kind=kind.value).inc()

        extra = {
            "kpi_value_scaled": attestation.kpi_value_scaled,
            "input_hash": attestation.input_hash.hex(),
            "timestamp": attestation.timestamp,
            "signer_public_key": attestation.signer_public_key.hex(),
            "verified_at": now,
        }
        if report.is_valid:
            logger.info("kpi.attestation.verified", extra=extra)
        else:
            logger.warning(
                "kpi.attestation.rejected",
                extra={**extra, "failures": [kind.value for kind in report.failure_kinds]},
            )

        return VerificationOutcome(attestation=attestation, report=report, verified_at=now)


__all__ = ["VerifyAttestation"]
