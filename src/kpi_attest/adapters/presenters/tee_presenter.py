# src/kpi_attest/adapters/presenters/tee_presenter.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Presenter: KPI results and attestations → HTTP SuccessEnvelope.

Synopsis:
    Renders domain results produced by the KPI and attestation use cases into
    the canonical SuccessEnvelope. Decimals become plain strings; binary
    fields become lowercase hex.

Layer:
    adapters/presenters
"""

from __future__ import annotations

from decimal import Decimal

from kpi_attest.adapters.schemas.http.envelopes import SuccessEnvelope
from kpi_attest.adapters.schemas.http.tee_schemas import (
    AttestationHTTP,
    ComputeKpiHTTPResponse,
    DocumentContributionHTTP,
    KpiResultHTTP,
    VerificationFailureHTTP,
    VerificationReportHTTP,
)
from kpi_attest.application.schemas.dto.kpi import VerificationOutcome
from kpi_attest.domain.entities.attestation import Attestation, AttestedKpi
from kpi_attest.domain.entities.kpi_result import KpiResult
from kpi_attest.domain.services.fixed_point import unscale_kpi_value


def _decimal_str(value: Decimal) -> str:
    """Render a Decimal canonically.

    Strips insignificant trailing zeros, avoids scientific notation and
    collapses -0 to "0" (``380000.000000000`` → ``380000``).
    """
    v = value.normalize()
    if v == 0:
        return "0"
    if v == v.to_integral():
        return format(v.to_integral(), "f")
    return format(v, "f")


class TeePresenter:
    """Presenter for `/v1/tee/*`."""

    def kpi_result(self, result: KpiResult) -> KpiResultHTTP:
        """Map a :class:`KpiResult` to its HTTP shape."""
        return KpiResultHTTP(
            value=_decimal_str(result.value),
            initial=_decimal_str(result.initial),
            delta=_decimal_str(result.delta),
            last_kind=result.last_kind.value,
            contributions=[
                DocumentContributionHTTP(
                    index=c.index,
                    kind=c.kind.value,
                    amount=_decimal_str(c.amount),
                    status=c.status.value,
                    defaulted_fields=list(c.defaulted_fields),
                )
                for c in result.contributions
            ],
        )

    def attestation(self, attestation: Attestation) -> AttestationHTTP:
        """Map an :class:`Attestation` to its HTTP shape."""
        return AttestationHTTP(
            kpi_value_scaled=attestation.kpi_value_scaled,
            kpi_value=_decimal_str(unscale_kpi_value(attestation.kpi_value_scaled)),
            input_hash=attestation.input_hash.hex(),
            timestamp=attestation.timestamp,
            signer_public_key=attestation.signer_public_key.hex(),
            signature=attestation.signature.hex(),
        )

    # ------------------------- Envelopes ------------------------------- #

    def present_kpi(self, result: KpiResult) -> SuccessEnvelope[ComputeKpiHTTPResponse]:
        """Envelope for a simple (unsigned) computation."""
        return SuccessEnvelope[ComputeKpiHTTPResponse](
            data=ComputeKpiHTTPResponse(kpi_result=self.kpi_result(result))
        )

    def present_attested_kpi(
        self, attested: AttestedKpi
    ) -> SuccessEnvelope[ComputeKpiHTTPResponse]:
        """Envelope for an attested computation."""
        return SuccessEnvelope[ComputeKpiHTTPResponse](
            data=ComputeKpiHTTPResponse(
                kpi_result=self.kpi_result(attested.kpi_result),
                attestation=self.attestation(attested.attestation),
                attestation_hex=attested.attestation_bytes.hex(),
                attestation_bytes=list(attested.attestation_bytes),
            )
        )

    def present_verification(
        self, outcome: VerificationOutcome
    ) -> SuccessEnvelope[VerificationReportHTTP]:
        """Envelope for a verification outcome (valid or not)."""
        report = outcome.report
        return SuccessEnvelope[VerificationReportHTTP](
            data=VerificationReportHTTP(
                is_valid=report.is_valid,
                short_circuited=report.short_circuited,
                verified_at=outcome.verified_at,
                failures=[
                    VerificationFailureHTTP(
                        kind=f.kind.value,
                        message=f.message,
                        details=dict(f.details),
                    )
                    for f in report.failures
                ],
                attestation=self.attestation(outcome.attestation),
            )
        )

    def present_decoded(self, attestation: Attestation) -> SuccessEnvelope[AttestationHTTP]:
        """Envelope for a decoded attestation."""
        return SuccessEnvelope[AttestationHTTP](data=self.attestation(attestation))


__all__ = ["TeePresenter"]
