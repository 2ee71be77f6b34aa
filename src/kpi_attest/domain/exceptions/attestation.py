# src/kpi_attest/domain/exceptions/attestation.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""KPI computation and attestation domain exceptions.

Purpose:
    Provide the error taxonomy for KPI computation, attestation encoding and
    attestation verification.

Layer:
    domain

Notes:
    - ``MalformedAttestation`` is fatal and never retried.
    - Verification failures are always surfaced; each subclass corresponds to
      exactly one :class:`VerificationFailureKind`.
    - Malformed numeric fields inside documents are NOT errors; they are
      coerced and recorded in the contribution log instead.
"""

from __future__ import annotations

from typing import Any

from kpi_attest.domain.entities.verification import VerificationFailure
from kpi_attest.domain.enums.verification_failure import VerificationFailureKind
from kpi_attest.domain.exceptions.base import DomainError


class MalformedAttestation(DomainError):
    """Raised when attestation bytes or fields violate the fixed wire layout."""

    code = "MALFORMED_ATTESTATION"


class KpiComputationError(DomainError):
    """Raised when a KPI or its attestation cannot be computed from the inputs."""

    code = "KPI_COMPUTATION_ERROR"


class AttestationVerificationError(DomainError):
    """Base class for attestation verification failures.

    Attributes:
        failure:
            The verification failure that triggered this error.
    """

    code = "ATTESTATION_VERIFICATION_FAILED"
    kind: VerificationFailureKind | None = None

    def __init__(self, failure: VerificationFailure, *, details: dict[str, Any] | None = None) -> None:
        """Initialize from the failure produced by the verifier.

        Args:
            failure:
                The failed check.
            details:
                Optional extra diagnostics merged over ``failure.details``.
        """
        merged = {"kind": failure.kind.value, **dict(failure.details), **(details or {})}
        super().__init__(failure.message, details=merged)
        self.failure = failure


class InputSetMismatch(AttestationVerificationError):
    """Recomputed input hash does not match the attested hash."""

    kind = VerificationFailureKind.INPUT_SET_MISMATCH


class ValueMismatch(AttestationVerificationError):
    """Attested scaled KPI value does not match the expected value."""

    kind = VerificationFailureKind.VALUE_MISMATCH


class Expired(AttestationVerificationError):
    """Attestation is older than the accepted freshness window."""

    kind = VerificationFailureKind.EXPIRED


class FutureTimestamp(AttestationVerificationError):
    """Attestation timestamp lies beyond the allowed clock skew in the future."""

    kind = VerificationFailureKind.FUTURE_TIMESTAMP


class InvalidSignature(AttestationVerificationError):
    """Signature does not verify over the signed message under the signer key."""

    kind = VerificationFailureKind.INVALID_SIGNATURE


_ERRORS_BY_KIND: dict[VerificationFailureKind, type[AttestationVerificationError]] = {
    cls.kind: cls
    for cls in (InputSetMismatch, ValueMismatch, Expired, FutureTimestamp, InvalidSignature)
    if cls.kind is not None
}


def error_for_failure(failure: VerificationFailure) -> AttestationVerificationError:
    """Return the exception instance matching a verification failure."""
    return _ERRORS_BY_KIND[failure.kind](failure)


__all__ = [
    "AttestationVerificationError",
    "Expired",
    "FutureTimestamp",
    "InputSetMismatch",
    "InvalidSignature",
    "KpiComputationError",
    "MalformedAttestation",
    "ValueMismatch",
    "error_for_failure",
]
