# src/kpi_attest/domain/services/attestation_verifier.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Attestation verifier (domain kernel).

Purpose:
    Independently re-validate a received attestation against an expected KPI
    value, the expected input documents and a freshness window.

Checks, in order:
    1. Recomputed input hash equals the attested hash (``InputSetMismatch``).
    2. Attested scaled value equals ``round(expected * 1000)``
       (``ValueMismatch``).
    3. ``now - timestamp`` lies within ``[-clock_skew_tolerance, max_age]``
       (``Expired`` / ``FutureTimestamp``).
    4. The signature verifies over the 48-byte message under the attested
       public key (``InvalidSignature``).

Layer:
    domain/services

Notes:
    - Diagnostic mode (default) runs every check and collects all failures.
    - ``short_circuit=True`` stops at the first failure and still reports
      which check failed; :meth:`AttestationVerifier.ensure_valid` is the
      production gate built on it.
    - No logging here; the application layer records outcomes.
"""

from __future__ import annotations

import hmac
from collections.abc import Sequence
from dataclasses import dataclass

from kpi_attest.domain.entities.attestation import Attestation
from kpi_attest.domain.entities.verification import VerificationFailure, VerificationReport
from kpi_attest.domain.enums.verification_failure import VerificationFailureKind
from kpi_attest.domain.exceptions.attestation import error_for_failure
from kpi_attest.domain.interfaces.signing import Clock, SignatureVerifier
from kpi_attest.domain.services.attestation_builder import wall_clock_ms
from kpi_attest.domain.services.attestation_codec import signing_message_for
from kpi_attest.domain.services.canonical_serialization import compute_input_hash
from kpi_attest.domain.services.fixed_point import NumberLike, scale_kpi_value


@dataclass(frozen=True, slots=True)
class AttestationVerifierConfig:
    """Configuration for the attestation verifier.

    Attributes:
        max_age_ms:
            Default maximum accepted age of an attestation, in milliseconds.
        clock_skew_tolerance_ms:
            How far in the future a timestamp may lie before it is rejected.
    """

    max_age_ms: int = 60 * 60 * 1000
    clock_skew_tolerance_ms: int = 30_000

    def __post_init__(self) -> None:
        """Reject negative windows."""
        if self.max_age_ms < 0:
            raise ValueError("AttestationVerifierConfig.max_age_ms must be non-negative.")
        if self.clock_skew_tolerance_ms < 0:
            raise ValueError(
                "AttestationVerifierConfig.clock_skew_tolerance_ms must be non-negative."
            )


class AttestationVerifier:
    """Pure domain attestation verifier."""

    def __init__(
        self,
        signature_verifier: SignatureVerifier,
        *,
        config: AttestationVerifierConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            signature_verifier:
                Signature scheme used for check 4.
            config:
                Optional freshness configuration. When omitted, defaults are used.
            clock:
                Optional millisecond clock used when ``now`` is not supplied.
        """
        self._signature_verifier = signature_verifier
        self._config = config or AttestationVerifierConfig()
        self._clock = clock or wall_clock_ms

    @property
    def config(self) -> AttestationVerifierConfig:
        """Return the active configuration."""
        return self._config

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    def verify(
        self,
        attestation: Attestation,
        expected_kpi_value: NumberLike,
        expected_documents: Sequence[object],
        *,
        now: int | None = None,
        max_age_ms: int | None = None,
        short_circuit: bool = False,
    ) -> VerificationReport:
        """Run all verification checks against an attestation.

        Args:
            attestation:
                Attestation received from the computing party.
            expected_kpi_value:
                KPI value the verifier expects the attestation to carry.
            expected_documents:
                Input documents the attestation is claimed to cover, in order.
            now:
                Verification time in ms since epoch; defaults to the clock.
            max_age_ms:
                Per-call override of the configured maximum age.
            short_circuit:
                Stop at the first failed check.

        Returns:
            A :class:`VerificationReport`; ``is_valid`` is True only when every
            check passed.

        Raises:
            KpiComputationError: If ``expected_documents`` cannot be serialized
                or ``expected_kpi_value`` is not a finite number.
            ValueError: If ``max_age_ms`` is negative.
        """
        effective_now = self._clock() if now is None else now
        effective_max_age = self._config.max_age_ms if max_age_ms is None else max_age_ms
        if effective_max_age < 0:
            raise ValueError("max_age_ms must be non-negative.")

        checks = (
            lambda: self._check_input_hash(attestation, expected_documents),
            lambda: self._check_value(attestation, expected_kpi_value),
            lambda: self._check_freshness(attestation, effective_now, effective_max_age),
            lambda: self._check_signature(attestation),
        )

        failures: list[VerificationFailure] = []
        for check in checks:
            failure = check()
            if failure is None:
                continue
            failures.append(failure)
            if short_circuit:
                return VerificationReport(failures=tuple(failures), short_circuited=True)

        return VerificationReport(failures=tuple(failures))

    def ensure_valid(
        self,
        attestation: Attestation,
        expected_kpi_value: NumberLike,
        expected_documents: Sequence[object],
        *,
        now: int | None = None,
        max_age_ms: int | None = None,
    ) -> None:
        """Production gate: raise on the first failed check.

        Raises:
            AttestationVerificationError: The subclass matching the first
                failed check (``InputSetMismatch``, ``ValueMismatch``,
                ``Expired``, ``FutureTimestamp`` or ``InvalidSignature``).
        """
        report = self.verify(
            attestation,
            expected_kpi_value,
            expected_documents,
            now=now,
            max_age_ms=max_age_ms,
            short_circuit=True,
        )
        if report.first_failure is not None:
            raise error_for_failure(report.first_failure)

    # ------------------------------------------------------------------ #
    # Checks                                                             #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _check_input_hash(
        attestation: Attestation,
        expected_documents: Sequence[object],
    ) -> VerificationFailure | None:
        expected_hash = compute_input_hash(expected_documents)
        if hmac.compare_digest(expected_hash, attestation.input_hash):
            return None
        return VerificationFailure(
            kind=VerificationFailureKind.INPUT_SET_MISMATCH,
            message="Recomputed input hash does not match the attested input hash.",
            details={
                "expected_input_hash": expected_hash.hex(),
                "attested_input_hash": attestation.input_hash.hex(),
            },
        )

    @staticmethod
    def _check_value(
        attestation: Attestation,
        expected_kpi_value: NumberLike,
    ) -> VerificationFailure | None:
        expected_scaled = scale_kpi_value(expected_kpi_value)
        if expected_scaled == attestation.kpi_value_scaled:
            return None
        return VerificationFailure(
            kind=VerificationFailureKind.VALUE_MISMATCH,
            message="Attested KPI value does not match the expected value.",
            details={
                "expected_kpi_value_scaled": expected_scaled,
                "attested_kpi_value_scaled": attestation.kpi_value_scaled,
            },
        )

    def _check_freshness(
        self,
        attestation: Attestation,
        now: int,
        max_age_ms: int,
    ) -> VerificationFailure | None:
        age_ms = now - attestation.timestamp
        details = {
            "timestamp": attestation.timestamp,
            "now": now,
            "age_ms": age_ms,
            "max_age_ms": max_age_ms,
            "clock_skew_tolerance_ms": self._config.clock_skew_tolerance_ms,
        }
        if age_ms > max_age_ms:
            return VerificationFailure(
                kind=VerificationFailureKind.EXPIRED,
                message="Attestation is older than the accepted freshness window.",
                details=details,
            )
        if age_ms < -self._config.clock_skew_tolerance_ms:
            return VerificationFailure(
                kind=VerificationFailureKind.FUTURE_TIMESTAMP,
                message="Attestation timestamp is in the future beyond the clock skew tolerance.",
                details=details,
            )
        return None

    def _check_signature(self, attestation: Attestation) -> VerificationFailure | None:
        message = signing_message_for(attestation)
        if self._signature_verifier.verify(
            attestation.signer_public_key, message, attestation.signature
        ):
            return None
        return VerificationFailure(
            kind=VerificationFailureKind.INVALID_SIGNATURE,
            message="Signature does not verify under the attested signer public key.",
            details={"signer_public_key": attestation.signer_public_key.hex()},
        )


__all__ = ["AttestationVerifier", "AttestationVerifierConfig"]
