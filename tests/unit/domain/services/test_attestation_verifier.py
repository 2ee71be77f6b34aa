# tests/unit/domain/services/test_attestation_verifier.py
"""Tests for the attestation verifier."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

import pytest

from kpi_attest.domain.entities.attestation import Attestation
from kpi_attest.domain.enums.verification_failure import VerificationFailureKind as Kind
from kpi_attest.domain.exceptions.attestation import (
    Expired,
    FutureTimestamp,
    InputSetMismatch,
    InvalidSignature,
    ValueMismatch,
)
from kpi_attest.domain.services.attestation_builder import AttestationBuilder
from kpi_attest.domain.services.attestation_codec import decode, encode
from kpi_attest.domain.services.attestation_verifier import (
    AttestationVerifier,
    AttestationVerifierConfig,
)
from kpi_attest.infrastructure.signing.ed25519 import Ed25519SignatureVerifier, Ed25519Signer

HOUR_MS = 3_600_000


@pytest.fixture()
def attestation(
    builder: AttestationBuilder,
    signer: Ed25519Signer,
    revenue_and_payroll: list[dict[str, Any]],
) -> Attestation:
    return builder.build(revenue_and_payroll, signer)


def test_valid_attestation_passes_every_check(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    report = verifier.verify(attestation, 380000, revenue_and_payroll)

    assert report.is_valid
    assert report.failures == ()
    assert not report.short_circuited


def test_expected_value_accepts_equivalent_representations(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    for expected in (380000, 380000.0, "380000.0004", "379999.9995"):
        assert verifier.verify(attestation, expected, revenue_and_payroll).is_valid


def test_wrong_expected_value(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    report = verifier.verify(attestation, 380001, revenue_and_payroll)

    assert report.failure_kinds == (Kind.VALUE_MISMATCH,)
    assert report.failures[0].details["expected_kpi_value_scaled"] == 380_001_000
    assert report.failures[0].details["attested_kpi_value_scaled"] == 380_000_000


def test_reordered_documents_are_an_input_set_mismatch(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    report = verifier.verify(attestation, 380000, list(reversed(revenue_and_payroll)))
    assert report.failure_kinds == (Kind.INPUT_SET_MISMATCH,)


def test_extra_document_is_an_input_set_mismatch(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    documents = [*revenue_and_payroll, {"note": "unrelated"}]
    report = verifier.verify(attestation, 380000, documents)
    assert report.failure_kinds == (Kind.INPUT_SET_MISMATCH,)


# ---------------------------------------------------------------------------
# Freshness
# ---------------------------------------------------------------------------


def test_exactly_max_age_old_passes(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    now_ms: int,
) -> None:
    report = verifier.verify(attestation, 380000, revenue_and_payroll, now=now_ms + HOUR_MS)
    assert report.is_valid


def test_one_millisecond_past_max_age_is_expired(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    now_ms: int,
) -> None:
    report = verifier.verify(attestation, 380000, revenue_and_payroll, now=now_ms + HOUR_MS + 1)

    assert report.failure_kinds == (Kind.EXPIRED,)
    assert report.failures[0].details["age_ms"] == HOUR_MS + 1


def test_max_age_override(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    now_ms: int,
) -> None:
    report = verifier.verify(
        attestation, 380000, revenue_and_payroll, now=now_ms + 1_001, max_age_ms=1_000
    )
    assert report.failure_kinds == (Kind.EXPIRED,)


def test_future_timestamp_beyond_tolerance(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    now_ms: int,
) -> None:
    """A timestamp one second past the skew tolerance is rejected."""
    tolerance = verifier.config.clock_skew_tolerance_ms
    report = verifier.verify(
        attestation, 380000, revenue_and_payroll, now=now_ms - tolerance - 1_000
    )
    assert report.failure_kinds == (Kind.FUTURE_TIMESTAMP,)


def test_future_timestamp_within_tolerance_passes(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    now_ms: int,
) -> None:
    tolerance = verifier.config.clock_skew_tolerance_ms
    report = verifier.verify(attestation, 380000, revenue_and_payroll, now=now_ms - tolerance)
    assert report.is_valid


def test_negative_max_age_is_rejected(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    with pytest.raises(ValueError):
        verifier.verify(attestation, 380000, revenue_and_payroll, max_age_ms=-1)


def test_config_rejects_negative_windows() -> None:
    with pytest.raises(ValueError):
        AttestationVerifierConfig(max_age_ms=-1)
    with pytest.raises(ValueError):
        AttestationVerifierConfig(clock_skew_tolerance_ms=-1)


# ---------------------------------------------------------------------------
# Signature and tampering
# ---------------------------------------------------------------------------


def test_modified_value_fails_value_and_signature(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    forged = replace(attestation, kpi_value_scaled=attestation.kpi_value_scaled + 1)
    report = verifier.verify(forged, 380000, revenue_and_payroll)
    assert report.failure_kinds == (Kind.VALUE_MISMATCH, Kind.INVALID_SIGNATURE)


def test_other_signer_key_is_invalid_signature(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    other = Ed25519Signer.from_seed(b"\x07" * 32)
    forged = replace(attestation, signer_public_key=other.public_key)
    report = verifier.verify(forged, 380000, revenue_and_payroll)
    assert report.failure_kinds == (Kind.INVALID_SIGNATURE,)


def _expected_kinds(position: int) -> set[Kind]:
    """Failure kinds a one-bit flip at ``position`` of the wire record can cause first."""
    if position < 8:
        return {Kind.VALUE_MISMATCH}
    if position < 40:
        return {Kind.INPUT_SET_MISMATCH}
    if position < 48:
        # A low-order flip stays inside the freshness window.
        return {Kind.EXPIRED, Kind.FUTURE_TIMESTAMP, Kind.INVALID_SIGNATURE}
    return {Kind.INVALID_SIGNATURE}


@pytest.mark.parametrize("short_circuit", [False, True])
def test_every_single_byte_tamper_is_detected(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    short_circuit: bool,
) -> None:
    raw = encode(attestation)
    for position in range(len(raw)):
        tampered = bytearray(raw)
        tampered[position] ^= 0x01
        report = verifier.verify(
            decode(bytes(tampered)), 380000, revenue_and_payroll, short_circuit=short_circuit
        )

        assert not report.is_valid, f"byte {position} tamper went undetected"
        assert report.first_failure is not None
        assert report.first_failure.kind in _expected_kinds(position), position
        if short_circuit:
            assert report.short_circuited
            assert len(report.failure_kinds) == 1, position


def test_collects_all_failures_by_default(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    now_ms: int,
) -> None:
    forged = replace(attestation, signature=b"\x00" * 64)
    report = verifier.verify(forged, 1, [], now=now_ms + 2 * HOUR_MS)

    assert report.failure_kinds == (
        Kind.INPUT_SET_MISMATCH,
        Kind.VALUE_MISMATCH,
        Kind.EXPIRED,
        Kind.INVALID_SIGNATURE,
    )
    assert not report.short_circuited


def test_short_circuit_reports_only_first_failure(
    verifier: AttestationVerifier,
    attestation: Attestation,
    now_ms: int,
) -> None:
    report = verifier.verify(attestation, 1, [], now=now_ms + 2 * HOUR_MS, short_circuit=True)

    assert report.failure_kinds == (Kind.INPUT_SET_MISMATCH,)
    assert report.short_circuited


def test_verifier_uses_its_clock_when_now_is_omitted(
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    now_ms: int,
) -> None:
    late = AttestationVerifier(Ed25519SignatureVerifier(), clock=lambda: now_ms + HOUR_MS + 1)
    report = late.verify(attestation, 380000, revenue_and_payroll)
    assert report.failure_kinds == (Kind.EXPIRED,)


# ---------------------------------------------------------------------------
# ensure_valid
# ---------------------------------------------------------------------------


def test_ensure_valid_passes_silently(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    verifier.ensure_valid(attestation, 380000, revenue_and_payroll)


@pytest.mark.parametrize(
    ("mutate", "error_type"),
    [
        (lambda a, docs, now: (a, 380000, docs[:1], now), InputSetMismatch),
        (lambda a, docs, now: (a, 5, docs, now), ValueMismatch),
        (lambda a, docs, now: (a, 380000, docs, now + 2 * HOUR_MS), Expired),
        (lambda a, docs, now: (a, 380000, docs, now - 10 * 60_000), FutureTimestamp),
        (
            lambda a, docs, now: (replace(a, signature=b"\x01" * 64), 380000, docs, now),
            InvalidSignature,
        ),
    ],
)
def test_ensure_valid_raises_matching_error(
    verifier: AttestationVerifier,
    attestation: Attestation,
    revenue_and_payroll: list[dict[str, Any]],
    now_ms: int,
    mutate: Any,
    error_type: type[Exception],
) -> None:
    candidate, expected, documents, now = mutate(attestation, revenue_and_payroll, now_ms)
    with pytest.raises(error_type) as info:
        verifier.ensure_valid(candidate, expected, documents, now=now)
    assert info.value.details["kind"] == info.value.kind.value  # type: ignore[attr-defined]
