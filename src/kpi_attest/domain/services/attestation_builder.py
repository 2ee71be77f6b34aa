# src/kpi_attest/domain/services/attestation_builder.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Attestation builder.

Purpose:
    Bind the aggregator's output to a digest of the full input set and a
    timestamp, sign the fixed 48-byte message, and assemble the 144-byte
    record.

Responsibilities:
    * Run the KPI aggregator.
    * Hash the canonical serialization of the literal document sequence.
    * Capture the signing timestamp from an injected clock.
    * Sign ``le_i64(kpi_value_scaled) || input_hash || le_u64(timestamp)``
      through an injected signing capability.

Design:
    * Pure domain module: no logging, IO, or key material. The signer is a
      capability held by the caller; this module never generates, stores or
      exposes a private key.
    * The signed message excludes the public key and the signature, and
      nothing else. Signing a superset or subset breaks cross-verification.

Layer:
    domain/services
"""

from __future__ import annotations

import time
from collections.abc import Sequence

from kpi_attest.domain.entities.attestation import (
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    Attestation,
    AttestedKpi,
)
from kpi_attest.domain.exceptions.attestation import MalformedAttestation
from kpi_attest.domain.interfaces.signing import AttestationSigner, Clock
from kpi_attest.domain.services.attestation_codec import encode, encode_signing_message
from kpi_attest.domain.services.canonical_serialization import compute_input_hash
from kpi_attest.domain.services.fixed_point import NumberLike, scale_kpi_value
from kpi_attest.domain.services.kpi_aggregator import KpiAggregator


def wall_clock_ms() -> int:
    """Return the current time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


class AttestationBuilder:
    """Builds signed KPI attestations."""

    def __init__(
        self,
        *,
        aggregator: KpiAggregator | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the builder with its collaborators.

        Args:
            aggregator:
                Optional KPI aggregator. When omitted, a default
                :class:`KpiAggregator` is used.
            clock:
                Optional millisecond clock. When omitted, wall-clock time is
                used.
        """
        self._aggregator = aggregator or KpiAggregator()
        self._clock = clock or wall_clock_ms

    def build(
        self,
        documents: Sequence[object],
        signer: AttestationSigner,
        *,
        initial: NumberLike = 0,
    ) -> Attestation:
        """Compute the KPI over ``documents`` and return its signed attestation.

        Raises:
            KpiComputationError: If the inputs cannot be serialized or the
                scaled value does not fit a signed 64-bit integer.
            MalformedAttestation: If the signer returns a key or signature of
                the wrong width.
        """
        return self.compute(documents, signer, initial=initial).attestation

    def compute(
        self,
        documents: Sequence[object],
        signer: AttestationSigner,
        *,
        initial: NumberLike = 0,
    ) -> AttestedKpi:
        """Compute the KPI and return it together with its attestation.

        Args:
            documents:
                Parsed financial documents in evidence order.
            signer:
                Signing capability for the computing party.
            initial:
                Value the aggregation starts from.

        Returns:
            An :class:`AttestedKpi` holding the KPI result, the attestation
            and its 144-byte encoding.
        """
        kpi_result = self._aggregator.aggregate(documents, initial)
        input_hash = compute_input_hash(documents)
        kpi_value_scaled = scale_kpi_value(kpi_result.value)
        timestamp = self._clock()

        message = encode_signing_message(kpi_value_scaled, input_hash, timestamp)
        signature = bytes(signer.sign(message))
        public_key = bytes(signer.public_key)

        if len(public_key) != PUBLIC_KEY_SIZE or len(signature) != SIGNATURE_SIZE:
            raise MalformedAttestation(
                "Signer returned a public key or signature of unexpected width.",
                details={"public_key_len": len(public_key), "signature_len": len(signature)},
            )

        attestation = Attestation(
            kpi_value_scaled=kpi_value_scaled,
            input_hash=input_hash,
            timestamp=timestamp,
            signer_public_key=public_key,
            signature=signature,
        )
        return AttestedKpi(
            kpi_result=kpi_result,
            attestation=attestation,
            attestation_bytes=encode(attestation),
        )


__all__ = ["AttestationBuilder", "wall_clock_ms"]
