# src/kpi_attest/domain/entities/attestation.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Signed KPI attestation.

Purpose:
    Define the immutable claim "this scaled KPI value was derived from this
    exact input set, at this time, by this signer", whose byte encoding is the
    fixed 144-byte record submitted to the ledger.

Layer:
    domain

Notes:
    - Field widths are a hard external contract; construction with any other
      width raises :class:`MalformedAttestation`.
    - Attestations are never mutated, only verified or discarded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from kpi_attest.domain.entities.kpi_result import KpiResult
from kpi_attest.domain.exceptions.attestation import MalformedAttestation

INPUT_HASH_SIZE: Final[int] = 32
PUBLIC_KEY_SIZE: Final[int] = 32
SIGNATURE_SIZE: Final[int] = 64

I64_MIN: Final[int] = -(2**63)
I64_MAX: Final[int] = 2**63 - 1
U64_MAX: Final[int] = 2**64 - 1


@dataclass(frozen=True, slots=True)
class Attestation:
    """Signed KPI attestation.

    Attributes:
        kpi_value_scaled:
            ``round(value * 1000)`` as a signed 64-bit integer.
        input_hash:
            SHA-256 digest of the canonical serialization of the input
            document sequence.
        timestamp:
            Milliseconds since the Unix epoch at signing time (unsigned 64-bit).
        signer_public_key:
            32-byte public key of the signer.
        signature:
            64-byte signature over the 48-byte signing message.
    """

    kpi_value_scaled: int
    input_hash: bytes
    timestamp: int
    signer_public_key: bytes
    signature: bytes

    def __post_init__(self) -> None:
        """Normalize bytes-like fields and enforce wire-width invariants."""
        for name in ("input_hash", "signer_public_key", "signature"):
            raw = getattr(self, name)
            if isinstance(raw, bytearray | memoryview):
                object.__setattr__(self, name, bytes(raw))
            elif not isinstance(raw, bytes):
                raise MalformedAttestation(
                    f"Attestation.{name} must be bytes.",
                    details={"field": name, "type": type(raw).__name__},
                )

        self._validate_widths()
        self._validate_ranges()

    def _validate_widths(self) -> None:
        """Validate fixed byte widths of digest, key and signature."""
        expected = {
            "input_hash": INPUT_HASH_SIZE,
            "signer_public_key": PUBLIC_KEY_SIZE,
            "signature": SIGNATURE_SIZE,
        }
        for name, size in expected.items():
            actual = len(getattr(self, name))
            if actual != size:
                raise MalformedAttestation(
                    f"Attestation.{name} must be exactly {size} bytes.",
                    details={"field": name, "expected": size, "actual": actual},
                )

    def _validate_ranges(self) -> None:
        """Validate integer fields fit their fixed-width encodings."""
        if isinstance(self.kpi_value_scaled, bool) or not isinstance(self.kpi_value_scaled, int):
            raise MalformedAttestation("Attestation.kpi_value_scaled must be an int.")
        if not I64_MIN <= self.kpi_value_scaled <= I64_MAX:
            raise MalformedAttestation(
                "Attestation.kpi_value_scaled does not fit a signed 64-bit integer.",
                details={"kpi_value_scaled": self.kpi_value_scaled},
            )

        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise MalformedAttestation("Attestation.timestamp must be an int.")
        if not 0 <= self.timestamp <= U64_MAX:
            raise MalformedAttestation(
                "Attestation.timestamp does not fit an unsigned 64-bit integer.",
                details={"timestamp": self.timestamp},
            )


@dataclass(frozen=True, slots=True)
class AttestedKpi:
    """KPI result bundled with its attestation and the encoded wire record."""

    kpi_result: KpiResult
    attestation: Attestation
    attestation_bytes: bytes


__all__ = [
    "I64_MAX",
    "I64_MIN",
    "INPUT_HASH_SIZE",
    "PUBLIC_KEY_SIZE",
    "SIGNATURE_SIZE",
    "U64_MAX",
    "Attestation",
    "AttestedKpi",
]
