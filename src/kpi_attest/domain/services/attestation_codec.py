# src/kpi_attest/domain/services/attestation_codec.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Fixed-width binary codec for attestations.

Wire layout (144 bytes, little-endian integers):

    offset  length  field
    0       8       kpi_value_scaled (i64)
    8       32      input_hash
    40      8       timestamp (u64, ms since epoch)
    48      32      signer_public_key
    80      64      signature

The signed message is the first three fields only (48 bytes). Downstream
ledger logic allocates a fixed buffer for the record, so these widths must
never change.
"""

from __future__ import annotations

import binascii
import struct
from typing import Final

from kpi_attest.domain.entities.attestation import INPUT_HASH_SIZE, Attestation
from kpi_attest.domain.exceptions.attestation import MalformedAttestation

_RECORD: Final[struct.Struct] = struct.Struct("<q32sQ32s64s")
_SIGNING_MESSAGE: Final[struct.Struct] = struct.Struct("<q32sQ")

ATTESTATION_SIZE: Final[int] = _RECORD.size
SIGNING_MESSAGE_SIZE: Final[int] = _SIGNING_MESSAGE.size


def encode_signing_message(kpi_value_scaled: int, input_hash: bytes, timestamp: int) -> bytes:
    """Return ``le_i64(kpi_value_scaled) || input_hash || le_u64(timestamp)``.

    Raises:
        MalformedAttestation: If a field does not fit its fixed width.
    """
    if len(input_hash) != INPUT_HASH_SIZE:
        raise MalformedAttestation(
            f"input_hash must be exactly {INPUT_HASH_SIZE} bytes.",
            details={"actual": len(input_hash)},
        )
    try:
        return _SIGNING_MESSAGE.pack(kpi_value_scaled, bytes(input_hash), timestamp)
    except struct.error as exc:
        raise MalformedAttestation(
            "Signing message fields do not fit their fixed widths.",
            details={"reason": str(exc)},
        ) from exc


def signing_message_for(attestation: Attestation) -> bytes:
    """Return the 48-byte message the attestation's signature covers."""
    return encode_signing_message(
        attestation.kpi_value_scaled,
        attestation.input_hash,
        attestation.timestamp,
    )


def encode(attestation: Attestation) -> bytes:
    """Serialize an attestation into its 144-byte wire record."""
    return _RECORD.pack(
        attestation.kpi_value_scaled,
        attestation.input_hash,
        attestation.timestamp,
        attestation.signer_public_key,
        attestation.signature,
    )


def decode(data: bytes | bytearray | memoryview) -> Attestation:
    """Parse a 144-byte wire record.

    Raises:
        MalformedAttestation: If ``data`` is not exactly 144 bytes.
    """
    raw = bytes(data)
    if len(raw) != ATTESTATION_SIZE:
        raise MalformedAttestation(
            f"Attestation must be exactly {ATTESTATION_SIZE} bytes.",
            details={"expected": ATTESTATION_SIZE, "actual": len(raw)},
        )
    kpi_value_scaled, input_hash, timestamp, public_key, signature = _RECORD.unpack(raw)
    return Attestation(
        kpi_value_scaled=kpi_value_scaled,
        input_hash=input_hash,
        timestamp=timestamp,
        signer_public_key=public_key,
        signature=signature,
    )


def decode_hex(text: str) -> Attestation:
    """Parse a hex-encoded wire record (optional ``0x`` prefix).

    Raises:
        MalformedAttestation: If ``text`` is not valid hex or has the wrong length.
    """
    cleaned = text.strip()
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    try:
        raw = binascii.unhexlify(cleaned)
    except (binascii.Error, ValueError) as exc:
        raise MalformedAttestation(
            "Attestation hex is not valid hexadecimal.",
            details={"reason": str(exc)},
        ) from exc
    return decode(raw)


__all__ = [
    "ATTESTATION_SIZE",
    "SIGNING_MESSAGE_SIZE",
    "decode",
    "decode_hex",
    "encode",
    "encode_signing_message",
    "signing_message_for",
]
