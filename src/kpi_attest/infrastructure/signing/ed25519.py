# src/kpi_attest/infrastructure/signing/ed25519.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Ed25519 signing capability and signature verifier.

Purpose:
    Adapt the ``cryptography`` Ed25519 primitives to the domain signing ports
    (:class:`AttestationSigner`, :class:`SignatureVerifier`).

Layer:
    infrastructure/signing

Notes:
    - This module loads key material handed to it by the enclave / key
      management boundary; it never generates keys.
    - The private key is held privately and is not exposed by any accessor.
"""

from __future__ import annotations

import binascii

from cryptography.exceptions import InvalidSignature as _CryptoInvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from kpi_attest.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

_SEED_SIZE = 32


class Ed25519Signer:
    """Signing capability backed by an Ed25519 private key."""

    __slots__ = ("_private_key", "_public_key")

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        """Wrap an already-loaded Ed25519 private key.

        Args:
            private_key: Key supplied by the key-management boundary.
        """
        self._private_key = private_key
        self._public_key = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @classmethod
    def from_seed(cls, seed: bytes) -> Ed25519Signer:
        """Load a signer from a raw 32-byte Ed25519 seed.

        Raises:
            ValueError: If ``seed`` is not 32 bytes.
        """
        if len(seed) != _SEED_SIZE:
            raise ValueError(f"Ed25519 seed must be exactly {_SEED_SIZE} bytes.")
        return cls(Ed25519PrivateKey.from_private_bytes(seed))

    @classmethod
    def from_seed_hex(cls, seed_hex: str) -> Ed25519Signer:
        """Load a signer from a hex-encoded 32-byte seed (optional ``0x`` prefix).

        Raises:
            ValueError: If the text is not valid hex or not 32 bytes long.
        """
        cleaned = seed_hex.strip()
        if cleaned[:2].lower() == "0x":
            cleaned = cleaned[2:]
        try:
            seed = binascii.unhexlify(cleaned)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Ed25519 seed is not valid hexadecimal.") from exc
        return cls.from_seed(seed)

    @property
    def public_key(self) -> bytes:
        """Return the raw 32-byte public key."""
        return self._public_key

    def sign(self, message: bytes) -> bytes:
        """Return the 64-byte Ed25519 signature over ``message``."""
        return self._private_key.sign(message)

    def __repr__(self) -> str:
        return f"Ed25519Signer(public_key={self._public_key.hex()})"


class Ed25519SignatureVerifier:
    """Verifies Ed25519 signatures over raw public keys."""

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        """Return True when ``signature`` is valid; False for any malformed input."""
        try:
            key = Ed25519PublicKey.from_public_bytes(public_key)
            key.verify(signature, message)
        except _CryptoInvalidSignature:
            return False
        except ValueError as exc:
            # Raised for keys that are not valid curve points or wrong lengths.
            logger.debug("ed25519.public_key_rejected", extra={"extra": {"reason": str(exc)}})
            return False
        return True


__all__ = ["Ed25519SignatureVerifier", "Ed25519Signer"]
