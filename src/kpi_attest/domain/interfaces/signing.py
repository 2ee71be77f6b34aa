# src/kpi_attest/domain/interfaces/signing.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Signing and clock interfaces (domain ports).

Purpose:
    Describe the capabilities the attestation services depend on without
    binding the domain to a crypto library or to wall-clock time.

Layer:
    domain/interfaces

Notes:
    - The private key never crosses this boundary; a signer is an opaque
      capability ``sign(bytes) -> 64 bytes`` held by the caller.
    - Key generation belongs to the enclave / identity boundary, not here.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

Clock = Callable[[], int]
"""Zero-argument callable returning milliseconds since the Unix epoch."""


@runtime_checkable
class AttestationSigner(Protocol):
    """Signing capability used by the attestation builder."""

    @property
    def public_key(self) -> bytes:
        """Return the raw 32-byte public key matching the signing key."""
        ...

    def sign(self, message: bytes) -> bytes:
        """Return a 64-byte signature over ``message``."""
        ...


@runtime_checkable
class SignatureVerifier(Protocol):
    """Signature verification scheme used by the attestation verifier."""

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        """Return True if ``signature`` is valid for ``message`` under ``public_key``.

        Implementations must return False (never raise) for malformed keys or
        signatures.
        """
        ...


__all__ = ["AttestationSigner", "Clock", "SignatureVerifier"]
