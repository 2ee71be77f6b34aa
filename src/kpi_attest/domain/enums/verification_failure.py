# src/kpi_attest/domain/enums/verification_failure.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Attestation verification failure kinds.

Each kind maps to a distinct tamper or staleness scenario that a consumer must
react to differently, so kinds are never merged or downgraded.
"""

from __future__ import annotations

from enum import Enum


class VerificationFailureKind(str, Enum):
    """Reason an attestation was rejected by the verifier."""

    INPUT_SET_MISMATCH = "InputSetMismatch"
    VALUE_MISMATCH = "ValueMismatch"
    EXPIRED = "Expired"
    FUTURE_TIMESTAMP = "FutureTimestamp"
    INVALID_SIGNATURE = "InvalidSignature"


__all__ = ["VerificationFailureKind"]
