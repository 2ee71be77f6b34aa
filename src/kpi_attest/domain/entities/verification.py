# src/kpi_attest/domain/entities/verification.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Attestation verification outcome value objects.

Layer:
    domain
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from kpi_attest.domain.enums.verification_failure import VerificationFailureKind


@dataclass(frozen=True, slots=True)
class VerificationFailure:
    """A single failed verification check.

    Attributes:
        kind:
            Which check failed.
        message:
            Human-readable description, safe to surface to clients.
        details:
            Machine-readable diagnostics (expected/actual values, hex digests).
    """

    kind: VerificationFailureKind
    message: str
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class VerificationReport:
    """Ordered collection of failures produced by one ``verify`` call.

    An empty report means the attestation passed every check that ran.
    """

    failures: tuple[VerificationFailure, ...] = ()
    short_circuited: bool = False

    @property
    def is_valid(self) -> bool:
        """Return True when no check failed."""
        return not self.failures

    @property
    def failure_kinds(self) -> tuple[VerificationFailureKind, ...]:
        """Return the failure kinds in check order."""
        return tuple(f.kind for f in self.failures)

    @property
    def first_failure(self) -> VerificationFailure | None:
        """Return the first failure, if any."""
        return self.failures[0] if self.failures else None


__all__ = ["VerificationFailure", "VerificationReport"]
