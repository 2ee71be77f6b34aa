# src/kpi_attest/domain/entities/kpi_result.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""KPI aggregation result value objects.

Purpose:
    Carry the cumulative KPI produced by folding a sequence of financial
    documents, together with the per-document contribution log used for audit
    replay.

Layer:
    domain

Notes:
    - This type is intentionally transport-agnostic (no Pydantic, no HTTP).
    - Numeric values use `Decimal` in the domain and should be serialized as
      strings on the wire to preserve precision.
    - ``last_kind`` is diagnostic only; callers must not branch business
      logic on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from kpi_attest.domain.enums.document_kind import ContributionStatus, DocumentKind


@dataclass(frozen=True, slots=True)
class DocumentContribution:
    """Contribution of a single document to the cumulative KPI.

    Attributes:
        index:
            Zero-based position of the document in the input sequence.
        kind:
            Structural classification of the document.
        amount:
            Signed delta this document added to the running total.
        status:
            Whether the amount is legitimate or the product of defaulting.
        defaulted_fields:
            Dotted paths of fields that were missing or malformed and were
            replaced by their default (0, or 1 for a useful life).
    """

    index: int
    kind: DocumentKind
    amount: Decimal
    status: ContributionStatus
    defaulted_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Enforce basic invariants for contribution records."""
        if self.index < 0:
            raise ValueError("DocumentContribution.index must be non-negative.")
        if not isinstance(self.amount, Decimal):
            raise TypeError("DocumentContribution.amount must be a Decimal.")

    @property
    def was_defaulted(self) -> bool:
        """Return True when any field was coerced during the transform."""
        return bool(self.defaulted_fields)


@dataclass(frozen=True, slots=True)
class KpiResult:
    """Cumulative KPI after folding all supplied documents.

    Attributes:
        value:
            Cumulative metric (``initial`` plus every contribution).
        delta:
            ``value - initial``.
        last_kind:
            Kind of the last processed document; ``UNKNOWN`` for an empty
            sequence.
        contributions:
            Ordered per-document contribution log.
    """

    value: Decimal
    delta: Decimal
    last_kind: DocumentKind
    contributions: tuple[DocumentContribution, ...] = field(default=())

    @property
    def initial(self) -> Decimal:
        """Return the initial value the fold started from."""
        return self.value - self.delta

    def defaulted_contributions(self) -> tuple[DocumentContribution, ...]:
        """Return contributions that relied on at least one defaulted field."""
        return tuple(c for c in self.contributions if c.was_defaulted)


__all__ = ["DocumentContribution", "KpiResult"]
