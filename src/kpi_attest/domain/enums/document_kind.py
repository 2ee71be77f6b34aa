# src/kpi_attest/domain/enums/document_kind.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Financial document kinds and contribution statuses.

Purpose:
    Define the closed set of structural shapes a piece of financial evidence
    can match, and the audit status attached to each document's contribution
    to the cumulative KPI.

Layer:
    domain

Notes:
    - Values are string identifiers suitable for JSON and external contracts.
    - Document kinds are derived from structure only, never from a type label
      carried by the document itself.
"""

from __future__ import annotations

from enum import Enum


class DocumentKind(str, Enum):
    """Structural classification of one financial document."""

    JOURNAL_ENTRY = "JournalEntry"
    FIXED_ASSETS_REGISTER = "FixedAssetsRegister"
    PAYROLL_EXPENSE = "PayrollExpense"
    OVERHEAD_REPORT = "OverheadReport"
    UNKNOWN = "Unknown"


class ContributionStatus(str, Enum):
    """Audit status of a single document's contribution.

    CONTRIBUTED:
        Every field the transform read was well-formed.
    ZERO_BY_RULE:
        The document legitimately contributes nothing (unknown shape, no
        revenue credit line, empty asset list).
    ZERO_MISSING_FIELDS:
        The document contributes nothing because required numeric fields were
        missing or malformed and were coerced to zero.
    PARTIAL_DEFAULTS:
        The contribution is non-zero but at least one field was defaulted.
    """

    CONTRIBUTED = "CONTRIBUTED"
    ZERO_BY_RULE = "ZERO_BY_RULE"
    ZERO_MISSING_FIELDS = "ZERO_MISSING_FIELDS"
    PARTIAL_DEFAULTS = "PARTIAL_DEFAULTS"


__all__ = ["ContributionStatus", "DocumentKind"]
