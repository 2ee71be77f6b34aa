# src/kpi_attest/domain/services/document_classifier.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Structural classifier for financial documents.

Purpose:
    Determine which financial-statement shape an arbitrary parsed document
    matches. Documents come from independent, untrusted parties, so the kind is
    derived from field presence only and never from a self-declared type label.

Layer:
    domain/services

Notes:
    - Pure and total: unmatched or non-mapping inputs yield ``UNKNOWN``.
    - Shapes are not mutually exclusive in adversarial input, so the guard
      order below is part of the contract. First match wins.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Final

from kpi_attest.domain.enums.document_kind import DocumentKind

JOURNAL_ENTRY_ID_FIELD: Final[str] = "journalEntryId"
ASSET_LIST_FIELD: Final[str] = "assetList"
ASSET_ID_FIELD: Final[str] = "assetID"
EMPLOYEE_DETAILS_FIELD: Final[str] = "employeeDetails"
REPORT_TITLE_FIELD: Final[str] = "reportTitle"
OVERHEAD_REPORT_TITLE: Final[str] = "Corporate Overhead Report"


def _is_journal_entry(document: Mapping[str, Any]) -> bool:
    return JOURNAL_ENTRY_ID_FIELD in document


def _is_fixed_assets_register(document: Mapping[str, Any]) -> bool:
    assets = document.get(ASSET_LIST_FIELD)
    if not is_json_array(assets) or not assets:
        return False
    first = assets[0]
    return isinstance(first, Mapping) and ASSET_ID_FIELD in first


def _is_payroll_expense(document: Mapping[str, Any]) -> bool:
    return EMPLOYEE_DETAILS_FIELD in document


def _is_overhead_report(document: Mapping[str, Any]) -> bool:
    return document.get(REPORT_TITLE_FIELD) == OVERHEAD_REPORT_TITLE


# Priority order matters.
_SHAPE_GUARDS: Final[tuple[tuple[DocumentKind, Callable[[Mapping[str, Any]], bool]], ...]] = (
    (DocumentKind.JOURNAL_ENTRY, _is_journal_entry),
    (DocumentKind.FIXED_ASSETS_REGISTER, _is_fixed_assets_register),
    (DocumentKind.PAYROLL_EXPENSE, _is_payroll_expense),
    (DocumentKind.OVERHEAD_REPORT, _is_overhead_report),
)


def is_json_array(value: object) -> bool:
    """Return True for list-like JSON arrays (strings and bytes excluded)."""
    return isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray)


def classify(document: object) -> DocumentKind:
    """Classify a parsed document by its structural shape.

    Args:
        document:
            Arbitrary parsed value, normally a JSON object.

    Returns:
        The first matching :class:`DocumentKind`, or ``UNKNOWN``.
    """
    if not isinstance(document, Mapping):
        return DocumentKind.UNKNOWN

    for kind, guard in _SHAPE_GUARDS:
        if guard(document):
            return kind
    return DocumentKind.UNKNOWN


__all__ = [
    "ASSET_ID_FIELD",
    "ASSET_LIST_FIELD",
    "EMPLOYEE_DETAILS_FIELD",
    "JOURNAL_ENTRY_ID_FIELD",
    "OVERHEAD_REPORT_TITLE",
    "REPORT_TITLE_FIELD",
    "classify",
    "is_json_array",
]
