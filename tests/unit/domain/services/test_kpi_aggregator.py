# tests/unit/domain/services/test_kpi_aggregator.py
"""Tests for the KPI aggregation engine."""

from __future__ import annotations

import itertools
from decimal import Decimal
from typing import Any

import pytest

from kpi_attest.domain.enums.document_kind import ContributionStatus, DocumentKind
from kpi_attest.domain.exceptions.attestation import KpiComputationError
from kpi_attest.domain.services.kpi_aggregator import (
    KpiAggregator,
    KpiAggregatorConfig,
    aggregate,
)


def test_revenue_less_payroll(revenue_and_payroll: list[dict[str, Any]]) -> None:
    """500000 revenue minus 120000 payroll yields 380000."""
    result = aggregate(revenue_and_payroll)

    assert result.value == Decimal(380000)
    assert result.delta == Decimal(380000)
    assert result.initial == Decimal(0)
    assert result.last_kind is DocumentKind.PAYROLL_EXPENSE
    assert [c.amount for c in result.contributions] == [Decimal(500000), Decimal(-120000)]
    assert all(c.status is ContributionStatus.CONTRIBUTED for c in result.contributions)


def test_all_four_kinds(
    journal_entry: dict[str, Any],
    payroll_expense: dict[str, Any],
    fixed_assets_register: dict[str, Any],
    overhead_report: dict[str, Any],
) -> None:
    """500000 - 120000 - 120000/120 - 50000*0.1 = 374000."""
    result = aggregate([journal_entry, payroll_expense, fixed_assets_register, overhead_report])

    assert result.value == Decimal(374000)
    amounts = {c.kind: c.amount for c in result.contributions}
    assert amounts[DocumentKind.FIXED_ASSETS_REGISTER] == Decimal(-1000)
    assert amounts[DocumentKind.OVERHEAD_REPORT] == Decimal(-5000)
    assert result.last_kind is DocumentKind.OVERHEAD_REPORT


def test_unknown_shape_contributes_zero() -> None:
    """An unrecognized document leaves the KPI unchanged."""
    result = aggregate([{"reportTitle": "Quarterly Marketing Report", "spend": 9999}])

    assert result.value == 0
    assert result.delta == 0
    assert result.last_kind is DocumentKind.UNKNOWN
    (contribution,) = result.contributions
    assert contribution.kind is DocumentKind.UNKNOWN
    assert contribution.status is ContributionStatus.ZERO_BY_RULE
    assert contribution.defaulted_fields == ()


def test_empty_input_keeps_initial() -> None:
    result = aggregate([], initial=250)

    assert result.value == Decimal(250)
    assert result.delta == 0
    assert result.last_kind is DocumentKind.UNKNOWN
    assert result.contributions == ()


def test_initial_value_shifts_value_but_not_delta(
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    result = aggregate(revenue_and_payroll, initial="1000.5")

    assert result.value == Decimal("381000.5")
    assert result.delta == Decimal(380000)
    assert result.initial == Decimal("1000.5")


@pytest.mark.parametrize("initial", [float("nan"), float("inf"), "abc", None, True])
def test_malformed_initial_is_rejected(initial: Any) -> None:
    with pytest.raises(KpiComputationError):
        aggregate([], initial=initial)


def test_value_is_independent_of_document_order(
    journal_entry: dict[str, Any],
    payroll_expense: dict[str, Any],
    fixed_assets_register: dict[str, Any],
    overhead_report: dict[str, Any],
) -> None:
    """Every permutation yields the same value, including repeating decimals."""
    thirds = {
        "assetList": [
            {"assetID": "A", "originalCost": 1000, "residualValue": 0, "usefulLife_years": 3},
            {"assetID": "B", "originalCost": "0.1", "residualValue": 0.05, "usefulLife_years": 7},
        ]
    }
    documents = [journal_entry, payroll_expense, fixed_assets_register, overhead_report, thirds]
    values = {aggregate(list(p)).value for p in itertools.permutations(documents)}
    assert len(values) == 1


def test_journal_entry_without_revenue_line_is_zero_by_rule() -> None:
    document = {"journalEntryId": "JE-2", "credits": [{"account": "Cash", "amount": 10}]}
    (contribution,) = aggregate([document]).contributions

    assert contribution.amount == 0
    assert contribution.status is ContributionStatus.ZERO_BY_RULE


def test_journal_entry_uses_first_revenue_line_only() -> None:
    document = {
        "journalEntryId": "JE-3",
        "credits": [
            {"account": "Cash", "amount": 1},
            {"account": "Sales Revenue", "amount": 700},
            {"account": "Sales Revenue", "amount": 300},
        ],
    }
    assert aggregate([document]).value == Decimal(700)


def test_journal_entry_without_credits_is_zero_by_rule() -> None:
    (contribution,) = aggregate([{"journalEntryId": "JE-4"}]).contributions

    assert contribution.status is ContributionStatus.ZERO_BY_RULE
    assert contribution.defaulted_fields == ()


def test_journal_entry_with_non_array_credits_is_defaulted() -> None:
    (contribution,) = aggregate([{"journalEntryId": "JE-5", "credits": "oops"}]).contributions

    assert contribution.amount == 0
    assert contribution.status is ContributionStatus.ZERO_MISSING_FIELDS
    assert contribution.defaulted_fields == ("credits",)


@pytest.mark.parametrize("amount", [None, "not-a-number", float("nan"), True, [1], {"v": 1}])
def test_malformed_revenue_amount_is_coerced_to_zero(amount: Any) -> None:
    """Malformed numbers never abort the computation; they are recorded."""
    document = {"journalEntryId": "JE-6", "credits": [{"account": "Sales Revenue", "amount": amount}]}
    (contribution,) = aggregate([document]).contributions

    assert contribution.amount == 0
    assert contribution.status is ContributionStatus.ZERO_MISSING_FIELDS
    assert contribution.defaulted_fields == ("credits[0].amount",)
    assert contribution.was_defaulted


def test_numeric_strings_are_accepted() -> None:
    document = {"journalEntryId": "JE-7", "credits": [{"account": "Sales Revenue", "amount": " 12.5 "}]}
    (contribution,) = aggregate([document]).contributions

    assert contribution.amount == Decimal("12.5")
    assert contribution.status is ContributionStatus.CONTRIBUTED


def test_payroll_with_missing_gross_pay() -> None:
    (contribution,) = aggregate([{"employeeDetails": []}]).contributions

    assert contribution.kind is DocumentKind.PAYROLL_EXPENSE
    assert contribution.amount == 0
    assert contribution.status is ContributionStatus.ZERO_MISSING_FIELDS
    assert contribution.defaulted_fields == ("grossPay",)


@pytest.mark.parametrize("useful_life", [None, 0, -5, "n/a"])
def test_fixed_asset_useful_life_defaults_to_one_year(useful_life: Any) -> None:
    """A missing or non-positive life falls back to one year (12 months)."""
    asset: dict[str, Any] = {"assetID": "A", "originalCost": 1200, "residualValue": 0}
    if useful_life is not None:
        asset["usefulLife_years"] = useful_life
    (contribution,) = aggregate([{"assetList": [asset]}]).contributions

    assert contribution.amount == Decimal(-100)
    assert contribution.status is ContributionStatus.PARTIAL_DEFAULTS
    assert contribution.defaulted_fields == ("assetList[0].usefulLife_years",)


@pytest.mark.parametrize(
    ("original_cost", "useful_life"),
    [
        ("9e29", "1e-25"),
        (100, "1e-999990"),
        (100, "1e-9999999"),
    ],
)
def test_vanishing_useful_life_skips_the_asset(original_cost: Any, useful_life: str) -> None:
    """A tiny life would blow the monthly charge past any bound; the asset is skipped."""
    asset = {
        "assetID": "A",
        "originalCost": original_cost,
        "residualValue": 0,
        "usefulLife_years": useful_life,
    }
    result = aggregate([{"assetList": [asset]}])

    (contribution,) = result.contributions
    assert result.value == 0
    assert contribution.amount == 0
    assert contribution.status is ContributionStatus.ZERO_MISSING_FIELDS
    assert contribution.defaulted_fields == ("assetList[0].usefulLife_years",)


def test_vanishing_useful_life_keeps_other_assets() -> None:
    document = {
        "assetList": [
            {"assetID": "A", "originalCost": "9e29", "residualValue": 0, "usefulLife_years": "1e-25"},
            {"assetID": "B", "originalCost": 1200, "residualValue": 0, "usefulLife_years": 1},
        ]
    }
    (contribution,) = aggregate([document]).contributions

    assert contribution.amount == Decimal(-100)
    assert contribution.status is ContributionStatus.PARTIAL_DEFAULTS
    assert contribution.defaulted_fields == ("assetList[0].usefulLife_years",)


def test_fixed_assets_sum_over_all_assets_and_skip_non_objects() -> None:
    document = {
        "assetList": [
            {"assetID": "A", "originalCost": 2400, "residualValue": 0, "usefulLife_years": 1},
            "garbage",
            {"assetID": "B", "originalCost": 1200, "residualValue": 600, "usefulLife_years": 5},
        ]
    }
    (contribution,) = aggregate([document]).contributions

    assert contribution.amount == Decimal(-210)
    assert contribution.defaulted_fields == ("assetList[1]",)
    assert contribution.status is ContributionStatus.PARTIAL_DEFAULTS


def test_repeating_depreciation_is_quantized() -> None:
    document = {
        "assetList": [
            {"assetID": "A", "originalCost": 1000, "residualValue": 0, "usefulLife_years": 3}
        ]
    }
    (contribution,) = aggregate([document]).contributions
    assert contribution.amount == Decimal("-27.777777778")


def test_overhead_missing_cost_is_defaulted() -> None:
    (contribution,) = aggregate([{"reportTitle": "Corporate Overhead Report"}]).contributions

    assert contribution.amount == 0
    assert contribution.defaulted_fields == ("totalOverheadCost",)


def test_configurable_revenue_account_and_overhead_rate(overhead_report: dict[str, Any]) -> None:
    aggregator = KpiAggregator(
        KpiAggregatorConfig(revenue_account="Service Revenue", overhead_allocation_rate=Decimal("0.25"))
    )
    journal = {"journalEntryId": "J", "credits": [{"account": "Service Revenue", "amount": 100}]}
    result = aggregator.aggregate([journal, overhead_report])

    assert result.value == Decimal(100) - Decimal(12500)


def test_non_mapping_documents_are_unknown_contributions() -> None:
    result = aggregate([None, 7, "text", [1, 2]])

    assert result.value == 0
    assert {c.kind for c in result.contributions} == {DocumentKind.UNKNOWN}
    assert [c.index for c in result.contributions] == [0, 1, 2, 3]


def test_defaulted_contributions_lists_only_defaulted(
    revenue_and_payroll: list[dict[str, Any]],
) -> None:
    result = aggregate([*revenue_and_payroll, {"employeeDetails": {}, "grossPay": "?"}])

    defaulted = result.defaulted_contributions()
    assert [c.index for c in defaulted] == [2]
