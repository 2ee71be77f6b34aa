# src/kpi_attest/domain/services/kpi_aggregator.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""KPI aggregation engine (domain kernel).

Purpose:
    Fold a sequence of parsed financial documents into a single signed
    cumulative KPI plus a running delta, recording how much each document
    contributed and whether any of its fields had to be defaulted.

Layer:
    domain/services

Notes:
    - Pure domain logic:
        * No logging.
        * No IO or transport concerns.
    - Per-kind transforms:
        * JournalEntry: +amount of the first credit line booked to the
          revenue account (0 when there is no such line).
        * FixedAssetsRegister: -sum((originalCost - residualValue) /
          (usefulLife_years * 12)), straight-line monthly depreciation.
        * PayrollExpense: -grossPay.
        * OverheadReport: -(totalOverheadCost * allocation rate).
        * Unknown: 0.
    - Coerce-missing-to-zero: evidentiary documents are untrusted, so a
      malformed numeric field is replaced by 0 (or 1 year for a useful life)
      instead of aborting the computation. Every substitution is listed in the
      document's :class:`DocumentContribution`.
    - An asset whose monthly charge is not finite or reaches ``MAX_MAGNITUDE``
      (a vanishingly small useful life) is skipped and its useful life listed
      as defaulted.
    - Contributions are quantized to 9 fractional digits and summed exactly,
      so the final value does not depend on document order.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal, DecimalException, localcontext
from typing import Any, Final

from kpi_attest.domain.entities.kpi_result import DocumentContribution, KpiResult
from kpi_attest.domain.enums.document_kind import ContributionStatus, DocumentKind
from kpi_attest.domain.services.document_classifier import (
    ASSET_LIST_FIELD,
    classify,
    is_json_array,
)
from kpi_attest.domain.services.fixed_point import (
    ARITHMETIC_CONTEXT,
    MAX_MAGNITUDE,
    NumberLike,
    coerce_decimal,
    quantize_contribution,
    to_decimal,
)

_ZERO: Final[Decimal] = Decimal(0)
_ONE: Final[Decimal] = Decimal(1)
_MONTHS_PER_YEAR: Final[Decimal] = Decimal(12)


@dataclass(frozen=True, slots=True)
class KpiAggregatorConfig:
    """Configuration for the KPI aggregator.

    Attributes:
        revenue_account:
            Account label of the credit line counted as revenue in journal
            entries.
        overhead_allocation_rate:
            Share of a corporate overhead report's total cost allocated to
            the KPI (fixed 10% policy by default).
    """

    revenue_account: str = "Sales Revenue"
    overhead_allocation_rate: Decimal = Decimal("0.10")


class _FieldReader:
    """Reads numeric fields from one document and remembers what was defaulted."""

    def __init__(self) -> None:
        self.defaulted: list[str] = []

    def number(self, container: Mapping[str, Any], key: str, path: str) -> Decimal:
        value = coerce_decimal(container.get(key))
        if value is None:
            self.defaulted.append(path)
            return _ZERO
        return value

    def useful_life_years(self, asset: Mapping[str, Any], path: str) -> Decimal:
        value = coerce_decimal(asset.get("usefulLife_years"))
        if value is None or value <= 0:
            # A zero or missing life would divide by zero; one year is the floor.
            self.defaulted.append(path)
            return _ONE
        return value

    def mark(self, path: str) -> None:
        self.defaulted.append(path)


# (amount, zero_by_rule)
_TransformResult = tuple[Decimal, bool]


class KpiAggregator:
    """Pure domain KPI aggregator."""

    def __init__(self, config: KpiAggregatorConfig | None = None) -> None:
        """Initialize the aggregator.

        Args:
            config:
                Optional configuration. When omitted, defaults are used.
        """
        self._config = config or KpiAggregatorConfig()
        self._transforms: dict[
            DocumentKind, Callable[[Mapping[str, Any], _FieldReader], _TransformResult]
        ] = {
            DocumentKind.JOURNAL_ENTRY: self._journal_entry,
            DocumentKind.FIXED_ASSETS_REGISTER: self._fixed_assets,
            DocumentKind.PAYROLL_EXPENSE: self._payroll,
            DocumentKind.OVERHEAD_REPORT: self._overhead,
        }

    @property
    def config(self) -> KpiAggregatorConfig:
        """Return the active configuration."""
        return self._config

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    def aggregate(self, documents: Sequence[object], initial: NumberLike = 0) -> KpiResult:
        """Fold documents left-to-right into a cumulative KPI.

        Args:
            documents:
                Parsed financial documents, in evidence order.
            initial:
                Value the fold starts from.

        Returns:
            A :class:`KpiResult` whose ``contributions`` mirror ``documents``
            one-to-one.

        Raises:
            KpiComputationError: If ``initial`` is not a finite number.
        """
        start = to_decimal(initial, field="initial")
        running = start
        last_kind = DocumentKind.UNKNOWN
        contributions: list[DocumentContribution] = []

        with localcontext(ARITHMETIC_CONTEXT):
            for index, document in enumerate(documents):
                contribution = self.contribution_of(document, index=index)
                running += contribution.amount
                last_kind = contribution.kind
                contributions.append(contribution)

            delta = running - start

        return KpiResult(
            value=running,
            delta=delta,
            last_kind=last_kind,
            contributions=tuple(contributions),
        )

    def contribution_of(self, document: object, *, index: int = 0) -> DocumentContribution:
        """Classify one document and compute its signed contribution.

        Args:
            document:
                Parsed financial document.
            index:
                Position of the document in its sequence (for the audit log).

        Returns:
            The document's :class:`DocumentContribution`.
        """
        kind = classify(document)
        transform = self._transforms.get(kind)
        if transform is None or not isinstance(document, Mapping):
            return DocumentContribution(
                index=index,
                kind=kind,
                amount=quantize_contribution(_ZERO),
                status=ContributionStatus.ZERO_BY_RULE,
            )

        reader = _FieldReader()
        with localcontext(ARITHMETIC_CONTEXT):
            raw_amount, zero_by_rule = transform(document, reader)
            amount = quantize_contribution(raw_amount)

        return DocumentContribution(
            index=index,
            kind=kind,
            amount=amount,
            status=_status_for(amount, zero_by_rule=zero_by_rule, defaulted=reader.defaulted),
            defaulted_fields=tuple(reader.defaulted),
        )

    # ------------------------------------------------------------------ #
    # Per-kind transforms                                                #
    # ------------------------------------------------------------------ #

    def _journal_entry(self, document: Mapping[str, Any], reader: _FieldReader) -> _TransformResult:
        """Revenue credit line amount; 0 when no such line exists."""
        credits = document.get("credits")
        if credits is None:
            return _ZERO, True
        if not is_json_array(credits):
            reader.mark("credits")
            return _ZERO, False

        for position, line in enumerate(credits):
            if isinstance(line, Mapping) and line.get("account") == self._config.revenue_account:
                return reader.number(line, "amount", f"credits[{position}].amount"), False
        return _ZERO, True

    def _fixed_assets(self, document: Mapping[str, Any], reader: _FieldReader) -> _TransformResult:
        """Negative sum of straight-line monthly depreciation over all assets."""
        assets = document.get(ASSET_LIST_FIELD)
        total = _ZERO
        for position, asset in enumerate(assets if is_json_array(assets) else ()):
            path = f"{ASSET_LIST_FIELD}[{position}]"
            if not isinstance(asset, Mapping):
                reader.mark(path)
                continue
            cost = reader.number(asset, "originalCost", f"{path}.originalCost")
            residual = reader.number(asset, "residualValue", f"{path}.residualValue")
            life_path = f"{path}.usefulLife_years"
            life = reader.useful_life_years(asset, life_path)
            monthly = _monthly_depreciation(cost, residual, life)
            if monthly is None:
                # A vanishing life drives the charge out of range; skip the asset.
                reader.mark(life_path)
                continue
            total += monthly
        return -total, False

    def _payroll(self, document: Mapping[str, Any], reader: _FieldReader) -> _TransformResult:
        return -reader.number(document, "grossPay", "grossPay"), False

    def _overhead(self, document: Mapping[str, Any], reader: _FieldReader) -> _TransformResult:
        overhead = reader.number(document, "totalOverheadCost", "totalOverheadCost")
        return -(overhead * self._config.overhead_allocation_rate), False


def _monthly_depreciation(cost: Decimal, residual: Decimal, life: Decimal) -> Decimal | None:
    """Straight-line monthly charge, or None when it is not a bounded finite number."""
    try:
        monthly = (cost - residual) / (life * _MONTHS_PER_YEAR)
    except DecimalException:
        return None
    if abs(monthly) >= MAX_MAGNITUDE:
        return None
    return monthly


def _status_for(amount: Decimal, *, zero_by_rule: bool, defaulted: Sequence[str]) -> ContributionStatus:
    """Derive the audit status of a contribution."""
    if defaulted:
        if amount == 0:
            return ContributionStatus.ZERO_MISSING_FIELDS
        return ContributionStatus.PARTIAL_DEFAULTS
    if zero_by_rule:
        return ContributionStatus.ZERO_BY_RULE
    return ContributionStatus.CONTRIBUTED


_DEFAULT_AGGREGATOR: Final[KpiAggregator] = KpiAggregator()


def aggregate(documents: Sequence[object], initial: NumberLike = 0) -> KpiResult:
    """Aggregate documents with the default configuration.

    See :meth:`KpiAggregator.aggregate`.
    """
    return _DEFAULT_AGGREGATOR.aggregate(documents, initial)


__all__ = ["KpiAggregator", "KpiAggregatorConfig", "aggregate"]
