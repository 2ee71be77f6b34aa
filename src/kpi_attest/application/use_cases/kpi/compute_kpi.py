# src/kpi_attest/application/use_cases/kpi/compute_kpi.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Use case: Compute a KPI without attestation.

Purpose:
    Fold a set of parsed financial documents into the cumulative KPI and
    return the result together with its per-document contribution log.

Layer:
    application/use_cases

Notes:
    - Malformed numeric fields never fail the computation; they are replaced
      by defaults in the domain. This use case makes that visible through a
      warning log and the ``kpi_defaulted_fields_total`` counter.
"""

from __future__ import annotations

from kpi_attest.application.schemas.dto.kpi import ComputeKpiRequest
from kpi_attest.domain.entities.kpi_result import KpiResult
from kpi_attest.domain.services.kpi_aggregator import KpiAggregator
from kpi_attest.infrastructure.logging.logger import get_json_logger
from kpi_attest.infrastructure.observability.metrics import get_defaulted_fields_total

logger = get_json_logger(__name__)


def report_defaulted_fields(result: KpiResult) -> int:
    """Log and count every contribution that relied on default values.

    Args:
        result: Aggregation result to inspect.

    Returns:
        Number of defaulted fields across all contributions.
    """
    total = 0
    counter = get_defaulted_fields_total()
    for contribution in result.defaulted_contributions():
        count = len(contribution.defaulted_fields)
        total += count
        counter.labels(kind=contribution.kind.value).inc(count)
        logger.warning(
            "kpi.document.defaulted_fields",
            extra={
                "document_index": contribution.index,
                "document_kind": contribution.kind.value,
                "status": contribution.status.value,
                "defaulted_fields": list(contribution.defaulted_fields),
            },
        )
    return total


class ComputeKpi:
    """Compute the KPI over a document set (no signing)."""

    def __init__(self, aggregator: KpiAggregator | None = None) -> None:
        self._aggregator = aggregator or KpiAggregator()

    def execute(self, req: ComputeKpiRequest) -> KpiResult:
        """Run the aggregation.

        Raises:
            KpiComputationError: If ``req.initial`` is not a finite number.
        """
        result = self._aggregator.aggregate(req.documents, req.initial)
        defaulted = report_defaulted_fields(result)

        logger.info(
            "kpi.compute.success",
            extra={
                "document_count": len(result.contributions),
                "kpi_value": str(result.value),
                "delta": str(result.delta),
                "last_kind": result.last_kind.value,
                "defaulted_field_count": defaulted,
            },
        )
        return result


__all__ = ["ComputeKpi", "report_defaulted_fields"]
