# src/kpi_attest/domain/services/fixed_point.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Decimal coercion and fixed-point scaling helpers.

Purpose:
    Centralize how untrusted numeric fields become ``Decimal`` values and how
    a KPI value becomes the signed 64-bit "scaled value" carried on the wire.

Layer:
    domain/services

Notes:
    - Accepted numeric inputs: ``int``, finite ``float`` (via its shortest
      repr), finite ``Decimal`` and strings that parse to a finite decimal.
      ``bool``, ``None``, containers, NaN/Infinity and magnitudes at or above
      ``MAX_MAGNITUDE`` are malformed.
    - Arithmetic runs in :data:`ARITHMETIC_CONTEXT`, which is wide enough that
      sums of quantized contributions are exact and therefore order-independent.
"""

from __future__ import annotations

from decimal import (
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)
from typing import Final

from kpi_attest.domain.entities.attestation import I64_MAX, I64_MIN
from kpi_attest.domain.exceptions.attestation import KpiComputationError

SCALE_FACTOR: Final[Decimal] = Decimal(1000)
CONTRIBUTION_QUANTUM: Final[Decimal] = Decimal("1e-9")
MAX_MAGNITUDE: Final[Decimal] = Decimal("1e30")

ARITHMETIC_CONTEXT: Final[Context] = Context(
    prec=60,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

NumberLike = Decimal | int | float | str


def coerce_decimal(raw: object) -> Decimal | None:
    """Return ``raw`` as a finite, bounded Decimal, or None when malformed."""
    if isinstance(raw, bool):
        return None

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        value = Decimal(repr(raw))
    elif isinstance(raw, str):
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not value.is_finite() or abs(value) >= MAX_MAGNITUDE:
        return None
    return value


def to_decimal(raw: NumberLike, *, field: str = "value") -> Decimal:
    """Strictly convert a caller-supplied number, raising on malformed input.

    Args:
        raw:
            Number supplied by a caller (initial value, expected KPI value).
        field:
            Name used in the error details.

    Raises:
        KpiComputationError: If ``raw`` is not a finite, bounded number.
    """
    value = coerce_decimal(raw)
    if value is None:
        raise KpiComputationError(
            f"{field} must be a finite number with magnitude below {MAX_MAGNITUDE}.",
            details={"field": field, "value": repr(raw)},
        )
    return value


def quantize_contribution(amount: Decimal) -> Decimal:
    """Quantize a per-document contribution to the internal fixed precision."""
    quantized = amount.quantize(
        CONTRIBUTION_QUANTUM, rounding=ROUND_HALF_EVEN, context=ARITHMETIC_CONTEXT
    )
    # plus() folds negative zero into zero.
    return ARITHMETIC_CONTEXT.plus(quantized)


def scale_kpi_value(value: NumberLike) -> int:
    """Return ``round(value * 1000)`` as a signed 64-bit integer.

    Halves round away from zero.

    Raises:
        KpiComputationError: If the value is malformed or the scaled result
            does not fit a signed 64-bit integer.
    """
    decimal_value = to_decimal(value, field="kpi_value")
    scaled = ARITHMETIC_CONTEXT.multiply(decimal_value, SCALE_FACTOR)
    rounded = int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP, context=ARITHMETIC_CONTEXT))
    if not I64_MIN <= rounded <= I64_MAX:
        raise KpiComputationError(
            "Scaled KPI value does not fit a signed 64-bit integer.",
            details={"kpi_value": str(decimal_value), "scaled": rounded},
        )
    return rounded


def unscale_kpi_value(scaled: int) -> Decimal:
    """Return the KPI value represented by a scaled integer."""
    return Decimal(scaled) / SCALE_FACTOR


__all__ = [
    "ARITHMETIC_CONTEXT",
    "CONTRIBUTION_QUANTUM",
    "MAX_MAGNITUDE",
    "SCALE_FACTOR",
    "NumberLike",
    "coerce_decimal",
    "quantize_contribution",
    "scale_kpi_value",
    "to_decimal",
    "unscale_kpi_value",
]
