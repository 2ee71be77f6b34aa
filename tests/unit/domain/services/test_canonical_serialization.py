# tests/unit/domain/services/test_canonical_serialization.py
"""Tests for the canonical serialization and input hash."""

from __future__ import annotations

import hashlib
from decimal import Decimal
from typing import Any

import pytest

from kpi_attest.domain.exceptions.attestation import KpiComputationError
from kpi_attest.domain.services.canonical_serialization import (
    canonical_serialization,
    compute_input_hash,
)


def test_keys_are_sorted_and_output_is_compact() -> None:
    documents = [{"b": 1, "a": {"d": [1, 2], "c": "x"}}]
    assert canonical_serialization(documents) == b'[{"a":{"c":"x","d":[1,2]},"b":1}]'


def test_insertion_order_does_not_matter() -> None:
    first = [{"journalEntryId": "J", "credits": []}]
    second = [{"credits": [], "journalEntryId": "J"}]
    assert compute_input_hash(first) == compute_input_hash(second)


def test_sequence_order_matters(revenue_and_payroll: list[dict[str, Any]]) -> None:
    """Permuting documents changes the hash even though the KPI is the same."""
    reversed_docs = list(reversed(revenue_and_payroll))
    assert compute_input_hash(revenue_and_payroll) != compute_input_hash(reversed_docs)


def test_hash_is_sha256_of_serialization(revenue_and_payroll: list[dict[str, Any]]) -> None:
    expected = hashlib.sha256(canonical_serialization(revenue_and_payroll)).digest()
    digest = compute_input_hash(revenue_and_payroll)
    assert digest == expected
    assert len(digest) == 32


def test_non_ascii_is_emitted_as_utf8() -> None:
    assert canonical_serialization([{"name": "Société"}]) == '[{"name":"Société"}]'.encode()


def test_empty_sequence() -> None:
    assert canonical_serialization([]) == b"[]"


def test_decimal_and_tuple_values_are_json_encoded() -> None:
    assert canonical_serialization([{"v": Decimal("1.5"), "t": (1, 2)}]) == b'[{"t":[1,2],"v":1.5}]'


def test_decimals_beyond_float_precision_do_not_collide() -> None:
    """Both values round to the same float; their hashes must still differ."""
    high = [{"amount": Decimal("9007199254740993")}]
    low = [{"amount": Decimal("9007199254740992")}]

    assert compute_input_hash(high) != compute_input_hash(low)
    assert canonical_serialization(high) == b'[{"amount":9007199254740993}]'


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("0.1000000000000000000000001"), b"[0.1000000000000000000000001]"),
        (Decimal("-2.50"), b"[-2.50]"),
        (Decimal("1E+3"), b"[1E+3]"),
        (10**30, b"[1000000000000000000000000000000]"),
        (0.1, b"[0.1]"),
    ],
)
def test_numbers_are_written_as_exact_text(value: Any, expected: bytes) -> None:
    assert canonical_serialization([value]) == expected


def test_integral_decimal_matches_int() -> None:
    assert compute_input_hash([{"v": Decimal(42)}]) == compute_input_hash([{"v": 42}])


@pytest.mark.parametrize("value", [Decimal("NaN"), Decimal("Infinity"), Decimal("-Infinity")])
def test_non_finite_decimals_raise(value: Decimal) -> None:
    with pytest.raises(KpiComputationError):
        compute_input_hash([{"v": value}])


@pytest.mark.parametrize(
    "documents",
    [
        [{"v": float("nan")}],
        [{"v": float("inf")}],
        [{1: "non-string key"}],
        [{"v": b"bytes"}],
        [{"v": object()}],
        [{"v": "\ud800"}],
    ],
)
def test_unserializable_documents_raise(documents: list[Any]) -> None:
    with pytest.raises(KpiComputationError):
        compute_input_hash(documents)


def test_non_sequence_input_raises() -> None:
    with pytest.raises(KpiComputationError):
        canonical_serialization("not a list")  # type: ignore[arg-type]
