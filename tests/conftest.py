# tests/conftest.py
"""Shared fixtures: deterministic signer, fixed clock and sample documents."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from kpi_attest.domain.services.attestation_builder import AttestationBuilder
from kpi_attest.domain.services.attestation_verifier import AttestationVerifier
from kpi_attest.infrastructure.signing.ed25519 import Ed25519Signer, Ed25519SignatureVerifier

# Fixed test-only Ed25519 seed. Never use outside tests.
TEST_SEED: bytes = bytes(range(32))
TEST_SEED_HEX: str = TEST_SEED.hex()

# 2023-11-14T22:13:20Z in milliseconds.
FIXED_NOW_MS: int = 1_700_000_000_000


@pytest.fixture()
def signer() -> Ed25519Signer:
    """Ed25519 signer loaded from the fixed test seed."""
    return Ed25519Signer.from_seed(TEST_SEED)


@pytest.fixture()
def fixed_clock() -> Callable[[], int]:
    """Clock that always returns :data:`FIXED_NOW_MS`."""
    return lambda: FIXED_NOW_MS


@pytest.fixture()
def builder(fixed_clock: Callable[[], int]) -> AttestationBuilder:
    """Attestation builder with a fixed clock and default aggregator."""
    return AttestationBuilder(clock=fixed_clock)


@pytest.fixture()
def verifier(fixed_clock: Callable[[], int]) -> AttestationVerifier:
    """Verifier using real Ed25519 and the fixed clock."""
    return AttestationVerifier(Ed25519SignatureVerifier(), clock=fixed_clock)


@pytest.fixture()
def journal_entry() -> dict[str, Any]:
    return {
        "journalEntryId": "JE-2024-001",
        "date": "2024-03-31",
        "debits": [{"account": "Accounts Receivable", "amount": 500000}],
        "credits": [{"account": "Sales Revenue", "amount": 500000}],
    }


@pytest.fixture()
def payroll_expense() -> dict[str, Any]:
    return {
        "payrollPeriod": "2024-03",
        "employeeDetails": [{"employeeId": "E-1"}, {"employeeId": "E-2"}],
        "grossPay": 120000,
    }


@pytest.fixture()
def fixed_assets_register() -> dict[str, Any]:
    return {
        "assetList": [
            {
                "assetID": "FA-001",
                "originalCost": 120000,
                "residualValue": 0,
                "usefulLife_years": 10,
            }
        ]
    }


@pytest.fixture()
def overhead_report() -> dict[str, Any]:
    return {"reportTitle": "Corporate Overhead Report", "totalOverheadCost": 50000}


@pytest.fixture()
def revenue_and_payroll(
    journal_entry: dict[str, Any], payroll_expense: dict[str, Any]
) -> list[dict[str, Any]]:
    """Revenue 500000 less payroll 120000: KPI 380000."""
    return [journal_entry, payroll_expense]


@pytest.fixture()
def now_ms() -> int:
    """The instant returned by ``fixed_clock``."""
    return FIXED_NOW_MS


@pytest.fixture()
def signing_seed_hex() -> str:
    """Hex form of the fixed test seed, as configured through settings."""
    return TEST_SEED_HEX
