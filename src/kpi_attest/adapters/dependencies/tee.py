# src/kpi_attest/adapters/dependencies/tee.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Dependency wiring for the KPI / attestation endpoints.

Overview:
    FastAPI dependency providers that build the domain services from
    :class:`Settings` and hand the routers ready-to-run use cases.

Layer:
    adapters/dependencies

Design:
    * Always return the real use case types.
    * The signing key is loaded once per distinct seed and held only by the
      :class:`Ed25519Signer`; no provider exposes it.
    * Settings come from ``app.state.settings`` (set by ``create_app``).
    * Tests override :func:`get_clock` through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from kpi_attest.application.use_cases.attestation.decode_attestation import DecodeAttestation
from kpi_attest.application.use_cases.attestation.verify_attestation import VerifyAttestation
from kpi_attest.application.use_cases.kpi.compute_attested_kpi import ComputeAttestedKpi
from kpi_attest.application.use_cases.kpi.compute_kpi import ComputeKpi
from kpi_attest.config.settings import Settings, get_settings
from kpi_attest.domain.interfaces.signing import AttestationSigner, Clock
from kpi_attest.domain.services.attestation_builder import AttestationBuilder, wall_clock_ms
from kpi_attest.domain.services.attestation_verifier import (
    AttestationVerifier,
    AttestationVerifierConfig,
)
from kpi_attest.domain.services.kpi_aggregator import KpiAggregator, KpiAggregatorConfig
from kpi_attest.infrastructure.logging.logger import get_json_logger
from kpi_attest.infrastructure.signing.ed25519 import Ed25519Signer, Ed25519SignatureVerifier

logger = get_json_logger(__name__)


def get_settings_dep(request: Request) -> Settings:
    """Resolve the settings the app was created with (process-wide by default)."""
    settings = getattr(request.app.state, "settings", None)
    if isinstance(settings, Settings):
        return settings
    return get_settings()


def get_clock() -> Clock:
    """Return the millisecond clock used to timestamp and verify attestations."""
    return wall_clock_ms


@lru_cache(maxsize=4)
def _load_signer(seed_hex: str) -> Ed25519Signer:
    signer = Ed25519Signer.from_seed_hex(seed_hex)
    logger.info("kpi.signer.loaded", extra={"signer_public_key": signer.public_key.hex()})
    return signer


SettingsDep = Annotated[Settings, Depends(get_settings_dep)]
ClockDep = Annotated[Clock, Depends(get_clock)]


def get_signer(settings: SettingsDep) -> AttestationSigner | None:
    """Return the configured signer, or ``None`` when no key is set."""
    if settings.attestation_signing_key_hex is None:
        return None
    return _load_signer(settings.attestation_signing_key_hex.get_secret_value())


def get_aggregator(settings: SettingsDep) -> KpiAggregator:
    """Build the KPI aggregator from settings."""
    return KpiAggregator(
        KpiAggregatorConfig(
            revenue_account=settings.kpi_revenue_account,
            overhead_allocation_rate=settings.kpi_overhead_allocation_rate,
        )
    )


def get_verifier(settings: SettingsDep, clock: ClockDep) -> AttestationVerifier:
    """Build the attestation verifier from settings."""
    return AttestationVerifier(
        Ed25519SignatureVerifier(),
        config=AttestationVerifierConfig(
            max_age_ms=settings.attestation_max_age_ms,
            clock_skew_tolerance_ms=settings.attestation_clock_skew_tolerance_ms,
        ),
        clock=clock,
    )


# =============================================================================
# Use cases
# =============================================================================


def get_compute_kpi_uc(
    aggregator: Annotated[KpiAggregator, Depends(get_aggregator)],
) -> ComputeKpi:
    """Provide the simple-mode computation use case."""
    return ComputeKpi(aggregator)


def get_compute_attested_kpi_uc(
    aggregator: Annotated[KpiAggregator, Depends(get_aggregator)],
    signer: Annotated[AttestationSigner | None, Depends(get_signer)],
    clock: ClockDep,
) -> ComputeAttestedKpi:
    """Provide the attested computation use case."""
    return ComputeAttestedKpi(AttestationBuilder(aggregator=aggregator, clock=clock), signer)


def get_verify_attestation_uc(
    verifier: Annotated[AttestationVerifier, Depends(get_verifier)],
    clock: ClockDep,
) -> VerifyAttestation:
    """Provide the verification use case."""
    return VerifyAttestation(verifier, clock)


def get_decode_attestation_uc() -> DecodeAttestation:
    """Provide the decode use case."""
    return DecodeAttestation()


__all__ = [
    "get_aggregator",
    "get_clock",
    "get_compute_attested_kpi_uc",
    "get_compute_kpi_uc",
    "get_decode_attestation_uc",
    "get_settings_dep",
    "get_signer",
    "get_verifier",
    "get_verify_attestation_uc",
]
