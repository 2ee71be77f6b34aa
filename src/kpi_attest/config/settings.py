# src/kpi_attest/config/settings.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Environment configuration for KPI Attest.

Summary:
    Typed, validated configuration for the KPI computation and attestation
    service. Only Adapters/Infrastructure read the process environment at
    runtime; the domain receives plain config dataclasses built from this
    object through dependency injection.

Design:
    - Unknown keys in `.env` are rejected rather than ignored.
    - Rate and window fields are range-checked at startup.
    - Signing key is a SecretStr and is never logged.
    - `get_settings()` builds the object once per process.
"""

from __future__ import annotations

import logging
import string
from decimal import Decimal
from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_SEED_HEX_LENGTH = 64


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration for KPI Attest."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment tier this process runs in.",
        validation_alias="ENVIRONMENT",
    )

    log_level: str | None = Field(
        default=None,
        description="Root log level; INFO when unset.",
        validation_alias="LOG_LEVEL",
    )

    docs_url: str | None = Field(
        default="/docs",
        description="Path of the Swagger UI; null hides it.",
        validation_alias="DOCS_URL",
    )
    openapi_url: str | None = Field(
        default="/openapi.json",
        description="Path of the OpenAPI document; null hides it.",
        validation_alias="OPENAPI_URL",
    )

    # ---------------------------
    # KPI aggregation
    # ---------------------------
    kpi_revenue_account: str = Field(
        default="Sales Revenue",
        min_length=1,
        description="Journal credit account whose amounts count as revenue.",
        validation_alias="KPI_REVENUE_ACCOUNT",
    )
    kpi_overhead_allocation_rate: Decimal = Field(
        default=Decimal("0.10"),
        ge=Decimal("0"),
        le=Decimal("1"),
        description="Share of total overhead cost allocated against the KPI.",
        validation_alias="KPI_OVERHEAD_ALLOCATION_RATE",
    )

    # ---------------------------
    # Attestation
    # ---------------------------
    attestation_max_age_ms: int = Field(
        default=60 * 60 * 1000,
        ge=0,
        description="Default maximum accepted attestation age in milliseconds.",
        validation_alias="ATTESTATION_MAX_AGE_MS",
    )
    attestation_clock_skew_tolerance_ms: int = Field(
        default=30_000,
        ge=0,
        description="How far in the future an attestation timestamp may lie (ms).",
        validation_alias="ATTESTATION_CLOCK_SKEW_TOLERANCE_MS",
    )
    attestation_signing_key_hex: SecretStr | None = Field(
        default=None,
        description=(
            "Hex-encoded 32-byte Ed25519 seed for the computing party. When unset, "
            "the service can compute and verify but cannot issue attestations."
        ),
        validation_alias="ATTESTATION_SIGNING_KEY_HEX",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
    )

    @field_validator("attestation_signing_key_hex", mode="after")
    @classmethod
    def _validate_signing_key(cls, value: SecretStr | None) -> SecretStr | None:
        """Require a 64-character hex seed (optional ``0x`` prefix); blank means unset."""
        if value is None:
            return None
        raw = value.get_secret_value().strip()
        if not raw:
            return None
        if raw[:2].lower() == "0x":
            raw = raw[2:]
        if len(raw) != _SEED_HEX_LENGTH or any(c not in string.hexdigits for c in raw):
            raise ValueError(
                "ATTESTATION_SIGNING_KEY_HEX must be 64 hexadecimal characters (32 bytes)."
            )
        return SecretStr(raw)

    @property
    def signing_enabled(self) -> bool:
        """Return True when a signing key is configured."""
        return self.attestation_signing_key_hex is not None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, validated on first use.

    Returns:
        Settings: The cached instance.

    Raises:
        RuntimeError: If the environment does not validate.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.exception("settings.invalid")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    logger.info(
        "Settings initialized",
        extra={
            "environment": settings.environment.value,
            "docs": {"docs_url": settings.docs_url, "openapi_url": settings.openapi_url},
            "kpi": {
                "revenue_account": settings.kpi_revenue_account,
                "overhead_allocation_rate": str(settings.kpi_overhead_allocation_rate),
            },
            "attestation": {
                "max_age_ms": settings.attestation_max_age_ms,
                "clock_skew_tolerance_ms": settings.attestation_clock_skew_tolerance_ms,
                "signing_enabled": settings.signing_enabled,
            },
        },
    )
    return settings


__all__ = ["Environment", "Settings", "get_settings"]
