# src/kpi_attest/application/exceptions.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Application-layer exceptions.

Layer:
    application
"""

from __future__ import annotations

from kpi_attest.domain.exceptions.base import DomainError


class SignerUnavailableError(DomainError):
    """No signing capability is configured for the computing party.

    Raised when an attested computation is requested but the deployment holds
    no signing key. Plain (unsigned) computation remains available.
    """

    code = "SIGNER_UNAVAILABLE"


__all__ = ["SignerUnavailableError"]
