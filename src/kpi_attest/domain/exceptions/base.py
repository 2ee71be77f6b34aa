# src/kpi_attest/domain/exceptions/base.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Root of the KPI Attest exception hierarchy.

Every error the engine raises on purpose derives from :class:`DomainError`,
so the HTTP layer can map it by type and clients can branch on ``code``.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """An expected failure of a KPI or attestation operation.

    Attributes:
        code:
            Stable UPPER_SNAKE_CASE identifier, overridden per subclass.
        message:
            Client-safe description.
        details:
            Diagnostics such as expected/actual widths or hex digests.
    """

    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message or self.code
        self.details: dict[str, Any] = dict(details or {})

    def log_fields(self) -> dict[str, Any]:
        """Return the fields structured log lines attach for this error."""
        return {"error_code": self.code, "error": self.message, "error_details": self.details}

    def __str__(self) -> str:
        return self.message
