# src/kpi_attest/infrastructure/http/errors.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Exception handlers producing the canonical error envelope.

Every error leaves the service as::

    {"error": {"code", "http_status", "message", "details", "trace_id"}}

Domain errors are mapped by exception type; the most specific match in
``DOMAIN_ERROR_STATUS`` wins.
"""

from __future__ import annotations

from typing import Any, Final

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.responses import Response

from kpi_attest.application.exceptions import SignerUnavailableError
from kpi_attest.domain.exceptions.attestation import (
    AttestationVerificationError,
    KpiComputationError,
    MalformedAttestation,
)
from kpi_attest.domain.exceptions.base import DomainError
from kpi_attest.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DOMAIN_ERROR_STATUS: Final[tuple[tuple[type[DomainError], int], ...]] = (
    (MalformedAttestation, 400),
    (KpiComputationError, 400),
    (AttestationVerificationError, 422),
    (SignerUnavailableError, 503),
)


def _trace_id(request: Request) -> str | None:
    state = getattr(request, "state", None)
    return getattr(state, "trace_id", None) or getattr(state, "request_id", None)


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    """Build the ``{"error": {...}}`` payload."""
    err: dict[str, Any] = {
        "code": code,
        "http_status": http_status,
        "message": message,
        "details": details or {},
    }
    if trace_id is not None:
        err["trace_id"] = trace_id
    return {"error": err}


def status_for_domain_error(exc: DomainError) -> int:
    """Return the HTTP status for a domain error (400 when unmapped)."""
    for error_type, status in DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 400


async def handle_domain_error(request: Request, exc: DomainError) -> Response:
    """Map :class:`DomainError` subclasses to their envelope and status."""
    status = status_for_domain_error(exc)
    logger.info(
        "http.domain_error",
        extra={**exc.log_fields(), "http_status": status, "path": request.url.path},
    )
    payload = error_envelope(
        code=exc.code,
        http_status=status,
        message=exc.message,
        details=jsonable_encoder(exc.details),
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=status, content=payload)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    """Map request validation failures to ``422 VALIDATION_ERROR``."""
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=422, content=payload)


async def handle_http_exception(request: Request, exc: HTTPException) -> Response:
    """Wrap framework HTTP errors (404, 405, ...) in the envelope."""
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        details=None if isinstance(exc.detail, str) else {"detail": exc.detail},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=payload)


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    """Return ``500 INTERNAL_ERROR`` without leaking internals."""
    logger.exception("http.unhandled_exception", extra={"path": request.url.path})
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=500, content=payload)


def install_exception_handlers(app: FastAPI) -> None:
    """Register every envelope handler on ``app``."""
    app.add_exception_handler(DomainError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unhandled_exception)


__all__ = [
    "DOMAIN_ERROR_STATUS",
    "error_envelope",
    "install_exception_handlers",
    "status_for_domain_error",
]
