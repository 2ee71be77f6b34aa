# src/kpi_attest/infrastructure/middleware/request_id.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Correlates each HTTP call with its log lines and error envelope.

An incoming ``X-Request-ID`` is kept when it is a short token of safe
characters; anything else is replaced by a fresh UUID4. The id is stored on
``request.state``, bound to the logging context and echoed on the response.
Error envelopes report it as ``trace_id``, so a rejected verification can be
matched to the ``kpi.attestation.rejected`` line that explains it.
"""

from __future__ import annotations

import re
import uuid
from typing import Final

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from kpi_attest.infrastructure.logging.logger import set_request_context

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
_TOKEN: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9._:@-]{1,128}")


def coerce_request_id(raw: str | None) -> str:
    """Return ``raw`` if it is a safe correlation token, else a new UUID4."""
    if raw is not None and _TOKEN.fullmatch(raw):
        return raw
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind ``X-Request-ID`` to the request, the log context and the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = coerce_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id=request_id)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


__all__ = ["REQUEST_ID_HEADER", "RequestIdMiddleware", "coerce_request_id"]
