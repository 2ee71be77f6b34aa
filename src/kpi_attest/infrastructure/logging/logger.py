# src/kpi_attest/infrastructure/logging/logger.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""JSON log lines for KPI computations and attestation checks.

Each line is one JSON object with ``ts``, ``level``, ``logger`` and
``message`` plus whatever the caller passed through ``extra=``. Attestation
fields are usually bytes and end up as lowercase hex. A request id and trace
id are added from the logging context, which the request-id middleware binds
per HTTP call.

Usage:
    configure_root_logging()
    log = get_json_logger(__name__)
    log.info("kpi.attestation.built", extra={"kpi_value_scaled": 380000000})
"""

from __future__ import annotations

import json
import logging
import os
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, Final

__all__ = [
    "configure_root_logging",
    "get_json_logger",
    "get_request_id",
    "get_trace_id",
    "set_request_context",
]

_REQUEST_ID_ENV_KEY: Final[str] = "REQUEST_ID"
_DEFAULT_LEVEL: Final[str] = "INFO"

_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("kpi_attest_request_id", default=None)
_TRACE_ID_CTX: ContextVar[str | None] = ContextVar("kpi_attest_trace_id", default=None)

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RESERVED: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName", "extra", "request_id", "trace_id"}


def set_request_context(*, request_id: str | None = None, trace_id: str | None = None) -> None:
    """Bind correlation ids to the current context; ``None`` leaves a value as is."""
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if trace_id is not None:
        _TRACE_ID_CTX.set(trace_id)


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


def get_trace_id() -> str | None:
    return _TRACE_ID_CTX.get()


def _json_default(value: Any) -> Any:
    if isinstance(value, bytes | bytearray):
        return bytes(value).hex()
    if isinstance(value, set | frozenset | tuple):
        return list(value)
    # Decimal, enums, datetimes.
    return str(value)


class _JsonFormatter(logging.Formatter):
    """Render a LogRecord as a single compact JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(self._correlation(record))
        payload.update(self._exception(record))
        payload.update(self._extras(record))
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=_json_default)

    @staticmethod
    def _correlation(record: logging.LogRecord) -> dict[str, str]:
        """Request id from the record, the context, then ``REQUEST_ID``; trace id likewise."""
        fields: dict[str, str] = {}
        request_id = (
            getattr(record, "request_id", None)
            or _REQUEST_ID_CTX.get()
            or os.getenv(_REQUEST_ID_ENV_KEY)
        )
        if request_id:
            fields["request_id"] = request_id
        trace_id = getattr(record, "trace_id", None) or _TRACE_ID_CTX.get()
        if trace_id:
            fields["trace_id"] = trace_id
        return fields

    @staticmethod
    def _exception(record: logging.LogRecord) -> dict[str, str]:
        if not record.exc_info:
            return {}
        exc_type, exc_value, _ = record.exc_info
        fields: dict[str, str] = {}
        if exc_type is not None:
            fields["exc_type"] = exc_type.__name__
        if exc_value is not None:
            fields["exc_message"] = str(exc_value)
        return fields

    @staticmethod
    def _extras(record: logging.LogRecord) -> dict[str, Any]:
        """Flat ``extra=`` attributes, then a nested ``extra`` dict on top."""
        fields = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED and not key.startswith("_")
        }
        nested = getattr(record, "extra", None)
        if isinstance(nested, dict):
            fields.update(nested)
        return fields


def configure_root_logging(level: str | int | None = None) -> None:
    """Install the JSON handler on the root logger once and set its level.

    Args:
        level: Level or level name; falls back to ``LOG_LEVEL`` and then INFO.
            Repeated calls only adjust the level.
    """
    root = logging.getLogger()
    resolved = level if level is not None else os.getenv("LOG_LEVEL") or _DEFAULT_LEVEL
    root.setLevel(resolved.upper() if isinstance(resolved, str) else resolved)

    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a named logger that emits through the root JSON handler.

    Call :func:`configure_root_logging` once at startup; this does not.
    """
    return logging.getLogger(name)
