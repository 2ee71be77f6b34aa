# src/kpi_attest/adapters/schemas/http/base.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Shared pydantic configuration for `/v1/tee` request and response bodies.

Request bodies reject unknown keys and non-finite numbers; KPI amounts in
responses are already strings (see the presenter), so no float ever reaches
the wire for a monetary value.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseHTTPSchema(BaseModel):
    """Base model for every HTTP body in this service."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
        allow_inf_nan=False,
        use_enum_values=True,
    )
