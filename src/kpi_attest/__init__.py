# src/kpi_attest/__init__.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""KPI Computation & Attestation Engine.

Derives a single financial KPI from a heterogeneous set of parsed financial
documents and binds it to the exact input set, a timestamp and a signer in a
fixed 144-byte attestation that any party can verify independently.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
