# src/kpi_attest/domain/services/canonical_serialization.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Canonical serialization and digest of an input document sequence.

Purpose:
    Bind an attestation to the literal evidence set. The serialization below is
    a compatibility contract: independent implementations must produce the
    same bytes for the same logical documents, or their attestations will not
    cross-verify.

Layer:
    domain/services

Notes:
    - UTF-8 JSON of the document list, object keys sorted at every depth,
      separators ``(",", ":")``, non-ASCII emitted verbatim, NaN/Infinity
      rejected.
    - The sequence order is preserved: permutations of the same documents
      deliberately hash differently, since the goal is reproducibility of one
      specific computation rather than set equality.
    - Numbers are written as their exact JSON number text: ``int`` in full,
      ``float`` as its shortest repr and ``Decimal`` with its own digits and
      exponent, so two Decimals that differ in any digit never collide. Tuples
      are encoded as arrays. Anything else that is not JSON raises
      :class:`KpiComputationError`.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from kpi_attest.domain.exceptions.attestation import KpiComputationError


def _number_text(value: int | float | Decimal, path: str) -> str:
    """Return the JSON number text of a finite number."""
    if isinstance(value, int):
        return int.__repr__(value)
    if not (value.is_finite() if isinstance(value, Decimal) else math.isfinite(value)):
        raise KpiComputationError(
            "Documents contain a non-finite number.",
            details={"path": path, "value": repr(value)},
        )
    if isinstance(value, Decimal):
        # Exact digits and exponent; ``str`` of a finite Decimal is valid JSON.
        return str(value)
    return float.__repr__(value)


def _write(value: Any, path: str, out: list[str]) -> None:
    """Append the canonical JSON text of ``value`` to ``out``."""
    if value is None:
        out.append("null")
    elif value is True:
        out.append("true")
    elif value is False:
        out.append("false")
    elif isinstance(value, str):
        out.append(json.dumps(value, ensure_ascii=False))
    elif isinstance(value, int | float | Decimal):
        out.append(_number_text(value, path))
    elif isinstance(value, Mapping):
        for key in value:
            if not isinstance(key, str):
                raise KpiComputationError(
                    "Document object keys must be strings.",
                    details={"path": path, "key_type": type(key).__name__},
                )
        out.append("{")
        for position, key in enumerate(sorted(value)):
            if position:
                out.append(",")
            out.append(json.dumps(key, ensure_ascii=False))
            out.append(":")
            _write(value[key], f"{path}.{key}", out)
        out.append("}")
    elif isinstance(value, Sequence) and not isinstance(value, bytes | bytearray):
        out.append("[")
        for position, item in enumerate(value):
            if position:
                out.append(",")
            _write(item, f"{path}[{position}]", out)
        out.append("]")
    else:
        raise KpiComputationError(
            "Document contains a value that is not representable as JSON.",
            details={"path": path, "type": type(value).__name__},
        )


def canonical_serialization(documents: Sequence[object]) -> bytes:
    """Return the canonical UTF-8 JSON bytes of a document sequence.

    Args:
        documents:
            Parsed documents in evidence order.

    Raises:
        KpiComputationError: If any document holds a value that has no JSON
            representation (NaN, Infinity, bytes, non-string keys, objects).
    """
    if isinstance(documents, str | bytes | bytearray) or not isinstance(documents, Sequence):
        raise KpiComputationError(
            "Documents must be supplied as a sequence.",
            details={"type": type(documents).__name__},
        )

    out: list[str] = []
    _write(documents, "", out)
    try:
        return "".join(out).encode("utf-8")
    except UnicodeEncodeError as exc:
        raise KpiComputationError(
            "Documents contain text that is not valid Unicode.",
            details={"reason": str(exc)},
        ) from exc


def compute_input_hash(documents: Sequence[object]) -> bytes:
    """Return the 32-byte SHA-256 digest of the canonical serialization."""
    return hashlib.sha256(canonical_serialization(documents)).digest()


__all__ = ["canonical_serialization", "compute_input_hash"]
