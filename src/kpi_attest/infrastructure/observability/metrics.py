# src/kpi_attest/infrastructure/observability/metrics.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Prometheus metrics for KPI attestation (registry-aware, hot-reload safe).

Accessors such as :func:`get_attestations_built_total` return a collector
bound to the **current** ``prometheus_client.REGISTRY``:

    - Safe under hot reload and tests that swap the default registry.
    - No duplicate-registration errors.
    - Cache automatically resets when the active registry changes.

Example:
    get_attestations_built_total().inc()
    get_verification_failures_total().labels(kind="Expired").inc()
"""

from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import Final, TypeVar

import prometheus_client as prom
from prometheus_client import Counter, Histogram

_log = logging.getLogger(__name__)

# Aggregation and signing are CPU-only and fast; buckets skew small (seconds).
_BUILD_BUCKETS: Final[tuple[float, ...]] = (
    0.0005,
    0.001,
    0.0025,
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    1.000,
)

_Collector = TypeVar("_Collector", Counter, Histogram)

# Cache keyed by metric name within the currently-active registry.
_registry_id: int | None = None
_cache: dict[str, Counter | Histogram] = {}
_lock = threading.RLock()


# ---------------------------------------------------------------------------
# Registry-handling primitives


def _ensure_registry() -> None:
    """Reset the cache if the active registry changed (common in tests)."""
    global _registry_id
    with _lock:
        rid = id(prom.REGISTRY)
        if _registry_id != rid:
            _cache.clear()
            _registry_id = rid


def _lookup_existing(name: str, kind: type[_Collector]) -> _Collector | None:
    """Return a previously-registered collector of ``kind`` from the active registry."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, kind):
                return col
    return None


def _get_or_create(
    kind: type[_Collector],
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
    buckets: tuple[float, ...] | None = None,
) -> _Collector:
    """Get or create a registry-bound collector with stable identity.

    Strategy:
    1. Return from module cache if present for the active registry.
    2. If the registry already has a collector by this name, reuse it.
    3. Otherwise, register a new collector on the active registry.
    4. If concurrent registration triggers a duplication error, retry step 2.

    Args:
        kind: ``Counter`` or ``Histogram``.
        name: Metric name (snake_case).
        help_text: Human-readable description.
        labelnames: Optional label names tuple.
        buckets: Histogram buckets in seconds (ignored for counters).

    Returns:
        The collector bound to ``prom.REGISTRY``.
    """
    _ensure_registry()
    with _lock:
        cached = _cache.get(name)
        if isinstance(cached, kind):
            return cached

        existing = _lookup_existing(name, kind)
        if existing is not None:
            _cache[name] = existing
            return existing

        try:
            if kind is Histogram:
                collector = Histogram(
                    name,
                    help_text,
                    labelnames,
                    buckets=buckets or _BUILD_BUCKETS,
                    registry=prom.REGISTRY,
                )
            else:
                collector = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, kind)
                if again is not None:
                    _cache[name] = again
                    return again
            _log.exception("Failed to register Prometheus collector %s", name)
            raise
        _cache[name] = collector
        return collector  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Attestation build metrics


def get_attestations_built_total() -> Counter:
    """Return counter for signed attestations produced."""
    return _get_or_create(
        Counter,
        "kpi_attestations_built_total",
        "Total signed KPI attestations produced.",
    )


def get_attestation_build_seconds() -> Histogram:
    """Return histogram for end-to-end attestation build latency.

    Covers aggregation, hashing, scaling and signing.
    """
    return _get_or_create(
        Histogram,
        "kpi_attestation_build_seconds",
        "Latency (seconds) of building a signed KPI attestation.",
        buckets=_BUILD_BUCKETS,
    )


def get_defaulted_fields_total() -> Counter:
    """Return counter for numeric fields substituted with a default.

    Labels:
        kind: Document kind the defaulted field belonged to.
    """
    return _get_or_create(
        Counter,
        "kpi_defaulted_fields_total",
        "Document fields that were missing or malformed and replaced by a default.",
        labelnames=("kind",),
    )


# ---------------------------------------------------------------------------
# Verification metrics


def get_verifications_total() -> Counter:
    """Return counter for attestation verifications.

    Labels:
        outcome: ``valid`` or ``invalid``.
    """
    return _get_or_create(
        Counter,
        "kpi_attestation_verifications_total",
        "Total KPI attestation verifications by outcome.",
        labelnames=("outcome",),
    )


def get_verification_failures_total() -> Counter:
    """Return counter for individual failed verification checks.

    Labels:
        kind: Failure kind (e.g. ``InputSetMismatch``, ``Expired``).
    """
    return _get_or_create(
        Counter,
        "kpi_attestation_verification_failures_total",
        "Failed KPI attestation verification checks by kind.",
        labelnames=("kind",),
    )


__all__ = [
    "get_attestation_build_seconds",
    "get_attestations_built_total",
    "get_defaulted_fields_total",
    "get_verification_failures_total",
    "get_verifications_total",
]
