# src/kpi_attest/application/use_cases/attestation/decode_attestation.py
# Copyright (c) KPI Attest.
# SPDX-License-Identifier: MIT
"""Use case: Decode a hex-encoded attestation record.

Layer:
    application/use_cases
"""

from __future__ import annotations

from kpi_attest.domain.entities.attestation import Attestation
from kpi_attest.domain.exceptions.attestation import MalformedAttestation
from kpi_attest.domain.services.attestation_codec import decode_hex
from kpi_attest.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class DecodeAttestation:
    """Parse a 144-byte attestation without verifying it."""

    def execute(self, attestation_hex: str) -> Attestation:
        """Decode ``attestation_hex``.

        Raises:
            MalformedAttestation: If the text is not hex or not 144 bytes.
        """
        try:
            return decode_hex(attestation_hex)
        except MalformedAttestation as exc:
            logger.info(
                "kpi.attestation.malformed",
                extra=exc.log_fields(),
            )
            raise


__all__ = ["DecodeAttestation"]
