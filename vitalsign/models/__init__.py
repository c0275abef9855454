# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Data models for vital sign extraction."""

from vitalsign.models.record import (
    AcquisitionState,
    Classification,
    ClassifiedToken,
    ExtractedRecord,
    LabelSlot,
    RecognizedToken,
    TokenKind,
    UNMATCHED_POSITION,
    VitalSigns,
    ZERO_VALUE,
)

__all__ = [
    "AcquisitionState",
    "Classification",
    "ClassifiedToken",
    "ExtractedRecord",
    "LabelSlot",
    "RecognizedToken",
    "TokenKind",
    "UNMATCHED_POSITION",
    "VitalSigns",
    "ZERO_VALUE",
]
