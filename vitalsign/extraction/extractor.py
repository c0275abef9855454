# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Vital sign extraction from one frame's OCR output.

Owns the record-level policy:
- ABP must look like "120/80", otherwise the whole record is zeroed
- A missing SpO2 is replaced by the last accepted SpO2 reading

Usage:
    extractor = VitalSignExtractor.from_config(config)
    vitals = extractor.extract(ocr_engine.recognize(frame))
"""

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from vitalsign.extraction.matcher import find_closest_number
from vitalsign.extraction.tokens import classify_tokens, is_blood_pressure
from vitalsign.models.record import (
    ZERO_VALUE,
    LabelSlot,
    RecognizedToken,
    TokenKind,
    VitalSigns,
)

logger = logging.getLogger(__name__)

DEFAULT_LABELS = ("HR", "SpO2", "ABP")


class VitalSignExtractor:
    """Turns recognized tokens into validated HR / SpO2 / ABP values.

    The carried SpO2 value is instance state: it starts at the configured
    default and only ever holds a reading that passed the ABP gate.

    Attributes:
        labels: Label slots looked up each frame
        confidence_threshold: Minimum OCR confidence (0-100)
    """

    def __init__(
        self,
        labels: Sequence[str] = DEFAULT_LABELS,
        confidence_threshold: float = 50,
        default_spo2: str = "81",
        spo2_history_size: int = 10,
        ranges: Optional[Dict[str, Tuple[int, int]]] = None,
    ):
        """Initialize extractor.

        Args:
            labels: Label slots to look up
            confidence_threshold: Tokens below this confidence are ignored
            default_spo2: SpO2 used until a valid reading has been seen
            spo2_history_size: Number of accepted SpO2 readings to keep
            ranges: Optional plausibility ranges keyed by hr, spo2,
                abp_systolic, abp_diastolic
        """
        self.labels = list(labels)
        self.confidence_threshold = confidence_threshold
        self.ranges = ranges or {}
        self._carried_spo2 = default_spo2
        self._spo2_history: deque = deque(maxlen=max(1, spo2_history_size))

    @classmethod
    def from_config(cls, config) -> "VitalSignExtractor":
        """Build an extractor from the vital_signs and ocr config sections."""
        vs = config.vital_signs
        return cls(
            labels=vs.labels,
            confidence_threshold=config.ocr.confidence_threshold,
            default_spo2=str(vs.default_spo2),
            spo2_history_size=vs.spo2_history_size,
            ranges={
                "hr": (vs.hr_min, vs.hr_max),
                "spo2": (vs.spo2_min, vs.spo2_max),
                "abp_systolic": (vs.abp_systolic_min, vs.abp_systolic_max),
                "abp_diastolic": (vs.abp_diastolic_min, vs.abp_diastolic_max),
            },
        )

    @property
    def carried_spo2(self) -> str:
        """Most recent accepted SpO2 (or the configured default)."""
        return self._carried_spo2

    @property
    def spo2_history(self) -> Tuple[str, ...]:
        """Accepted SpO2 readings, oldest first."""
        return tuple(self._spo2_history)

    def match_values(self, tokens: Iterable[RecognizedToken]) -> Dict[str, str]:
        """Run classification and spatial matching without any validation.

        Returns:
            Raw value per label slot ("0" when nothing matched)
        """
        slots = {name: LabelSlot(name) for name in self.labels}
        candidates: List[RecognizedToken] = []

        for tagged in classify_tokens(tokens, self.labels, self.confidence_threshold):
            if tagged.kind == TokenKind.LABEL:
                # Last occurrence of a label wins
                slots[tagged.label].token = tagged.token
            elif tagged.kind == TokenKind.NUMERIC:
                candidates.append(tagged.token)

        return {name: find_closest_number(slot, candidates) for name, slot in slots.items()}

    def extract(self, tokens: Iterable[RecognizedToken]) -> VitalSigns:
        """Extract validated vitals from one frame's tokens.

        Never raises for bad data: an unreadable display gives the zeroed
        record.
        """
        raw = self.match_values(tokens)
        abp = raw.get("ABP", ZERO_VALUE)

        if not is_blood_pressure(abp):
            logger.debug(f"ABP {abp!r} not in systolic/diastolic form, zeroing record")
            return VitalSigns.zeroed()

        spo2 = raw.get("SpO2", ZERO_VALUE)
        if not spo2 or spo2 == ZERO_VALUE:
            logger.debug(f"SpO2 missing, carrying forward {self._carried_spo2}")
            spo2 = self._carried_spo2
        else:
            self._accept_spo2(spo2)

        return VitalSigns(hr=raw.get("HR", ZERO_VALUE), spo2=spo2, abp=abp)

    def _accept_spo2(self, value: str) -> None:
        self._carried_spo2 = value
        self._spo2_history.append(value)

    def range_warnings(self, vitals: VitalSigns) -> List[str]:
        """Report values outside the configured physiological ranges.

        Purely informational: the record itself is never changed.

        Returns:
            Human readable warning per out-of-range value
        """
        if vitals.is_zeroed or not self.ranges:
            return []

        values: Dict[str, Optional[int]] = {
            "hr": _to_int(vitals.hr),
            "spo2": _to_int(vitals.spo2),
        }
        if is_blood_pressure(vitals.abp):
            systolic, diastolic = vitals.abp.split("/")
            values["abp_systolic"] = int(systolic)
            values["abp_diastolic"] = int(diastolic)

        warnings = []
        for name, value in values.items():
            if value is None or name not in self.ranges:
                continue
            low, high = self.ranges[name]
            if value < low or value > high:
                warnings.append(f"{name}={value} outside {low}-{high}")

        for warning in warnings:
            logger.warning(f"Implausible reading: {warning}")
        return warnings


def _to_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
