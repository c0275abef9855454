# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Data models for vital sign extraction."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# Value used for every vital when a frame could not be read
ZERO_VALUE = "0"


class TokenKind(Enum):
    """Classification of a recognized OCR token."""

    LABEL = "label"  # One of the configured vital sign labels
    NUMERIC = "numeric"  # Plausible value, e.g. "120/80"
    NOISE = "noise"  # Everything else


class AcquisitionState(Enum):
    """Video acquisition state machine states."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    RECONNECTING = "reconnecting"
    FAILED = "failed"  # Terminal, reconnect budget exhausted


@dataclass(frozen=True)
class RecognizedToken:
    """One word recognized by the OCR engine.

    Attributes:
        text: Recognized text
        confidence: Engine confidence, 0-100
        bbox: Bounding box as (x, y, w, h) in frame pixels
    """

    text: str
    confidence: float
    bbox: Tuple[int, int, int, int]

    @property
    def center(self) -> Tuple[float, float]:
        """Center point of the bounding box."""
        x, y, w, h = self.bbox
        return (x + w / 2.0, y + h / 2.0)


@dataclass(frozen=True)
class ClassifiedToken:
    """A recognized token tagged with its role in the layout."""

    kind: TokenKind
    token: RecognizedToken
    label: Optional[str] = None  # Label slot name, only for TokenKind.LABEL


@dataclass(frozen=True)
class VitalSigns:
    """HR / SpO2 / ABP values extracted from one frame."""

    hr: str = ZERO_VALUE
    spo2: str = ZERO_VALUE
    abp: str = ZERO_VALUE

    @classmethod
    def zeroed(cls) -> "VitalSigns":
        """Record used when the display could not be read."""
        return cls(hr=ZERO_VALUE, spo2=ZERO_VALUE, abp=ZERO_VALUE)

    @property
    def is_zeroed(self) -> bool:
        return self.hr == ZERO_VALUE and self.spo2 == ZERO_VALUE and self.abp == ZERO_VALUE


@dataclass(frozen=True)
class Classification:
    """One ranked label/score pair from the ECG classifier."""

    label: str
    score: float


@dataclass(frozen=True)
class ExtractedRecord:
    """One sampled frame's result, as handed to the sinks."""

    timestamp: datetime = field(default_factory=datetime.now)
    hr: str = ZERO_VALUE
    spo2: str = ZERO_VALUE
    abp: str = ZERO_VALUE
    ecg_classification: str = "N/A"
    ecg_confidence: float = 0.0

    @classmethod
    def from_vitals(
        cls,
        vitals: VitalSigns,
        classification: Optional[Classification] = None,
        timestamp: Optional[datetime] = None,
    ) -> "ExtractedRecord":
        """Merge extracted vitals and the ECG classification."""
        return cls(
            timestamp=timestamp or datetime.now(),
            hr=vitals.hr,
            spo2=vitals.spo2,
            abp=vitals.abp,
            ecg_classification=classification.label if classification else "N/A",
            ecg_confidence=float(classification.score) if classification else 0.0,
        )

    @property
    def time_str(self) -> str:
        """Wall-clock time of day used by the console and CSV outputs."""
        return self.timestamp.strftime("%H:%M:%S")

    def console_line(self) -> str:
        return (
            f"Time: {self.time_str} | HR: {self.hr} | SpO2: {self.spo2} | "
            f"ABP: {self.abp} | ECG: {self.ecg_classification} ({self.ecg_confidence:.2f})"
        )

    def csv_row(self) -> List[str]:
        return [
            self.time_str,
            self.hr,
            self.spo2,
            self.abp,
            self.ecg_classification,
            f"{self.ecg_confidence:.5f}",
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "hr": self.hr,
            "spo2": self.spo2,
            "abp": self.abp,
            "ecg_classification": self.ecg_classification,
            "ecg_confidence": self.ecg_confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractedRecord":
        """Create from dictionary (e.g. a database row)."""
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]) if data.get("timestamp") else datetime.now(),
            hr=data.get("hr") or ZERO_VALUE,
            spo2=data.get("spo2") or ZERO_VALUE,
            abp=data.get("abp") or ZERO_VALUE,
            ecg_classification=data.get("ecg_classification") or "N/A",
            ecg_confidence=float(data.get("ecg_confidence") or 0.0),
        )


# Position reported for a label slot that matched no token this frame
UNMATCHED_POSITION = (-1, -1)


@dataclass
class LabelSlot:
    """An expected label and the token that matched it in the current frame."""

    name: str
    token: Optional[RecognizedToken] = None

    @property
    def matched(self) -> bool:
        return self.token is not None

    @property
    def position(self) -> Tuple[float, float]:
        """Center of the matched label, or (-1, -1) when unmatched."""
        if self.token is None:
            return UNMATCHED_POSITION
        return self.token.center
