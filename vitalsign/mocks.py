# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Mock collaborators for running without a monitor, Tesseract or a model.

This module provides simulated versions of the video source, OCR engine and
Edge Impulse runner that produce realistic monitor readings for exercising
the full pipeline.

Enable mock mode by:
- Setting MOCK_HARDWARE=true environment variable, OR
- Setting mock_mode: true in config.yaml, OR
- Passing --mock on the command line
"""

import logging
import random
from typing import Dict, Iterator, List, Optional, Tuple

import cv2
import numpy as np

from vitalsign.models.record import RecognizedToken

logger = logging.getLogger(__name__)

# (label, label origin, value origin) in a 640x480 frame, text baseline coords
DISPLAY_LAYOUT: List[Tuple[str, Tuple[int, int], Tuple[int, int]]] = [
    ("HR", (40, 80), (160, 80)),
    ("SpO2", (40, 200), (160, 200)),
    ("ABP", (40, 320), (160, 320)),
]
_TEXT_HEIGHT = 30
_CHAR_WIDTH = 22


class MockVideoSource:
    """Simulated video source rendering a bedside monitor display.

    Attributes:
        frame_width: Rendered frame width
        frame_height: Rendered frame height
        last_values: Values drawn on the most recent frame
    """

    def __init__(
        self,
        frame_width: int = 640,
        frame_height: int = 480,
        fail_opens: int = 0,
        empty_frame_rate: float = 0.0,
        max_frames: Optional[int] = None,
    ):
        """Initialize mock video source.

        Args:
            frame_width: Width of generated frames
            frame_height: Height of generated frames
            fail_opens: Number of open() calls that fail before one succeeds
            empty_frame_rate: Probability that read() returns nothing
            max_frames: Stop producing frames after this many (None = endless)
        """
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.empty_frame_rate = empty_frame_rate
        self.max_frames = max_frames
        self._fail_opens = fail_opens
        self._opened = False
        self.frames_read = 0
        self.last_values: Dict[str, str] = {}

        # Base values for normal readings (will vary around these)
        self._base_hr = 72
        self._base_spo2 = 96
        self._base_systolic = 120
        self._base_diastolic = 80

        logger.info(f"MockVideoSource initialized ({frame_width}x{frame_height})")

    @property
    def is_opened(self) -> bool:
        return self._opened

    def open(self, descriptor) -> bool:
        if self._fail_opens > 0:
            self._fail_opens -= 1
            logger.info(f"MockVideoSource: Simulating open failure for {descriptor!r}")
            return False
        self._opened = True
        logger.info(f"MockVideoSource: Opened {descriptor!r} (simulated)")
        return True

    def read(self) -> Optional[np.ndarray]:
        if not self._opened or self.at_end():
            return None
        if self.empty_frame_rate and random.random() < self.empty_frame_rate:
            logger.debug("MockVideoSource: Empty frame (simulated)")
            return None
        self.frames_read += 1
        self.last_values = self._generate_values()
        return self._render(self.last_values)

    def at_end(self) -> bool:
        return self.max_frames is not None and self.frames_read >= self.max_frames

    def release(self) -> None:
        self._opened = False

    def _generate_values(self) -> Dict[str, str]:
        hr = max(50, min(110, self._base_hr + random.randint(-8, 8)))
        spo2 = max(88, min(100, self._base_spo2 + random.randint(-3, 3)))
        systolic = self._base_systolic + random.randint(-10, 10)
        diastolic = self._base_diastolic + random.randint(-6, 6)
        return {"HR": str(hr), "SpO2": str(spo2), "ABP": f"{systolic}/{diastolic}"}

    def _render(self, values: Dict[str, str]) -> np.ndarray:
        frame = np.zeros((self.frame_height, self.frame_width, 3), dtype=np.uint8)
        colors = {"HR": (0, 255, 0), "SpO2": (255, 255, 0), "ABP": (0, 0, 255)}
        for label, label_org, value_org in DISPLAY_LAYOUT:
            color = colors[label]
            cv2.putText(frame, label, label_org, cv2.FONT_HERSHEY_SIMPLEX, 1.0, color, 2)
            cv2.putText(frame, values[label], value_org, cv2.FONT_HERSHEY_SIMPLEX, 1.5, color, 3)

        # Fake ECG trace along the bottom of the display
        xs = np.arange(self.frame_width)
        ys = (self.frame_height - 60 + 25 * np.sin(xs / 12.0 + self.frames_read)).astype(np.int32)
        points = np.stack([xs, ys], axis=1).reshape(-1, 1, 2)
        cv2.polylines(frame, [points], False, (0, 255, 0), 2)
        return frame


class MockOCREngine:
    """Simulated OCR engine that "reads" the values MockVideoSource drew.

    Occasionally loses the SpO2 reading (label and value) or garbles ABP so
    the carry-forward and zeroing paths get exercised.
    """

    def __init__(
        self,
        source: MockVideoSource,
        spo2_dropout_rate: float = 0.1,
        abp_garble_rate: float = 0.05,
    ):
        self.source = source
        self.spo2_dropout_rate = spo2_dropout_rate
        self.abp_garble_rate = abp_garble_rate
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        self._initialized = True
        logger.info("MockOCREngine: Initialized (simulated)")

    def recognize(self, frame: np.ndarray) -> Iterator[RecognizedToken]:
        values = self.source.last_values
        for label, label_org, value_org in DISPLAY_LAYOUT:
            if label == "SpO2" and random.random() < self.spo2_dropout_rate:
                logger.debug("MockOCREngine: SpO2 dropout (simulated)")
                continue

            yield _token(label, label_org, confidence=random.uniform(80, 96))

            value = values.get(label)
            if value is None:
                continue
            if label == "ABP" and random.random() < self.abp_garble_rate:
                logger.debug("MockOCREngine: Garbled ABP (simulated)")
                value = value.replace("/", "7")
            yield _token(value, value_org, confidence=random.uniform(70, 95))

        # Low-confidence noise from the waveform area
        yield _token("~", (300, self.source.frame_height - 60), confidence=12.0)

    def end(self) -> None:
        self._initialized = False


def _token(text: str, origin: Tuple[int, int], confidence: float) -> RecognizedToken:
    x, baseline = origin
    return RecognizedToken(
        text=text,
        confidence=confidence,
        bbox=(x, baseline - _TEXT_HEIGHT, _CHAR_WIDTH * len(text), _TEXT_HEIGHT),
    )


class MockImpulseRunner:
    """Simulated Edge Impulse runner with a fixed label set."""

    LABELS = ["normal", "afib", "noise"]

    def __init__(self, model_path: str = "mock.eim", input_width: int = 96, input_height: int = 96):
        self.model_path = model_path
        self.input_width = input_width
        self.input_height = input_height
        self.running = False

    def init(self) -> dict:
        self.running = True
        return {
            "project": {"owner": "mock", "name": "ecg-classifier"},
            "model_parameters": {
                "image_input_width": self.input_width,
                "image_input_height": self.input_height,
                "labels": list(self.LABELS),
            },
        }

    def classify(self, features) -> dict:
        normal = random.uniform(0.6, 0.98)
        afib = random.uniform(0.0, 1.0 - normal)
        return {
            "result": {
                "classification": {
                    "normal": normal,
                    "afib": afib,
                    "noise": max(0.0, 1.0 - normal - afib),
                }
            }
        }

    def stop(self) -> None:
        self.running = False
