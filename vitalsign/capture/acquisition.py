# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Video acquisition with bounded reconnect.

State Flow:
    DISCONNECTED -> CONNECTING -> STREAMING | FAILED
    STREAMING -> RECONNECTING (empty frame) -> STREAMING | FAILED
    FAILED is terminal: no further open attempts are made.

Usage:
    controller = AcquisitionController(VideoSource(), "/data/monitor.mp4")
    if controller.open():
        result = controller.next_frame()
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from vitalsign.capture.video_source import Descriptor, mask_descriptor
from vitalsign.models.record import AcquisitionState

logger = logging.getLogger(__name__)


@dataclass
class CaptureResult:
    """Result of one frame pull."""

    success: bool = False
    frame: Optional[np.ndarray] = None
    end_of_stream: bool = False  # File source fully read
    fatal: bool = False  # Reconnect budget exhausted, stop sampling
    capture_time_ms: float = 0.0
    error: Optional[str] = None


class AcquisitionController:
    """Owns the video source handle and its reconnect policy.

    Attributes:
        descriptor: Camera index, file path or stream URL
        max_attempts: Open attempts per connect or reconnect
        delay_ms: Sleep between attempts
    """

    def __init__(
        self,
        source,
        descriptor: Descriptor,
        max_attempts: int = 5,
        delay_ms: int = 2000,
        stop_at_end_of_file: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize controller.

        Args:
            source: Object with open(descriptor) -> bool, read() -> frame|None,
                release(), and optionally at_end() -> bool
            descriptor: What to open
            max_attempts: Open attempts before giving up
            delay_ms: Milliseconds to wait between attempts
            stop_at_end_of_file: Treat an empty read at the end of a file as
                end-of-stream instead of a reconnect trigger
            sleep: Sleep function (seconds)
        """
        self.source = source
        self.descriptor = descriptor
        self.max_attempts = max(1, max_attempts)
        self.delay_ms = max(0, delay_ms)
        self.stop_at_end_of_file = stop_at_end_of_file
        self._sleep = sleep

        self._state = AcquisitionState.DISCONNECTED
        self.open_attempts = 0
        self.reconnects = 0

    @classmethod
    def from_config(cls, config, source) -> "AcquisitionController":
        video = config.video
        return cls(
            source,
            video.descriptor,
            max_attempts=video.reconnect_attempts,
            delay_ms=video.reconnect_delay_ms,
            stop_at_end_of_file=video.source_type == "file",
        )

    @property
    def state(self) -> AcquisitionState:
        return self._state

    @property
    def is_streaming(self) -> bool:
        return self._state == AcquisitionState.STREAMING

    def open(self) -> bool:
        """Open the source, retrying up to max_attempts times.

        Returns:
            True once streaming; False if the budget is exhausted or the
            controller has already failed
        """
        if self._state == AcquisitionState.FAILED:
            logger.error("Video source previously failed, not retrying")
            return False

        if self._state != AcquisitionState.RECONNECTING:
            self._state = AcquisitionState.CONNECTING

        name = mask_descriptor(self.descriptor)
        for attempt in range(1, self.max_attempts + 1):
            self.open_attempts += 1
            if self.source.open(self.descriptor):
                if attempt > 1:
                    logger.info(f"Opened {name} on attempt {attempt}")
                self._state = AcquisitionState.STREAMING
                return True

            self.source.release()
            if attempt < self.max_attempts:
                logger.warning(
                    f"Could not open {name} (attempt {attempt}/{self.max_attempts}), "
                    f"retrying in {self.delay_ms}ms..."
                )
                self._sleep(self.delay_ms / 1000.0)

        logger.error(f"Could not open {name} after {self.max_attempts} attempts")
        self._state = AcquisitionState.FAILED
        return False

    def next_frame(self) -> CaptureResult:
        """Pull the next frame, reconnecting once on an empty read.

        Returns:
            CaptureResult. success=False with fatal=False means the source
            was reconnected and the caller should simply try again.
        """
        if self._state != AcquisitionState.STREAMING:
            return CaptureResult(fatal=True, error=f"Video source is {self._state.value}")

        start_time = time.time()
        frame = self.source.read()
        elapsed = (time.time() - start_time) * 1000

        if frame is not None:
            return CaptureResult(success=True, frame=frame, capture_time_ms=elapsed)

        if self.stop_at_end_of_file and self._source_at_end():
            logger.info("End of video file reached")
            return CaptureResult(end_of_stream=True, capture_time_ms=elapsed)

        logger.warning("Empty frame received, reconnecting video source...")
        self.source.release()
        self._state = AcquisitionState.RECONNECTING
        self.reconnects += 1

        if not self.open():
            return CaptureResult(
                fatal=True,
                capture_time_ms=(time.time() - start_time) * 1000,
                error="Video source lost and reconnect failed",
            )

        logger.info("Video source reconnected")
        return CaptureResult(
            capture_time_ms=(time.time() - start_time) * 1000,
            error="Empty frame, source reconnected",
        )

    def _source_at_end(self) -> bool:
        at_end = getattr(self.source, "at_end", None)
        return bool(at_end and at_end())

    def release(self) -> None:
        """Release the source handle."""
        self.source.release()
        if self._state != AcquisitionState.FAILED:
            self._state = AcquisitionState.DISCONNECTED
        logger.info("Video source released")
