# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""OpenCV video source.

Thin wrapper around cv2.VideoCapture that reports failure through return
values instead of exceptions. Works with camera indexes, video files and
network stream URLs.
"""

import logging
from typing import Optional, Union
from urllib.parse import urlparse

import cv2
import numpy as np

logger = logging.getLogger(__name__)

Descriptor = Union[int, str]


def mask_descriptor(descriptor: Descriptor) -> str:
    """Return a descriptor with any URL password masked for logging."""
    if isinstance(descriptor, int):
        return f"camera {descriptor}"
    try:
        parsed = urlparse(descriptor)
        if parsed.password:
            return descriptor.replace(f":{parsed.password}@", ":****@")
    except ValueError:
        pass
    return descriptor


class VideoSource:
    """A single cv2.VideoCapture handle.

    Usage:
        source = VideoSource()
        if source.open("/data/monitor.mp4"):
            frame = source.read()
        source.release()
    """

    def __init__(self, frame_width: int = 640, frame_height: int = 480):
        """Initialize video source.

        Args:
            frame_width: Requested width for cameras (backend may ignore)
            frame_height: Requested height for cameras (backend may ignore)
        """
        self.frame_width = frame_width
        self.frame_height = frame_height
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def is_opened(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def open(self, descriptor: Descriptor) -> bool:
        """Open a camera index, file path or stream URL.

        Returns:
            True if the source is open and ready to read
        """
        self.release()
        try:
            cap = cv2.VideoCapture(descriptor)
            if isinstance(descriptor, int):
                cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.frame_width)
                cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.frame_height)
        except cv2.error as e:
            logger.error(f"OpenCV error opening {mask_descriptor(descriptor)}: {e}")
            return False

        if not cap.isOpened():
            cap.release()
            return False

        self._cap = cap
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        fps = cap.get(cv2.CAP_PROP_FPS)
        logger.info(f"Opened {mask_descriptor(descriptor)} ({width}x{height} @ {fps:.1f} FPS)")
        return True

    def read(self) -> Optional[np.ndarray]:
        """Read the next frame.

        Returns:
            BGR frame, or None if nothing could be read
        """
        if self._cap is None:
            return None
        try:
            ret, frame = self._cap.read()
        except cv2.error as e:
            logger.error(f"OpenCV error reading frame: {e}")
            return None
        if not ret or frame is None or frame.size == 0:
            return None
        return frame

    def at_end(self) -> bool:
        """True when a file source has been read to its last frame."""
        if self._cap is None:
            return False
        total = self._cap.get(cv2.CAP_PROP_FRAME_COUNT)
        position = self._cap.get(cv2.CAP_PROP_POS_FRAMES)
        return total > 0 and position >= total

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None


def get_video_source(config):
    """Factory function to get appropriate video source based on config."""
    video = config.video
    if config.mock_mode:
        from vitalsign.mocks import MockVideoSource
        logger.info("Using MockVideoSource (mock_mode=True)")
        return MockVideoSource(frame_width=video.frame_width, frame_height=video.frame_height)

    logger.info(f"Using VideoSource ({video.source_type})")
    return VideoSource(frame_width=video.frame_width, frame_height=video.frame_height)
