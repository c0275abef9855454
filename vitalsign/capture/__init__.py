# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Video capture and acquisition control."""

from vitalsign.capture.acquisition import AcquisitionController, CaptureResult
from vitalsign.capture.video_source import VideoSource, get_video_source

__all__ = ["AcquisitionController", "CaptureResult", "VideoSource", "get_video_source"]
