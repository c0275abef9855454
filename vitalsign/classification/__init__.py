# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Frame feature packing and ECG classification."""

from vitalsign.classification.ecg import ClassifierInitError, ECGClassifier, get_classifier
from vitalsign.classification.features import frame_to_features, pack_features, resize_and_crop

__all__ = [
    "ClassifierInitError",
    "ECGClassifier",
    "frame_to_features",
    "get_classifier",
    "pack_features",
    "resize_and_crop",
]
