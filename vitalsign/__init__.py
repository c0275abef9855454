# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Vital sign extraction from patient monitor video.

Reads HR, SpO2 and ABP off a bedside monitor display with OCR and
classifies the ECG trace with a small vision model.
"""

__version__ = "1.0.0"
