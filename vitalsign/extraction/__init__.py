# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""OCR token classification, label matching and vital sign extraction."""

from vitalsign.extraction.extractor import VitalSignExtractor
from vitalsign.extraction.matcher import find_closest_number
from vitalsign.extraction.ocr import OCRInitError, TesseractEngine, get_ocr_engine

__all__ = [
    "OCRInitError",
    "TesseractEngine",
    "VitalSignExtractor",
    "find_closest_number",
    "get_ocr_engine",
]
