# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Tesseract OCR engine adapter.

Wraps pytesseract word-level recognition and yields RecognizedToken
objects in the order Tesseract emits them.
"""

import logging
from typing import Iterator, List

import cv2
import numpy as np
import pytesseract

from vitalsign.models.record import RecognizedToken

logger = logging.getLogger(__name__)


class OCRInitError(RuntimeError):
    """Tesseract is missing or the requested language is not installed."""


class TesseractEngine:
    """Word-level OCR on BGR frames.

    Usage:
        engine = TesseractEngine(language="eng", page_segmentation_mode=3)
        engine.init()
        for token in engine.recognize(frame):
            ...
        engine.end()
    """

    def __init__(
        self,
        language: str = "eng",
        page_segmentation_mode: int = 3,
        tesseract_config: str = "",
    ):
        """Initialize engine settings.

        Args:
            language: Tesseract language code(s), e.g. "eng" or "eng+deu"
            page_segmentation_mode: Tesseract --psm value
            tesseract_config: Extra command line options passed through
        """
        self.language = language
        self.page_segmentation_mode = page_segmentation_mode
        self.tesseract_config = tesseract_config
        self._initialized = False

    @classmethod
    def from_config(cls, config) -> "TesseractEngine":
        return cls(
            language=config.ocr.language,
            page_segmentation_mode=config.ocr.page_segmentation_mode,
            tesseract_config=config.ocr.tesseract_config,
        )

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def config_string(self) -> str:
        """Command line options handed to Tesseract."""
        options = f"--psm {int(self.page_segmentation_mode)}"
        if self.tesseract_config:
            options += f" {self.tesseract_config}"
        return options

    def init(self) -> None:
        """Check that Tesseract and the configured language are available.

        Raises:
            OCRInitError: If the engine cannot be used
        """
        try:
            version = pytesseract.get_tesseract_version()
            available = set(pytesseract.get_languages(config=""))
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError, OSError) as e:
            raise OCRInitError(f"Could not initialize tesseract: {e}") from e

        missing = [lang for lang in self.language.split("+") if lang not in available]
        if missing:
            raise OCRInitError(f"Tesseract language data not installed: {', '.join(missing)}")

        self._initialized = True
        logger.info(f"Tesseract {version} initialized (lang={self.language}, {self.config_string})")

    def recognize(self, frame: np.ndarray) -> Iterator[RecognizedToken]:
        """Recognize words in a BGR frame.

        Recognition errors are logged and yield no tokens, which the
        extractor turns into a zeroed record.

        Args:
            frame: BGR image (OpenCV format)

        Yields:
            RecognizedToken per non-empty word
        """
        try:
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            data = pytesseract.image_to_data(
                rgb,
                lang=self.language,
                config=self.config_string,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, cv2.error, RuntimeError) as e:
            logger.error(f"OCR failed: {e}")
            return

        for token in self._tokens_from_data(data):
            yield token

    @staticmethod
    def _tokens_from_data(data: dict) -> List[RecognizedToken]:
        """Convert pytesseract's column-oriented dict into tokens."""
        tokens = []
        for i, text in enumerate(data.get("text", [])):
            word = (text or "").strip()
            if not word:
                continue
            try:
                confidence = float(data["conf"][i])
            except (TypeError, ValueError):
                continue
            # Non-word rows (blocks, lines) report -1
            if confidence < 0:
                continue
            bbox = (
                int(data["left"][i]),
                int(data["top"][i]),
                int(data["width"][i]),
                int(data["height"][i]),
            )
            tokens.append(RecognizedToken(text=word, confidence=confidence, bbox=bbox))
        return tokens

    def end(self) -> None:
        """Release the engine. Safe to call more than once."""
        if self._initialized:
            logger.info("OCR engine released")
        self._initialized = False


def get_ocr_engine(config, video_source=None):
    """Factory function to get appropriate OCR engine based on config.

    Args:
        config: Config object
        video_source: In mock mode, the MockVideoSource whose frames are read
    """
    if config.mock_mode:
        from vitalsign.mocks import MockOCREngine
        logger.info("Using MockOCREngine (mock_mode=True)")
        return MockOCREngine(video_source)

    logger.info("Using TesseractEngine")
    return TesseractEngine.from_config(config)
