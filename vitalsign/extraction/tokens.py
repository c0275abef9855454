# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Tag recognized OCR tokens as labels, numeric candidates or noise.

Runs before any geometry so the matcher only ever sees typed tokens.
"""

import re
from typing import Iterable, List, Optional, Sequence

from vitalsign.models.record import ClassifiedToken, RecognizedToken, TokenKind

SPO2_LABEL = "SpO2"

# Tesseract often reads the O as a zero
SPO2_PATTERN = re.compile(r"\bsp[o0]2\b", re.IGNORECASE)
BP_PATTERN = re.compile(r"^\d{2,3}/\d{2,3}$")
DIGITS_PATTERN = re.compile(r"^\d{1,3}$")

# Trailing punctuation monitors print after labels ("HR:")
_LABEL_STRIP = " :;.,"


def is_blood_pressure(text: str) -> bool:
    """True for a well-formed systolic/diastolic pair such as 120/80."""
    return bool(BP_PATTERN.match(text))


def match_label(text: str, labels: Sequence[str]) -> Optional[str]:
    """Return the label slot a token names, or None.

    Args:
        text: Token text
        labels: Configured label slots

    Returns:
        Label name, or None if the token is not a label
    """
    if SPO2_LABEL in labels and SPO2_PATTERN.search(text):
        return SPO2_LABEL
    word = text.strip(_LABEL_STRIP)
    if word in labels:
        return word
    return None


def is_numeric_candidate(text: str) -> bool:
    """True for a plausible vital sign value: a BP pair, any slash token, or plain digits."""
    return bool(is_blood_pressure(text) or "/" in text or DIGITS_PATTERN.match(text))


def classify_token(
    token: RecognizedToken,
    labels: Sequence[str],
    confidence_threshold: float,
) -> ClassifiedToken:
    """Tag a single token.

    Tokens below the confidence threshold are always noise.
    """
    if token.confidence < confidence_threshold:
        return ClassifiedToken(TokenKind.NOISE, token)

    label = match_label(token.text, labels)
    if label is not None:
        return ClassifiedToken(TokenKind.LABEL, token, label=label)

    if is_numeric_candidate(token.text):
        return ClassifiedToken(TokenKind.NUMERIC, token)

    return ClassifiedToken(TokenKind.NOISE, token)


def classify_tokens(
    tokens: Iterable[RecognizedToken],
    labels: Sequence[str],
    confidence_threshold: float,
) -> List[ClassifiedToken]:
    """Tag every token of one frame, preserving OCR emission order."""
    return [classify_token(t, labels, confidence_threshold) for t in tokens]
