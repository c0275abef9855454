# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Spatial label matching.

Pairs a label with the numeric token printed closest to it. This is a plain
nearest-neighbour lookup: two labels may claim the same value.
"""

import math
from typing import Sequence

from vitalsign.models.record import ZERO_VALUE, LabelSlot, RecognizedToken


def center_distance(a: RecognizedToken, b: RecognizedToken) -> float:
    """Euclidean distance between two bounding-box centers."""
    ax, ay = a.center
    bx, by = b.center
    return math.hypot(ax - bx, ay - by)


def find_closest_number(slot: LabelSlot, candidates: Sequence[RecognizedToken]) -> str:
    """Return the text of the numeric candidate nearest to a label.

    Ties go to the candidate the OCR engine emitted first.

    Args:
        slot: Label slot for the current frame
        candidates: Numeric candidates in OCR emission order

    Returns:
        Candidate text, or "0" when the label was not seen or there are
        no candidates
    """
    if not candidates or not slot.matched:
        return ZERO_VALUE

    closest = ZERO_VALUE
    min_distance = math.inf
    for candidate in candidates:
        distance = center_distance(slot.token, candidate)
        if distance < min_distance:
            min_distance = distance
            closest = candidate.text
    return closest
