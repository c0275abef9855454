# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Frame to classifier feature transform.

The ECG model was trained on center-cropped frames whose pixels are packed
as 24-bit RGB integers stored in float32, rows outer and columns inner.
This module must reproduce that layout exactly.
"""

import cv2
import numpy as np


def resize_and_crop(frame: np.ndarray, width: int, height: int) -> np.ndarray:
    """Scale a frame to cover width x height, then crop the center.

    The larger of the two scale factors is used so the resized frame fully
    covers the target box.

    Args:
        frame: BGR image
        width: Model input width
        height: Model input height

    Returns:
        BGR image of exactly height x width
    """
    if frame.ndim == 2:
        frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)

    in_height, in_width = frame.shape[:2]
    factor = max(width / in_width, height / in_height)

    # int() truncation can land one pixel short of the target
    new_width = max(width, int(factor * in_width))
    new_height = max(height, int(factor * in_height))

    if (new_width, new_height) != (in_width, in_height):
        frame = cv2.resize(frame, (new_width, new_height))

    x = (new_width - width) // 2
    y = (new_height - height) // 2
    return frame[y:y + height, x:x + width]


def pack_features(image: np.ndarray) -> np.ndarray:
    """Pack each BGR pixel into (r << 16) + (g << 8) + b.

    Args:
        image: BGR image, already at model input size

    Returns:
        float32 array of length width * height
    """
    pixels = image.astype(np.uint32)
    b = pixels[..., 0]
    g = pixels[..., 1]
    r = pixels[..., 2]
    packed = (r << 16) + (g << 8) + b
    # 24-bit values are exact in float32
    return packed.reshape(-1).astype(np.float32)


def frame_to_features(frame: np.ndarray, width: int, height: int) -> np.ndarray:
    """resize_and_crop followed by pack_features."""
    return pack_features(resize_and_crop(frame, width, height))
