"""
Image validation, decoding and logging helpers.
"""

from __future__ import annotations

import logging
from typing import Tuple

import cv2
import numpy as np

from .errors import InvalidImageError

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Accepted channel counts: grayscale, BGR and BGRA.
SUPPORTED_CHANNELS = (1, 3, 4)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def image_size(image: np.ndarray) -> Tuple[int, int]:
    """
    Return ``(width, height)`` of an image, rejecting unusable input.

    Raises
    ------
    InvalidImageError
        If ``image`` is not a NumPy array, is empty, has a non-positive
        width or height, or has a channel count other than 1, 3 or 4.
    """
    if not isinstance(image, np.ndarray) or image.ndim not in (2, 3) or image.size == 0:
        raise InvalidImageError("Input image is empty or not an image array.")
    height, width = image.shape[:2]
    if height <= 0 or width <= 0:
        raise InvalidImageError(f"Image has invalid dimensions {width}x{height}.")
    channels = image.shape[2] if image.ndim == 3 else 1
    if channels not in SUPPORTED_CHANNELS:
        raise InvalidImageError(f"Unsupported number of channels: {channels}.")
    return int(width), int(height)


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Validate ``image`` and return it as a 3-channel BGR array."""
    image_size(image)
    if image.ndim == 3 and image.shape[2] == 3:
        return image
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    gray = image if image.ndim == 2 else np.ascontiguousarray(image[:, :, 0])
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def decode_image(data: bytes) -> np.ndarray:
    """Decode raw JPEG/PNG bytes into a BGR image."""
    if not data:
        raise InvalidImageError("Empty image data.")
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise InvalidImageError("Failed to decode image. Ensure the file is a valid JPEG or PNG.")
    return image
