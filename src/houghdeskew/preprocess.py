"""
Image normalization ahead of line detection.

Scanned pages are dark text on a light background. The Hough transform
wants bright features on a dark background, so the page is scaled to a
bounded working height, converted to gray, inverted and thresholded.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from .config import DeskewConfig, PreprocessConfig
from .exceptions import InvalidImageError

logger = logging.getLogger(__name__)


def preprocess(image: np.ndarray, config: Optional[DeskewConfig] = None) -> np.ndarray:
    """
    Turn a loaded page into a single-channel binary image.

    Args:
        image: Color (BGR/BGRA) or grayscale image, any size
        config: Pipeline configuration, defaults when omitted

    Returns:
        uint8 image at working resolution, 255 where ink was found, 0 elsewhere

    Raises:
        InvalidImageError: If the image is None, empty or not 2-D/3-D
    """
    settings = (config or DeskewConfig()).preprocess
    _validate(image)

    resized = resize_to_height(image, settings)
    gray = to_gray(resized)
    gray = to_uint8(gray)

    # Convert it to white on black
    inverted = cv2.bitwise_not(gray)
    binary = np.where(inverted > settings.threshold, 255, 0).astype(np.uint8)

    logger.debug(
        "    Binarized %sx%s → %sx%s (threshold %s, %s ink pixels)",
        image.shape[1], image.shape[0],
        binary.shape[1], binary.shape[0],
        settings.threshold, int(np.count_nonzero(binary)),
    )
    return binary


def resize_to_height(image: np.ndarray, settings: PreprocessConfig) -> np.ndarray:
    """Scale down so the height equals max_height, keeping the aspect ratio."""
    h, w = image.shape[:2]
    if h <= settings.max_height:
        return image

    new_w = max(1, int(w / h * settings.max_height))
    logger.debug("    Resizing %sx%s → %sx%s", w, h, new_w, settings.max_height)
    return cv2.resize(image, (new_w, settings.max_height))


def to_gray(image: np.ndarray) -> np.ndarray:
    """Collapse BGR/BGRA channels to luma. Single-channel input is returned as is."""
    if image.ndim == 2:
        return image

    channels = image.shape[2]
    if channels == 1:
        return np.ascontiguousarray(image[:, :, 0])
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    # gray + alpha
    return np.ascontiguousarray(image[:, :, 0])


def to_uint8(gray: np.ndarray) -> np.ndarray:
    """Bring 16-bit or float intensities onto the 0-255 scale."""
    if gray.dtype == np.uint8:
        return gray
    if gray.dtype == np.uint16:
        return (gray >> 8).astype(np.uint8)
    if np.issubdtype(gray.dtype, np.floating):
        return (np.clip(gray, 0.0, 1.0) * 255).round().astype(np.uint8)
    return np.clip(gray, 0, 255).astype(np.uint8)


def _validate(image: np.ndarray) -> None:
    if image is None:
        raise InvalidImageError("No image data")
    if not isinstance(image, np.ndarray):
        raise InvalidImageError("Image must be a numpy array", {"type": type(image).__name__})
    if image.ndim not in (2, 3) or image.size == 0:
        raise InvalidImageError("Image is empty or malformed", {"shape": image.shape})
