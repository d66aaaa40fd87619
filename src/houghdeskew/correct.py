"""Rotation of the original image to compensate for the estimated skew."""

import logging
from typing import Optional

import cv2
import numpy as np

from .config import DeskewConfig
from .estimator import SkewEstimate
from .exceptions import InvalidImageError

logger = logging.getLogger(__name__)


def background_value(dtype) -> float:
    """White for the given pixel type."""
    if np.issubdtype(dtype, np.floating):
        return 1.0
    return float(np.iinfo(dtype).max)


def rotate(image: np.ndarray, angle_degrees: float) -> np.ndarray:
    """
    Rotate about the image center, keeping the original size.

    Positive angles turn the content counter-clockwise as displayed.
    Exposed corners are filled with white.
    """
    if image is None or image.size == 0:
        raise InvalidImageError("No image data to rotate")

    h, w = image.shape[:2]
    center = (w / 2.0, h / 2.0)

    # Calculate rotation matrix
    rotation_matrix = cv2.getRotationMatrix2D(center, angle_degrees, 1.0)

    white = background_value(image.dtype)
    return cv2.warpAffine(
        image,
        rotation_matrix,
        (w, h),
        flags=cv2.INTER_LINEAR | cv2.WARP_FILL_OUTLIERS,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(white, white, white, white),
    )


def correct_skew(
    image: np.ndarray, estimate: SkewEstimate, config: Optional[DeskewConfig] = None
) -> np.ndarray:
    """Undo the estimated skew. Returns a copy when no rotation is needed."""
    settings = (config or DeskewConfig()).correct
    angle = estimate.angle_degrees

    if angle == 0.0:
        logger.debug("    No rotation needed")
        return image.copy()

    if abs(angle) < settings.min_angle:
        logger.debug(
            "    Angle %.3f° < threshold %s°. Skipping rotation.", angle, settings.min_angle
        )
        return image.copy()

    logger.debug("    Rotating image by %.3f°...", angle)
    return rotate(image, angle)
