"""Probabilistic Hough line detection."""

import logging
from typing import List, Optional

import cv2
import numpy as np

from .config import DeskewConfig
from .geometry import LineSegment

logger = logging.getLogger(__name__)


def min_line_length(original_width: int, config: Optional[DeskewConfig] = None) -> float:
    """Length threshold calibrated on the unscaled page width."""
    settings = (config or DeskewConfig()).detect
    return original_width / settings.min_length_divisor


def detect_lines(
    binary: np.ndarray,
    min_length: float,
    max_gap: Optional[int] = None,
    config: Optional[DeskewConfig] = None,
) -> List[LineSegment]:
    """
    Find straight segments in a binary image.

    Args:
        binary: Single-channel uint8 image, features bright on dark
        min_length: Shortest segment to report, in pixels
        max_gap: Largest gap bridged between collinear points, config value when None
        config: Pipeline configuration

    Returns:
        Detected segments; empty when nothing was found
    """
    settings = (config or DeskewConfig()).detect
    if max_gap is None:
        max_gap = settings.max_gap

    lines = cv2.HoughLinesP(
        binary,
        rho=settings.rho,
        theta=np.radians(settings.theta_degrees),
        threshold=settings.votes,
        minLineLength=min_length,
        maxLineGap=max_gap,
    )
    segments = LineSegment.from_hough(lines)

    logger.debug(
        "    Hough found %s segments (min length %.1fpx, max gap %spx)",
        len(segments), min_length, max_gap,
    )
    return segments
