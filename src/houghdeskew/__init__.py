"""
Document Deskew CLI

Estimates the rotational skew of scanned document images from Hough line
segments and rotates them to compensate.

Usage:
    deskew [-preview] <origfile> <destfile> [<origfile> <destfile> ...]

Or directly:
    python -m houghdeskew scan.png straight.png
"""

from .config import DeskewConfig, load_config
from .estimator import EstimateStatus, SkewEstimate, estimate_skew
from .geometry import LineSegment
from .pipeline import compute_skew, deskew_file, deskew_image

__version__ = "0.1.0"
__description__ = "Hough-transform skew estimation and correction for scanned documents"

__all__ = [
    "DeskewConfig",
    "EstimateStatus",
    "LineSegment",
    "SkewEstimate",
    "compute_skew",
    "deskew_file",
    "deskew_image",
    "estimate_skew",
    "load_config",
]
