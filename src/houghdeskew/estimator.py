"""
Skew angle estimation from detected line segments.

Text baselines and ruled lines on a scanned page are close to horizontal,
so segments inside a narrow window around 0° are taken as evidence of the
page tilt and everything else is ignored. The tilt is the mean of the
candidate angles after trimming a fixed fraction from both ends of the
sorted sample. When too few of the detected segments are candidates the
page has no dominant line structure and the estimate is forced to 0.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from .config import DeskewConfig
from .geometry import LineSegment, fold_angle

logger = logging.getLogger(__name__)


class EstimateStatus(Enum):
    OK = "ok"
    LOW_CONFIDENCE = "low_confidence"
    NO_SEGMENTS = "no_segments"
    NO_CANDIDATES = "no_candidates"


@dataclass(frozen=True)
class Classification:
    """Detected segments split into near-horizontal candidates and outliers."""

    candidates: List[LineSegment]
    outliers: List[LineSegment]


@dataclass(frozen=True)
class SkewEstimate:
    """
    Result of skew estimation for one image.

    Attributes:
        angle: Skew in radians to correct by, 0.0 unless status is OK
        status: Outcome of the estimation
        total: Number of detected segments
        candidates: Segments inside the angle window, before trimming
        used: Candidates left after trimming, the ones averaged
        raw_angle: Trimmed mean before the confidence gate, None when there was no data
    """

    angle: float
    status: EstimateStatus
    total: int = 0
    candidates: int = 0
    used: int = 0
    raw_angle: Optional[float] = None

    @property
    def valid(self) -> bool:
        return self.status in (EstimateStatus.OK, EstimateStatus.LOW_CONFIDENCE)

    @property
    def low_confidence(self) -> bool:
        return self.status is EstimateStatus.LOW_CONFIDENCE

    @property
    def ignored(self) -> int:
        """Outliers plus trimmed candidates."""
        return self.total - self.used

    @property
    def good_ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.candidates / self.total

    @property
    def angle_degrees(self) -> float:
        return math.degrees(self.angle)


def segment_angle(segment: LineSegment, fold_direction: bool = False) -> float:
    """Segment direction in radians, optionally folded into (-pi/2, pi/2]."""
    angle = segment.angle
    if fold_direction:
        angle = fold_angle(angle)
    return angle


def is_candidate(angle_degrees: float, window: float) -> bool:
    """Strictly inside (-window, window); the boundary itself is an outlier."""
    return -window < angle_degrees < window


def classify_segments(
    segments: Sequence[LineSegment], config: Optional[DeskewConfig] = None
) -> Classification:
    """Partition segments by whether their angle falls inside the acceptance window."""
    settings = (config or DeskewConfig()).estimate
    candidates = []
    outliers = []
    for segment in segments:
        angle = math.degrees(segment_angle(segment, settings.fold_direction))
        if is_candidate(angle, settings.angle_window):
            candidates.append(segment)
        else:
            outliers.append(segment)
    return Classification(candidates, outliers)


def trim_candidates(sorted_angles: Sequence[float], fraction: float) -> List[float]:
    """
    Drop floor(n * fraction) values from each end of a sorted sample.

    Returns an empty list when nothing would remain.
    """
    n = len(sorted_angles)
    trim = math.floor(n * fraction)
    if 2 * trim >= n:
        return []
    return list(sorted_angles[trim:n - trim])


def estimate_skew(
    segments: Sequence[LineSegment],
    total_segment_count: Optional[int] = None,
    config: Optional[DeskewConfig] = None,
) -> SkewEstimate:
    """
    Estimate page skew from detected segments.

    Args:
        segments: Detected line segments
        total_segment_count: Number of segments the detector reported,
            len(segments) when None
        config: Pipeline configuration

    Returns:
        The estimate; see SkewEstimate.status for how it was reached
    """
    settings = (config or DeskewConfig()).estimate
    angles = [segment_angle(s, settings.fold_direction) for s in segments]
    return estimate_angles(angles, total_segment_count, config)


def estimate_angles(
    angles: Sequence[float],
    total_segment_count: Optional[int] = None,
    config: Optional[DeskewConfig] = None,
) -> SkewEstimate:
    """Same as estimate_skew, over segment angles in radians."""
    settings = (config or DeskewConfig()).estimate

    total = len(angles) if total_segment_count is None else total_segment_count
    if total < len(angles):
        raise ValueError(
            f"total_segment_count ({total}) is smaller than the number of segments ({len(angles)})"
        )

    if total == 0:
        logger.debug("    No lines detected")
        return SkewEstimate(0.0, EstimateStatus.NO_SEGMENTS)

    candidates = sorted(a for a in angles if is_candidate(math.degrees(a), settings.angle_window))
    kept = trim_candidates(candidates, settings.trim_fraction)

    logger.debug(
        "    %s of %s lines inside ±%s°, %s left after trimming %.0f%% per side",
        len(candidates), total, settings.angle_window, len(kept), settings.trim_fraction * 100,
    )

    if not kept:
        logger.debug("    No usable lines left to average")
        return SkewEstimate(
            0.0, EstimateStatus.NO_CANDIDATES, total=total, candidates=len(candidates)
        )

    # mean angle, in radians
    mean = math.fsum(kept) / len(kept)

    good_ratio = len(candidates) / total
    if good_ratio < settings.min_good_ratio:
        logger.debug(
            "    Good line ratio %.2f < %s, ignoring mean of %.3f°",
            good_ratio, settings.min_good_ratio, math.degrees(mean),
        )
        return SkewEstimate(
            0.0,
            EstimateStatus.LOW_CONFIDENCE,
            total=total,
            candidates=len(candidates),
            used=len(kept),
            raw_angle=mean,
        )

    logger.debug("    Mean angle %.3f° from %s lines", math.degrees(mean), len(kept))
    return SkewEstimate(
        mean,
        EstimateStatus.OK,
        total=total,
        candidates=len(candidates),
        used=len(kept),
        raw_angle=mean,
    )
