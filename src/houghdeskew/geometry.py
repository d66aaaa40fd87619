"""Line segment value type and angle helpers."""

import math
from typing import List, NamedTuple, Optional

import numpy as np


class LineSegment(NamedTuple):
    """A detected segment in image coordinates (y grows downwards)."""

    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def angle(self) -> float:
        """Signed direction in radians, atan2(dy, dx). Not direction-normalized."""
        return math.atan2(self.y2 - self.y1, self.x2 - self.x1)

    @property
    def angle_degrees(self) -> float:
        return math.degrees(self.angle)

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    def reversed(self) -> "LineSegment":
        return LineSegment(self.x2, self.y2, self.x1, self.y1)

    @classmethod
    def from_hough(cls, lines: Optional[np.ndarray]) -> List["LineSegment"]:
        """Convert the (N, 1, 4) array returned by cv2.HoughLinesP."""
        if lines is None:
            return []
        return [cls(int(x1), int(y1), int(x2), int(y2)) for x1, y1, x2, y2 in lines.reshape(-1, 4)]


def fold_angle(angle: float) -> float:
    """Fold a direction in radians into (-pi/2, pi/2]."""
    if angle > math.pi / 2:
        angle -= math.pi
    elif angle <= -math.pi / 2:
        angle += math.pi
    return angle
