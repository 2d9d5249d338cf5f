"""
Joint angle geometry on 2D landmarks.

Two measurements are supported:
- Vertical-reference angle: deviation of the segment top -> bottom from the
  image vertical (0 = segment points straight down the frame).
- Included angle: angle at a vertex between the rays to two other joints,
  in [0, 360).

Neither function raises on missing, non-finite or coincident points; both
return 0.0 so that NaN never reaches the phase classifier.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple
from enum import Enum

from repcounter.cv.landmarks import BodyLandmark, Landmark, LandmarkFrame

# Segments shorter than this (pixels) are treated as coincident points
EPSILON = 1e-6


def _usable(*points: Optional[Landmark]) -> bool:
    return all(
        point is not None and np.isfinite(point.x) and np.isfinite(point.y)
        for point in points
    )


def vertical_angle(top: Optional[Landmark], bottom: Optional[Landmark]) -> float:
    """Angle in degrees between the segment top -> bottom and the vertical."""
    if not _usable(top, bottom):
        return 0.0

    dx = bottom.x - top.x
    dy = bottom.y - top.y
    if np.hypot(dx, dy) < EPSILON:
        return 0.0

    angle = float(abs(np.degrees(np.arctan2(dx, dy))))
    return angle if np.isfinite(angle) else 0.0


def included_angle(
    first: Optional[Landmark],
    vertex: Optional[Landmark],
    second: Optional[Landmark]
) -> float:
    """
    Angle in degrees at ``vertex`` between the rays vertex -> first and vertex -> second.

    Negative differences wrap by +360, so the result lies in [0, 360).
    """
    if not _usable(first, vertex, second):
        return 0.0

    first_vec = np.array([first.x - vertex.x, first.y - vertex.y])
    second_vec = np.array([second.x - vertex.x, second.y - vertex.y])
    if np.linalg.norm(first_vec) < EPSILON or np.linalg.norm(second_vec) < EPSILON:
        return 0.0

    radians = np.arctan2(second_vec[1], second_vec[0]) - np.arctan2(first_vec[1], first_vec[0])
    angle = float(np.degrees(radians))
    if angle < 0:
        angle += 360.0

    if not np.isfinite(angle):
        return 0.0
    return abs(angle) % 360.0


class AngleKind(Enum):
    """Formula used to derive an angle."""
    VERTICAL = "vertical"
    INCLUDED = "included"


@dataclass(frozen=True)
class AngleDefinition:
    """
    Which joints and which formula produce a tracked angle.

    VERTICAL takes (top, bottom); INCLUDED takes (first, vertex, second).
    ``fold_reflex`` reports angles above 180 as 360 - angle, for joints
    whose inside angle never exceeds a straight line (elbow, hip line).
    """
    name: str
    kind: AngleKind
    landmarks: Tuple[BodyLandmark, ...]
    fold_reflex: bool = False

    def __post_init__(self):
        expected = 2 if self.kind == AngleKind.VERTICAL else 3
        if len(self.landmarks) != expected:
            raise ValueError(
                f"{self.kind.value} angle '{self.name}' needs {expected} landmarks, "
                f"got {len(self.landmarks)}"
            )

    def measure(self, frame: LandmarkFrame) -> float:
        points = [frame.get(landmark) for landmark in self.landmarks]

        if self.kind == AngleKind.VERTICAL:
            angle = vertical_angle(points[0], points[1])
        else:
            angle = included_angle(points[0], points[1], points[2])

        if self.fold_reflex and angle > 180.0:
            angle = 360.0 - angle
        return angle
