"""Shared landmark builders for the test suite.

Frames are built in pixel space for a side-view camera: +x to the right,
+y down the image.
"""

import math
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from repcounter.config import Settings
from repcounter.cv.landmarks import BodyLandmark, LandmarkFrame

FRAME_MS = 33.0

HIP = (300.0, 300.0)
THIGH = 100.0
SHIN = 100.0
TORSO = 120.0


def _offset(origin: Tuple[float, float], length: float, degrees_from_down: float) -> Tuple[float, float]:
    """Point ``length`` away from origin, rotated from straight down towards +x."""
    rad = math.radians(degrees_from_down)
    return origin[0] + length * math.sin(rad), origin[1] + length * math.cos(rad)


def squat_points(
    hip_knee: float,
    torso_lean: float = 0.0,
    knee_travel: float = 0.0,
    visibility: float = 0.9,
    drop: Iterable[BodyLandmark] = ()
) -> Dict[BodyLandmark, Tuple[float, float, float]]:
    """Both sides of a squatting body with the given vertical-reference angles."""
    knee = _offset(HIP, THIGH, hip_knee)
    ankle = _offset(knee, SHIN, knee_travel)
    # Shoulder sits above the hip: the segment shoulder -> hip deviates by torso_lean
    rad = math.radians(torso_lean)
    shoulder = (HIP[0] - TORSO * math.sin(rad), HIP[1] - TORSO * math.cos(rad))
    nose = (shoulder[0], shoulder[1] - 40.0)

    left = {
        BodyLandmark.NOSE: nose,
        BodyLandmark.LEFT_SHOULDER: shoulder,
        BodyLandmark.LEFT_HIP: HIP,
        BodyLandmark.LEFT_KNEE: knee,
        BodyLandmark.LEFT_ANKLE: ankle,
    }
    points = {lm: (x, y, visibility) for lm, (x, y) in left.items()}
    for left_lm, right_lm in (
        (BodyLandmark.LEFT_SHOULDER, BodyLandmark.RIGHT_SHOULDER),
        (BodyLandmark.LEFT_HIP, BodyLandmark.RIGHT_HIP),
        (BodyLandmark.LEFT_KNEE, BodyLandmark.RIGHT_KNEE),
        (BodyLandmark.LEFT_ANKLE, BodyLandmark.RIGHT_ANKLE),
    ):
        x, y = left[left_lm]
        points[right_lm] = (x + 10.0, y, visibility)

    for landmark in drop:
        points.pop(landmark, None)
    return points


def squat_frame(hip_knee: float, timestamp_ms: Optional[float] = None, **kwargs) -> LandmarkFrame:
    return LandmarkFrame.from_points(squat_points(hip_knee, **kwargs), timestamp_ms=timestamp_ms)


def pushup_frame(
    elbow: float,
    hip_line: float = 180.0,
    timestamp_ms: Optional[float] = None,
    visibility: float = 0.9
) -> LandmarkFrame:
    """Side-view push-up with the given elbow and shoulder-hip-ankle angles."""
    shoulder = (200.0, 200.0)
    elbow_pt = (200.0, 300.0)
    # Ray elbow -> shoulder points up (-90 deg); the wrist ray is rotated by ``elbow``
    wrist_dir = math.radians(-90.0 + elbow)
    wrist = (elbow_pt[0] + 100.0 * math.cos(wrist_dir), elbow_pt[1] + 100.0 * math.sin(wrist_dir))

    hip = (400.0, 200.0)
    # Ray hip -> shoulder points left (180 deg); the ankle ray is rotated by ``hip_line``
    ankle_dir = math.radians(180.0 + hip_line)
    ankle = (hip[0] + 300.0 * math.cos(ankle_dir), hip[1] + 300.0 * math.sin(ankle_dir))

    return LandmarkFrame.from_points(
        {
            BodyLandmark.LEFT_SHOULDER: (*shoulder, visibility),
            BodyLandmark.LEFT_ELBOW: (*elbow_pt, visibility),
            BodyLandmark.LEFT_WRIST: (*wrist, visibility),
            BodyLandmark.LEFT_HIP: (*hip, visibility),
            BodyLandmark.LEFT_ANKLE: (*ankle, visibility),
        },
        timestamp_ms=timestamp_ms
    )


def ramp(start: float, end: float, step: float) -> List[float]:
    """Values from start towards end (exclusive of start, inclusive of end)."""
    values = []
    current = start
    direction = 1.0 if end >= start else -1.0
    while (end - current) * direction > 1e-9:
        current = current + direction * min(step, abs(end - current))
        values.append(current)
    return values


def squat_cycle(hold: int = 15) -> List[float]:
    """Stand, descend gradually, hold at the bottom, rise, stand."""
    return (
        [20.0] * 5
        + ramp(20.0, 85.0, 5.0)
        + [85.0] * hold
        + ramp(85.0, 20.0, 5.0)
        + [20.0] * hold
    )


def pushup_cycle(hold: int = 15) -> List[float]:
    return (
        [170.0] * 5
        + ramp(170.0, 70.0, 5.0)
        + [70.0] * hold
        + ramp(70.0, 170.0, 5.0)
        + [170.0] * hold
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        return self.now_ms

    def advance(self, ms: float):
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
