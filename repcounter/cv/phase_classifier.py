"""
Angle -> discrete exercise phase.

The classifier is exercise-agnostic: it only compares the smoothed primary
angle against the three-band threshold table of the active profile. Bands
are inclusive on both bounds. Any angle outside all bands (including the
gaps between them) is TRANSITIONING.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING
from enum import Enum

if TYPE_CHECKING:
    from repcounter.cv.exercise_profiles import ExerciseProfile


class Phase(Enum):
    """Discretized exercise position (S1/S2/S3)."""
    NEUTRAL = "neutral"              # S1: start / resting position
    TRANSITIONING = "transitioning"  # S2: moving between positions
    PEAK = "peak"                    # S3: bottom of the squat, chest down on a push-up


@dataclass(frozen=True)
class AngleBand:
    """Inclusive angle range in degrees."""
    lower: float
    upper: float

    def __post_init__(self):
        if self.lower > self.upper:
            raise ValueError(f"Invalid band: {self.lower} > {self.upper}")

    def contains(self, angle: float) -> bool:
        return self.lower <= angle <= self.upper


@dataclass(frozen=True)
class PhaseThresholds:
    """Threshold table for one exercise."""
    neutral: AngleBand
    transitioning: AngleBand
    peak: AngleBand


def classify_angle(angle: float, thresholds: PhaseThresholds) -> Phase:
    if thresholds.neutral.contains(angle):
        return Phase.NEUTRAL
    if thresholds.peak.contains(angle):
        return Phase.PEAK
    return Phase.TRANSITIONING


def classify(smoothed_angle: float, profile: "ExerciseProfile") -> Phase:
    """Classify the smoothed primary angle using the profile's threshold table."""
    return classify_angle(smoothed_angle, profile.thresholds)
