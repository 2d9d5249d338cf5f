"""
Temporal landmark smoothing using a recency-weighted moving average.

SMOOTHING STRATEGY:
1. Per-landmark history buffer of the last K raw samples
2. Cold start: fewer than 3 samples pass the raw position through
3. Weighted average with weights increasing with recency
   (exponential ``base ** index`` by default, linear ``index + 1`` optional)

Visibility is never averaged: the smoothed landmark carries the visibility
of the most recent raw sample.

The smoother also keeps a short history of how much the head and shoulders
move between frames, which is used to flag implausible input (a static
photo, or a picture slid in front of the camera).
"""

import numpy as np
from typing import Dict, List, Deque, Tuple
from collections import deque
import logging

from repcounter.cv.landmarks import BodyLandmark, Landmark, LandmarkFrame

logger = logging.getLogger(__name__)


class LandmarkSmoother:
    """
    Per-landmark weighted moving average smoother.

    Features:
    - Per-landmark smoothing history (oldest sample evicted on overflow)
    - Exponential or linear recency weighting
    - Movement plausibility tracking on head and shoulders
    """

    MIN_SAMPLES = 3

    # Landmarks that should move naturally on a real person
    MOVEMENT_LANDMARKS = (
        BodyLandmark.NOSE,
        BodyLandmark.LEFT_SHOULDER,
        BodyLandmark.RIGHT_SHOULDER,
    )
    MOVEMENT_HISTORY_SIZE = 15

    # Plausibility thresholds (pixels per frame)
    MAX_NATURAL_MOVEMENT = 60.0
    MIN_REGULAR_MOVEMENT = 3.0
    MAX_REGULAR_VARIANCE = 0.005

    def __init__(
        self,
        buffer_size: int = 20,
        weighting: str = "exponential",
        weight_base: float = 1.5
    ):
        """
        Initialize smoother.

        Args:
            buffer_size: Number of raw samples kept per landmark
            weighting: "exponential" (sharper recency bias) or "linear"
            weight_base: Base of the exponential weights, must be > 1
        """
        if weighting not in ("exponential", "linear"):
            raise ValueError(f"Unsupported weighting: {weighting}")
        if weighting == "exponential" and weight_base <= 1.0:
            raise ValueError("weight_base must be greater than 1")

        self.buffer_size = max(buffer_size, self.MIN_SAMPLES)
        self.weighting = weighting
        self.weight_base = weight_base

        # Per-landmark history: landmark -> deque of (x, y, visibility)
        self.history: Dict[BodyLandmark, Deque[Tuple[float, float, float]]] = {}

        # Mean head/shoulder displacement per frame
        self.movement_history: Deque[float] = deque(maxlen=self.MOVEMENT_HISTORY_SIZE)

        self._weights = self._build_weights(self.buffer_size)

    def _build_weights(self, size: int) -> np.ndarray:
        index = np.arange(size, dtype=float)
        if self.weighting == "linear":
            return index + 1.0
        return np.power(self.weight_base, index)

    def ingest(self, frame: LandmarkFrame) -> LandmarkFrame:
        """
        Add a frame of raw landmarks and return the smoothed frame.

        Landmarks missing from the input are missing from the output, and so
        are landmarks with non-finite coordinates; neither enters the history.
        """
        result = LandmarkFrame(timestamp_ms=frame.timestamp_ms)

        for landmark_type, landmark in frame.landmarks.items():
            if not landmark.is_finite:
                continue

            buffer = self.history.get(landmark_type)
            if buffer is None:
                buffer = deque(maxlen=self.buffer_size)
                self.history[landmark_type] = buffer

            buffer.append((landmark.x, landmark.y, landmark.visibility))

            if len(buffer) >= self.MIN_SAMPLES:
                smooth_x, smooth_y = self._weighted_position(buffer)
            else:
                smooth_x, smooth_y = landmark.x, landmark.y

            result.landmarks[landmark_type] = Landmark(
                landmark=landmark_type,
                x=smooth_x,
                y=smooth_y,
                visibility=landmark.visibility
            )

        self._record_movement()

        return result

    def _weighted_position(
        self,
        buffer: Deque[Tuple[float, float, float]]
    ) -> Tuple[float, float]:
        """Recency-weighted average over a landmark history buffer."""
        samples = np.asarray(buffer, dtype=float)
        weights = self._weights[:len(samples)]
        x = float(np.average(samples[:, 0], weights=weights))
        y = float(np.average(samples[:, 1], weights=weights))
        return x, y

    def _record_movement(self):
        """Record mean head/shoulder displacement between the last two samples."""
        distances: List[float] = []
        for landmark_type in self.MOVEMENT_LANDMARKS:
            buffer = self.history.get(landmark_type)
            if buffer is None or len(buffer) < 2:
                continue
            x1, y1, _ = buffer[-2]
            x2, y2, _ = buffer[-1]
            distances.append(float(np.hypot(x2 - x1, y2 - y1)))

        if distances:
            self.movement_history.append(float(np.mean(distances)))

    def has_natural_movement(self) -> bool:
        """
        False when head/shoulder movement is excessive for a real person.

        Always True until enough history has been collected; a person
        standing still is natural.
        """
        if len(self.movement_history) < 10:
            return True
        return float(np.mean(self.movement_history)) < self.MAX_NATURAL_MOVEMENT

    def is_movement_too_regular(self) -> bool:
        """True for steady, near-constant movement (a picture slid over the camera)."""
        if len(self.movement_history) < 12:
            return False
        movement = np.asarray(self.movement_history, dtype=float)
        return (
            float(movement.mean()) > self.MIN_REGULAR_MOVEMENT
            and float(movement.var()) < self.MAX_REGULAR_VARIANCE
        )

    def reset(self):
        """Reset all smoothing history."""
        self.history.clear()
        self.movement_history.clear()
        logger.debug("Landmark smoother reset")
