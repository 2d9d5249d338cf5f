"""
Scalar angle smoothing with single-frame outlier rejection.

A mis-detected landmark in one frame produces a one-frame spike in the
derived angle. Samples that jump more than ``max_delta`` away from the last
buffered sample are rejected: the previous output is held and the buffer is
left unchanged.

With ``max_outlier_frames`` set, a jump that persists for more than that
many consecutive frames is real motion and is accepted again. The output
still moves at most ``max_delta`` per frame.
"""

import numpy as np
from typing import Deque, Optional, Tuple
from collections import deque
import logging

logger = logging.getLogger(__name__)


class AngleSmoother:
    """Linear recency-weighted average over the last few accepted angles."""

    def __init__(
        self,
        buffer_size: int = 5,
        max_delta: float = 15.0,
        max_outlier_frames: Optional[int] = None,
        name: str = "angle"
    ):
        """
        Initialize smoother.

        Args:
            buffer_size: Number of accepted samples averaged
            max_delta: Largest plausible change per frame (degrees)
            max_outlier_frames: Consecutive rejections after which a jump is
                accepted; None rejects jumps indefinitely
            name: Angle name for logging
        """
        self.buffer_size = buffer_size
        self.max_delta = max_delta
        self.max_outlier_frames = max_outlier_frames
        self.name = name

        self._buffer: Deque[float] = deque(maxlen=buffer_size)
        self._last_output: Optional[float] = None
        self._consecutive_outliers = 0
        self.rejected_count = 0

    @property
    def buffer(self) -> Tuple[float, ...]:
        return tuple(self._buffer)

    @property
    def last_output(self) -> Optional[float]:
        return self._last_output

    def smooth(self, raw_angle: float) -> float:
        """Add a raw sample and return the smoothed angle."""
        if not np.isfinite(raw_angle):
            self.rejected_count += 1
            logger.debug(f"Non-finite sample rejected on {self.name}")
            return self._last_output if self._last_output is not None else 0.0

        if self._buffer:
            jump = abs(raw_angle - self._buffer[-1])
            if jump > self.max_delta:
                self._consecutive_outliers += 1
                if self.max_outlier_frames is None or self._consecutive_outliers <= self.max_outlier_frames:
                    self.rejected_count += 1
                    logger.debug(
                        f"Outlier rejected on {self.name}: {raw_angle:.1f} "
                        f"(jump {jump:.1f} > {self.max_delta:.1f})"
                    )
                    return self._last_output
                logger.debug(
                    f"Sustained change on {self.name} accepted after "
                    f"{self._consecutive_outliers - 1} rejected frames"
                )

        self._consecutive_outliers = 0
        self._buffer.append(float(raw_angle))

        weights = np.arange(1, len(self._buffer) + 1, dtype=float)
        smoothed = float(np.average(np.asarray(self._buffer, dtype=float), weights=weights))

        # Never move further than max_delta from the previous output
        if self._last_output is not None:
            smoothed = float(np.clip(
                smoothed,
                self._last_output - self.max_delta,
                self._last_output + self.max_delta
            ))

        self._last_output = smoothed
        return smoothed

    def reset(self):
        self._buffer.clear()
        self._last_output = None
        self._consecutive_outliers = 0
        self.rejected_count = 0
