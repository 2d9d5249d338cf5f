"""
Repetition detection over a log of phase transitions.

The instantaneous phase is a three-state signal (NEUTRAL / TRANSITIONING /
PEAK), but reps are detected on the condensed transition log: consecutive
identical phases are collapsed, so the log only records changes.

A cycle completes when the log contains the ordered subsequence
START ... PEAK ... START. The cycle is consumed from the log; the closing
START stays as the opening entry of the next repetition.

A completed cycle is resolved once the cooldown since the previous rep has
elapsed, on the completing frame or on a later one:
- with bad form: the attempt is rejected (cooldown restarts)
- otherwise: the counter increments (cooldown restarts)
Cycles completing while one is already waiting merge into it, so the
cooldown window yields at most one rep.
"""

from dataclasses import dataclass
from typing import Deque, Optional, Sequence, Tuple
from collections import deque
from enum import Enum
import logging

from repcounter.cv.phase_classifier import Phase

logger = logging.getLogger(__name__)


def find_cycle(log: Sequence[Phase], start: Phase, peak: Phase) -> Optional[Tuple[int, int, int]]:
    """
    Find the first ordered subsequence start ... peak ... start in the log.

    Returns:
        Indices (start, peak, end) of the match, or None
    """
    start_index = None
    peak_index = None

    for index, phase in enumerate(log):
        if start_index is None:
            if phase == start:
                start_index = index
        elif peak_index is None:
            if phase == peak:
                peak_index = index
        elif phase == start:
            return start_index, peak_index, index

    return None


class RepOutcome(Enum):
    """What happened to a completed cycle."""
    COUNTED = "counted"
    REJECTED = "rejected"        # Bad form, not counted
    COOLDOWN = "cooldown"        # Completed too soon; resolved once the cooldown elapses


@dataclass
class RepEvent:
    """A start -> peak -> start cycle completed or resolved on this frame."""
    outcome: RepOutcome
    rep_count: int
    timestamp_ms: float

    @property
    def counted(self) -> bool:
        return self.outcome == RepOutcome.COUNTED


class RepetitionStateMachine:
    """
    Counts repetitions from a stream of classified phases.

    The counter is monotonically non-decreasing; only ``reset`` with
    ``reset_count=True`` zeroes it.
    """

    def __init__(
        self,
        start_phase: Phase = Phase.NEUTRAL,
        peak_phase: Phase = Phase.PEAK,
        log_size: int = 5,
        cooldown_ms: float = 1500.0
    ):
        if log_size < 3:
            raise ValueError("log_size must hold at least start, peak and start")

        self.start_phase = start_phase
        self.peak_phase = peak_phase
        self.log_size = log_size
        self.cooldown_ms = cooldown_ms

        self._log: Deque[Phase] = deque(maxlen=log_size)
        self.rep_count = 0
        self.last_rep_ms: Optional[float] = None
        self.last_phase: Optional[Phase] = None

        # Form verdict of a completed cycle waiting for the cooldown
        self._pending_form_ok: Optional[bool] = None

    @property
    def phase_log(self) -> Tuple[Phase, ...]:
        return tuple(self._log)

    @property
    def pending(self) -> bool:
        """True while a completed cycle waits for the cooldown to elapse."""
        return self._pending_form_ok is not None

    def configure(self, start_phase: Phase, peak_phase: Phase):
        """Switch the phase pattern (on exercise change)."""
        self.start_phase = start_phase
        self.peak_phase = peak_phase

    def update(self, phase: Phase, timestamp_ms: float, form_ok: bool = True) -> Optional[RepEvent]:
        """
        Record the phase of one frame.

        Args:
            phase: Classified phase of the current frame
            timestamp_ms: Current time in milliseconds
            form_ok: Form verdict of the repetition in progress

        Returns:
            RepEvent if a cycle completed or was resolved on this frame, None otherwise
        """
        self.last_phase = phase
        completed = False

        if not self._log or self._log[-1] != phase:
            self._log.append(phase)
            match = find_cycle(self._log, self.start_phase, self.peak_phase)
            if match is not None:
                completed = True
                remaining = list(self._log)[match[2]:]
                self._log.clear()
                self._log.extend(remaining)
                if self._pending_form_ok is None:
                    self._pending_form_ok = form_ok
                else:
                    self._pending_form_ok = self._pending_form_ok and form_ok

        if self._pending_form_ok is None:
            return None

        if self.last_rep_ms is not None and timestamp_ms - self.last_rep_ms < self.cooldown_ms:
            if completed:
                logger.info(
                    f"Cycle deferred: {timestamp_ms - self.last_rep_ms:.0f}ms since last rep "
                    f"< cooldown {self.cooldown_ms:.0f}ms"
                )
                return RepEvent(RepOutcome.COOLDOWN, self.rep_count, timestamp_ms)
            return None

        form_ok = self._pending_form_ok
        self._pending_form_ok = None
        self.last_rep_ms = timestamp_ms

        if not form_ok:
            logger.info(f"Rep rejected for form at {timestamp_ms:.0f}ms (count stays {self.rep_count})")
            return RepEvent(RepOutcome.REJECTED, self.rep_count, timestamp_ms)

        self.rep_count += 1
        logger.info(f"Rep #{self.rep_count} counted at {timestamp_ms:.0f}ms")
        return RepEvent(RepOutcome.COUNTED, self.rep_count, timestamp_ms)

    def reset(self, reset_count: bool = True):
        """Clear the log, cooldown and any waiting cycle; zero the counter only when asked."""
        self._log.clear()
        self._pending_form_ok = None
        self.last_rep_ms = None
        self.last_phase = None
        if reset_count:
            self.rep_count = 0
