"""
Per-frame form feedback and per-repetition form verdict.

Each exercise profile lists form rules on auxiliary angles. A rule has two
limits:
- INFORMATIONAL: past the first limit the rule's message is shown, but the
  repetition is still good.
- SEVERE: past the second, wider limit the in-progress verdict turns bad and
  stays bad until the next repetition begins.

The start phase is always reported as good form; no rule applies while the
athlete is resting between reps.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, TYPE_CHECKING
from enum import Enum
import logging

from repcounter.cv.phase_classifier import Phase

if TYPE_CHECKING:
    from repcounter.cv.exercise_profiles import ExerciseProfile

logger = logging.getLogger(__name__)

GOOD_FORM_MESSAGE = "Good form!"


class Severity(Enum):
    OK = "ok"
    INFORMATIONAL = "informational"
    SEVERE = "severe"


@dataclass(frozen=True)
class FormRule:
    """
    Two-tier limit on one auxiliary angle.

    With ``above=True`` the rule fires when the angle exceeds the limits,
    otherwise when it drops below them.
    """
    angle: str
    informational_limit: float
    severe_limit: float
    message: str
    above: bool = True

    def __post_init__(self):
        wider = self.severe_limit >= self.informational_limit if self.above \
            else self.severe_limit <= self.informational_limit
        if not wider:
            raise ValueError(f"Severe limit of '{self.angle}' must be wider than informational limit")

    def severity(self, value: float) -> Severity:
        if self.above:
            if value > self.severe_limit:
                return Severity.SEVERE
            if value > self.informational_limit:
                return Severity.INFORMATIONAL
        else:
            if value < self.severe_limit:
                return Severity.SEVERE
            if value < self.informational_limit:
                return Severity.INFORMATIONAL
        return Severity.OK


class FormEvaluator:
    """Tracks the form verdict of the repetition in progress."""

    def __init__(self):
        self.verdict = True

    def evaluate(
        self,
        aux_angles: Dict[str, float],
        phase: Phase,
        profile: "ExerciseProfile"
    ) -> Tuple[bool, str]:
        """
        Judge one frame.

        Returns:
            Tuple of (passed, feedback message). ``passed`` is False only for
            severe violations, which also turn the in-progress verdict bad.
        """
        if phase == profile.start_phase:
            return True, GOOD_FORM_MESSAGE

        informational: Optional[str] = None
        for rule in profile.form_rules:
            value = aux_angles.get(rule.angle)
            if value is None:
                continue

            severity = rule.severity(value)
            if severity == Severity.SEVERE:
                if self.verdict:
                    logger.info(
                        f"Severe form violation on {rule.angle}: {value:.1f} "
                        f"(limit {rule.severe_limit:.1f}) during {phase.value}"
                    )
                self.verdict = False
                return False, rule.message
            if severity == Severity.INFORMATIONAL and informational is None:
                informational = rule.message

        if informational is not None:
            return True, informational
        return True, profile.phase_messages.get(phase, GOOD_FORM_MESSAGE)

    def reset(self):
        """Start judging a new repetition."""
        self.verdict = True
