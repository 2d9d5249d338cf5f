"""
Exercise profiles: all per-exercise data in one table.

A profile selects the primary angle, the phase threshold table, the joints
that must be visible, the form rules and the phase pattern of one
repetition. Classifier, state machine and form evaluator are generic over
profiles.

SQUAT (side view):
    Primary angle is the thigh's deviation from vertical (hip -> knee).
    Standing is a LOW angle, the bottom of the squat is a HIGH angle.
PUSHUP (side view):
    Primary angle is the elbow (shoulder-elbow-wrist). Arms extended is a
    HIGH angle, chest down is a LOW angle.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union
from enum import Enum

from repcounter.cv.form_evaluator import FormRule
from repcounter.cv.geometry import AngleDefinition, AngleKind
from repcounter.cv.landmarks import BodyLandmark
from repcounter.cv.phase_classifier import AngleBand, Phase, PhaseThresholds


class ExerciseType(Enum):
    """Supported exercises."""
    SQUAT = "squat"
    PUSHUP = "pushup"


@dataclass(frozen=True)
class ExerciseProfile:
    """Immutable configuration for one exercise type."""
    exercise: ExerciseType
    primary_angle: AngleDefinition
    thresholds: PhaseThresholds
    required_landmarks: Tuple[BodyLandmark, ...]
    aux_angles: Tuple[AngleDefinition, ...] = ()
    form_rules: Tuple[FormRule, ...] = ()
    start_phase: Phase = Phase.NEUTRAL
    peak_phase: Phase = Phase.PEAK
    phase_messages: Dict[Phase, str] = field(default_factory=dict)

    def __post_init__(self):
        names = {angle.name for angle in self.aux_angles}
        for rule in self.form_rules:
            if rule.angle not in names:
                raise ValueError(f"Form rule uses unknown angle '{rule.angle}'")

    @property
    def name(self) -> str:
        return self.exercise.value


SQUAT_PROFILE = ExerciseProfile(
    exercise=ExerciseType.SQUAT,
    primary_angle=AngleDefinition(
        name="hip_knee",
        kind=AngleKind.VERTICAL,
        landmarks=(BodyLandmark.LEFT_HIP, BodyLandmark.LEFT_KNEE),
    ),
    thresholds=PhaseThresholds(
        neutral=AngleBand(0.0, 40.0),
        transitioning=AngleBand(41.0, 70.0),
        peak=AngleBand(71.0, 180.0),
    ),
    required_landmarks=(
        BodyLandmark.LEFT_SHOULDER,
        BodyLandmark.RIGHT_SHOULDER,
        BodyLandmark.LEFT_HIP,
        BodyLandmark.RIGHT_HIP,
        BodyLandmark.LEFT_KNEE,
        BodyLandmark.RIGHT_KNEE,
        BodyLandmark.LEFT_ANKLE,
        BodyLandmark.RIGHT_ANKLE,
    ),
    aux_angles=(
        AngleDefinition(
            name="torso_lean",
            kind=AngleKind.VERTICAL,
            landmarks=(BodyLandmark.LEFT_SHOULDER, BodyLandmark.LEFT_HIP),
        ),
        AngleDefinition(
            name="knee_travel",
            kind=AngleKind.VERTICAL,
            landmarks=(BodyLandmark.LEFT_KNEE, BodyLandmark.LEFT_ANKLE),
        ),
    ),
    form_rules=(
        FormRule(
            angle="torso_lean",
            informational_limit=45.0,
            severe_limit=60.0,
            message="Keep your back straight - don't lean forward",
        ),
        FormRule(
            angle="knee_travel",
            informational_limit=30.0,
            severe_limit=45.0,
            message="Keep your knees behind your toes",
        ),
    ),
    phase_messages={
        Phase.TRANSITIONING: "Moving - maintain form",
        Phase.PEAK: "Hold position",
    },
)

PUSHUP_PROFILE = ExerciseProfile(
    exercise=ExerciseType.PUSHUP,
    primary_angle=AngleDefinition(
        name="elbow",
        kind=AngleKind.INCLUDED,
        landmarks=(BodyLandmark.LEFT_SHOULDER, BodyLandmark.LEFT_ELBOW, BodyLandmark.LEFT_WRIST),
        fold_reflex=True,
    ),
    thresholds=PhaseThresholds(
        neutral=AngleBand(150.0, 180.0),
        transitioning=AngleBand(91.0, 149.0),
        peak=AngleBand(0.0, 90.0),
    ),
    required_landmarks=(
        BodyLandmark.LEFT_SHOULDER,
        BodyLandmark.LEFT_ELBOW,
        BodyLandmark.LEFT_WRIST,
        BodyLandmark.LEFT_HIP,
        BodyLandmark.LEFT_ANKLE,
    ),
    aux_angles=(
        AngleDefinition(
            name="hip_line",
            kind=AngleKind.INCLUDED,
            landmarks=(BodyLandmark.LEFT_SHOULDER, BodyLandmark.LEFT_HIP, BodyLandmark.LEFT_ANKLE),
            fold_reflex=True,
        ),
    ),
    form_rules=(
        FormRule(
            angle="hip_line",
            informational_limit=160.0,
            severe_limit=145.0,
            message="Keep your body in a straight line - don't let your hips sag",
            above=False,
        ),
    ),
    phase_messages={
        Phase.TRANSITIONING: "Moving - maintain form",
        Phase.PEAK: "Push back up",
    },
)

PROFILES: Dict[ExerciseType, ExerciseProfile] = {
    ExerciseType.SQUAT: SQUAT_PROFILE,
    ExerciseType.PUSHUP: PUSHUP_PROFILE,
}


def get_profile(exercise: Union[str, ExerciseType, ExerciseProfile]) -> ExerciseProfile:
    """
    Look up a profile by exercise type or name.

    Raises:
        ValueError: for unsupported exercises
    """
    if isinstance(exercise, ExerciseProfile):
        return exercise
    if isinstance(exercise, str):
        try:
            exercise = ExerciseType(exercise.strip().lower().replace("-", ""))
        except ValueError:
            raise ValueError(f"Unsupported exercise: {exercise}") from None
    return PROFILES[exercise]
