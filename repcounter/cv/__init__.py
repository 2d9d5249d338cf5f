"""
Exercise repetition classification pipeline.

PIPELINE COMPONENTS:
1. LandmarkSmoother: Recency-weighted temporal smoothing of raw landmarks
2. Geometry: Vertical-reference and three-point joint angles
3. AngleSmoother: Weighted angle smoothing with outlier rejection
4. Phase classifier: Angle -> NEUTRAL / TRANSITIONING / PEAK per exercise
5. RepetitionStateMachine: start -> peak -> start detection with cooldown
6. FormEvaluator: Two-tier form feedback and per-rep verdict
7. ExerciseSession: Per-frame orchestration, reset and exercise switching

Usage:
    from repcounter.cv import ExerciseSession, LandmarkFrame

    session = ExerciseSession("squat")
    for points in detector_output:
        result = session.process_frame(LandmarkFrame.from_points(points))
        print(f"{result.phase}: {result.rep_count} reps - {result.feedback}")
"""

from repcounter.cv.landmarks import BodyLandmark, Landmark, LandmarkFrame
from repcounter.cv.landmark_smoother import LandmarkSmoother
from repcounter.cv.geometry import (
    AngleDefinition, AngleKind, vertical_angle, included_angle
)
from repcounter.cv.angle_smoother import AngleSmoother
from repcounter.cv.phase_classifier import (
    Phase, AngleBand, PhaseThresholds, classify, classify_angle
)
from repcounter.cv.form_evaluator import FormEvaluator, FormRule, Severity
from repcounter.cv.exercise_profiles import (
    ExerciseType, ExerciseProfile, SQUAT_PROFILE, PUSHUP_PROFILE, PROFILES, get_profile
)
from repcounter.cv.rep_state_machine import (
    RepetitionStateMachine, RepEvent, RepOutcome, find_cycle
)
from repcounter.cv.vitals import VitalSigns, VitalsCheck, check_vitals
from repcounter.cv.exercise_session import ExerciseSession, ClassificationResult

__all__ = [
    # Landmarks
    "BodyLandmark",
    "Landmark",
    "LandmarkFrame",

    # Smoothing
    "LandmarkSmoother",
    "AngleSmoother",

    # Geometry
    "AngleDefinition",
    "AngleKind",
    "vertical_angle",
    "included_angle",

    # Phase classification
    "Phase",
    "AngleBand",
    "PhaseThresholds",
    "classify",
    "classify_angle",

    # Form
    "FormEvaluator",
    "FormRule",
    "Severity",

    # Exercise profiles
    "ExerciseType",
    "ExerciseProfile",
    "SQUAT_PROFILE",
    "PUSHUP_PROFILE",
    "PROFILES",
    "get_profile",

    # Rep detection
    "RepetitionStateMachine",
    "RepEvent",
    "RepOutcome",
    "find_cycle",

    # Vital signs
    "VitalSigns",
    "VitalsCheck",
    "check_vitals",

    # Main pipeline
    "ExerciseSession",
    "ClassificationResult",
]
