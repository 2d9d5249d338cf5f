"""
Per-frame exercise classification session.

PIPELINE (once per pose-estimation result, in arrival order):
1. Pause gate: vital signs out of range -> frame ignored
2. Visibility gate: required joints missing or low confidence -> "reposition"
3. Landmark smoothing (recency-weighted moving average)
4. Primary + auxiliary angle estimation
5. Angle smoothing with outlier rejection
6. Phase classification against the profile's threshold table
7. Form evaluation (feedback + in-progress verdict)
8. Repetition state machine (counts completed start -> peak -> start cycles)

Frames rejected by the gates leave every buffer, log and counter exactly as
they were, so tracking resumes seamlessly.

A session is not thread-safe; callers must serialize frames.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union
import logging

from repcounter.config import Settings, get_settings
from repcounter.cv.angle_smoother import AngleSmoother
from repcounter.cv.exercise_profiles import ExerciseProfile, ExerciseType, get_profile
from repcounter.cv.form_evaluator import FormEvaluator
from repcounter.cv.landmark_smoother import LandmarkSmoother
from repcounter.cv.landmarks import LandmarkFrame
from repcounter.cv.phase_classifier import classify
from repcounter.cv.rep_state_machine import RepEvent, RepetitionStateMachine
from repcounter.cv.vitals import VitalSigns, VitalsCheck, check_vitals

logger = logging.getLogger(__name__)

REPOSITION_MESSAGE = "Please step back to show full body"
UNKNOWN_PHASE = "unknown"
PAUSED_PHASE = "paused"


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class ClassificationResult:
    """Output record for one processed frame."""
    phase: str
    confidence: float
    rep_count: int
    angle: float
    feedback: str
    rep_event: Optional[RepEvent] = None

    @property
    def needs_repositioning(self) -> bool:
        return self.phase == UNKNOWN_PHASE


class ExerciseSession:
    """
    Owns all mutable classification state for one athlete and one exercise.

    Usage:
        session = ExerciseSession("squat")
        for frame in frames:
            result = session.process_frame(frame)
            print(result.phase, result.rep_count, result.feedback)
    """

    def __init__(
        self,
        exercise: Union[str, ExerciseType, ExerciseProfile] = ExerciseType.SQUAT,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize session.

        Args:
            exercise: Exercise type, name or a custom profile
            settings: Tunables (defaults to the cached application settings)
            clock: Returns the current time in milliseconds; read once per
                frame when the frame carries no timestamp
        """
        self.settings = settings or get_settings()
        self.profile = get_profile(exercise)
        self._clock = clock or monotonic_ms

        self._landmark_smoother = LandmarkSmoother(
            buffer_size=self.settings.landmark_buffer_size,
            weighting=self.settings.landmark_weighting,
            weight_base=self.settings.landmark_weight_base
        )
        self._state_machine = RepetitionStateMachine(
            start_phase=self.profile.start_phase,
            peak_phase=self.profile.peak_phase,
            log_size=self.settings.phase_log_size,
            cooldown_ms=self.settings.rep_cooldown_ms
        )
        self._form_evaluator = FormEvaluator()
        self._build_angle_smoothers()

        self.last_angle = 0.0
        self.vitals_check = VitalsCheck()

        # Frame statistics
        self.frames_processed = 0
        self.frames_skipped = 0
        self.frames_paused = 0

        logger.info(f"ExerciseSession initialized: {self.profile.name}")

    def _build_angle_smoothers(self):
        def make(name: str) -> AngleSmoother:
            return AngleSmoother(
                buffer_size=self.settings.angle_buffer_size,
                max_delta=self.settings.max_angle_change_degrees,
                max_outlier_frames=self.settings.max_outlier_frames,
                name=name
            )

        self._primary_smoother = make(self.profile.primary_angle.name)
        self._aux_smoothers: Dict[str, AngleSmoother] = {
            angle.name: make(angle.name) for angle in self.profile.aux_angles
        }

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def rep_count(self) -> int:
        return self._state_machine.rep_count

    @property
    def paused(self) -> bool:
        return self.vitals_check.should_pause

    @property
    def form_verdict(self) -> bool:
        return self._form_evaluator.verdict

    @property
    def landmark_smoother(self) -> LandmarkSmoother:
        return self._landmark_smoother

    @property
    def primary_smoother(self) -> AngleSmoother:
        return self._primary_smoother

    @property
    def aux_smoothers(self) -> Dict[str, AngleSmoother]:
        return self._aux_smoothers

    @property
    def state_machine(self) -> RepetitionStateMachine:
        return self._state_machine

    # ------------------------------------------------------------------
    # Frame processing
    # ------------------------------------------------------------------

    def process_frame(self, frame: LandmarkFrame) -> ClassificationResult:
        """
        Classify one frame of landmarks.

        Never raises for missing or degenerate landmark data.
        """
        if self.paused:
            self.frames_paused += 1
            return ClassificationResult(
                PAUSED_PHASE, 0.0, self.rep_count, self.last_angle, self.vitals_check.message
            )

        min_confidence = self.settings.min_landmark_confidence
        if not frame.all_visible(self.profile.required_landmarks, min_confidence):
            self.frames_skipped += 1
            logger.debug(f"Frame skipped: required landmarks not visible ({len(frame)} detected)")
            return ClassificationResult(
                UNKNOWN_PHASE, 0.0, self.rep_count, self.last_angle, REPOSITION_MESSAGE
            )

        now_ms = frame.timestamp_ms if frame.timestamp_ms is not None else self._clock()
        self.frames_processed += 1

        smoothed = self._landmark_smoother.ingest(frame)

        angle = self._primary_smoother.smooth(self.profile.primary_angle.measure(smoothed))
        aux_angles = {
            definition.name: self._aux_smoothers[definition.name].smooth(definition.measure(smoothed))
            for definition in self.profile.aux_angles
        }

        phase = classify(angle, self.profile)
        _, feedback = self._form_evaluator.evaluate(aux_angles, phase, self.profile)

        event = self._state_machine.update(phase, now_ms, self._form_evaluator.verdict)
        if phase == self.profile.start_phase:
            self._form_evaluator.reset()

        self.last_angle = angle

        return ClassificationResult(
            phase=phase.value,
            confidence=self._calculate_confidence(frame),
            rep_count=self.rep_count,
            angle=angle,
            feedback=feedback,
            rep_event=event
        )

    def _calculate_confidence(self, frame: LandmarkFrame) -> float:
        """Mean visibility of the required joints, 0 when below the floor."""
        visibilities = [
            frame.landmarks[landmark].visibility
            for landmark in self.profile.required_landmarks
            if landmark in frame
        ]
        if not visibilities:
            return 0.0
        confidence = sum(visibilities) / len(visibilities)
        return confidence if confidence > self.settings.min_landmark_confidence else 0.0

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def update_vitals(self, vitals: VitalSigns) -> VitalsCheck:
        """Recompute the pause flag from the latest vital signs."""
        was_paused = self.paused
        self.vitals_check = check_vitals(vitals, self.settings)

        if self.paused and not was_paused:
            logger.warning(f"Tracking paused: {'; '.join(self.vitals_check.warnings)}")
        elif was_paused and not self.paused:
            logger.info("Tracking resumed: vital signs back in range")

        return self.vitals_check

    def _clear_state(self, reset_count: bool):
        self._landmark_smoother.reset()
        self._primary_smoother.reset()
        for smoother in self._aux_smoothers.values():
            smoother.reset()
        self._state_machine.reset(reset_count=reset_count)
        self._form_evaluator.reset()
        self.last_angle = 0.0

    def switch_profile(
        self,
        exercise: Union[str, ExerciseType, ExerciseProfile],
        reset_count: Optional[bool] = None
    ):
        """
        Change exercise and clear all in-progress state.

        Args:
            exercise: New exercise type, name or profile
            reset_count: Zero the repetition counter too; defaults to
                ``settings.reset_count_on_switch``
        """
        if reset_count is None:
            reset_count = self.settings.reset_count_on_switch

        self.profile = get_profile(exercise)
        self._clear_state(reset_count=reset_count)
        self._state_machine.configure(self.profile.start_phase, self.profile.peak_phase)
        self._build_angle_smoothers()

        logger.info(f"Switched to {self.profile.name} (counter reset: {reset_count})")

    def reset(self):
        """Clear everything, including the counter and frame statistics."""
        self._clear_state(reset_count=True)
        self.frames_processed = 0
        self.frames_skipped = 0
        self.frames_paused = 0
        logger.info(f"Session reset ({self.profile.name})")

    def get_summary(self) -> Dict[str, Any]:
        return {
            "exercise": self.profile.name,
            "rep_count": self.rep_count,
            "frames_processed": self.frames_processed,
            "frames_skipped": self.frames_skipped,
            "frames_paused": self.frames_paused,
            "paused": self.paused,
            "natural_movement": self._landmark_smoother.has_natural_movement(),
            "movement_too_regular": self._landmark_smoother.is_movement_too_regular(),
        }
