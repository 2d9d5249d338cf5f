"""Exercise session schemas."""

from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from repcounter.cv.exercise_profiles import ExerciseType, get_profile
from repcounter.cv.exercise_session import ClassificationResult
from repcounter.cv.landmarks import BodyLandmark, LandmarkFrame
from repcounter.cv.vitals import VitalSigns


def _validate_exercise(v: str) -> str:
    return get_profile(v).name


class SessionCreate(BaseModel):
    """Schema for starting a session."""
    exercise: str = Field(..., description="Exercise type: squat or pushup")

    @field_validator("exercise")
    @classmethod
    def validate_exercise(cls, v: str) -> str:
        return _validate_exercise(v)


class ExerciseSwitchRequest(BaseModel):
    """Schema for changing the exercise of a running session."""
    exercise: str
    reset_count: Optional[bool] = None  # None = server default

    @field_validator("exercise")
    @classmethod
    def validate_exercise(cls, v: str) -> str:
        return _validate_exercise(v)


class LandmarkIn(BaseModel):
    """Single landmark as produced by the pose estimator."""
    name: str = Field(..., description="Landmark name, e.g. LEFT_HIP")
    x: float
    y: float
    visibility: float = Field(1.0, ge=0.0, le=1.0)

    class Config:
        allow_inf_nan = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return BodyLandmark.parse(v).name


class FrameRequest(BaseModel):
    """One frame of landmarks."""
    timestamp_ms: Optional[float] = None
    landmarks: List[LandmarkIn] = Field(default_factory=list)

    def to_frame(self) -> LandmarkFrame:
        return LandmarkFrame.from_points(
            {lm.name: (lm.x, lm.y, lm.visibility) for lm in self.landmarks},
            timestamp_ms=self.timestamp_ms
        )


class ClassificationResponse(BaseModel):
    """Schema for per-frame classification output."""
    phase: str
    confidence: float
    rep_count: int
    angle: float
    feedback: str
    rep_outcome: Optional[str] = None  # counted / rejected / cooldown

    @classmethod
    def from_result(cls, result: ClassificationResult) -> "ClassificationResponse":
        return cls(
            phase=result.phase,
            confidence=result.confidence,
            rep_count=result.rep_count,
            angle=result.angle,
            feedback=result.feedback,
            rep_outcome=result.rep_event.outcome.value if result.rep_event else None
        )


class VitalsRequest(BaseModel):
    """Latest vital-sign readings."""
    heart_rate: Optional[int] = Field(None, ge=0)
    spo2: Optional[int] = Field(None, ge=0, le=100)
    breathing_rate: Optional[int] = Field(None, ge=0)

    def to_vitals(self) -> VitalSigns:
        return VitalSigns(
            heart_rate=self.heart_rate,
            spo2=self.spo2,
            breathing_rate=self.breathing_rate
        )


class VitalsResponse(BaseModel):
    paused: bool
    warnings: List[str]


class SessionResponse(BaseModel):
    """Schema for session state."""
    id: str
    exercise: str
    rep_count: int
    paused: bool
    frames_processed: int
    frames_skipped: int
    frames_paused: int
    natural_movement: bool
    movement_too_regular: bool


class ExerciseListResponse(BaseModel):
    exercises: List[str] = Field(default_factory=lambda: [e.value for e in ExerciseType])
