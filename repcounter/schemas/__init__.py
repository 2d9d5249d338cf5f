"""Pydantic schemas for API request/response models."""

from repcounter.schemas.session import (
    SessionCreate,
    SessionResponse,
    ExerciseSwitchRequest,
    ExerciseListResponse,
    LandmarkIn,
    FrameRequest,
    ClassificationResponse,
    VitalsRequest,
    VitalsResponse,
)

__all__ = [
    "SessionCreate",
    "SessionResponse",
    "ExerciseSwitchRequest",
    "ExerciseListResponse",
    "LandmarkIn",
    "FrameRequest",
    "ClassificationResponse",
    "VitalsRequest",
    "VitalsResponse",
]
