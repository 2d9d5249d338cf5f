"""
Body landmark data model.

A frame is a set of named 2D body joints produced by an external pose
estimator (MediaPipe / ML Kit use the same 33-point topology). Coordinates
are in frame-pixel space, visibility is the detector's confidence in [0, 1].
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union
from enum import IntEnum


class BodyLandmark(IntEnum):
    """Pose landmark indices shared by MediaPipe Pose and ML Kit."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32

    @classmethod
    def parse(cls, value: Union[str, int, "BodyLandmark"]) -> "BodyLandmark":
        """Resolve a landmark from its enum, index or (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown landmark: {value}") from None


@dataclass(frozen=True)
class Landmark:
    """Single detected joint with 2D position and visibility."""
    landmark: BodyLandmark
    x: float
    y: float
    visibility: float = 1.0

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.visibility)

    def is_visible(self, threshold: float) -> bool:
        """Finite position with visibility strictly above the threshold."""
        return self.is_finite and self.visibility > threshold


@dataclass
class LandmarkFrame:
    """All landmarks detected in one camera frame."""
    landmarks: Dict[BodyLandmark, Landmark] = field(default_factory=dict)
    timestamp_ms: Optional[float] = None

    def get(self, landmark: BodyLandmark) -> Optional[Landmark]:
        return self.landmarks.get(landmark)

    def __contains__(self, landmark: BodyLandmark) -> bool:
        return landmark in self.landmarks

    def __len__(self) -> int:
        return len(self.landmarks)

    def all_visible(self, required: Iterable[BodyLandmark], threshold: float) -> bool:
        """Check that every required landmark is present above the visibility floor."""
        for landmark_type in required:
            landmark = self.landmarks.get(landmark_type)
            if landmark is None or not landmark.is_visible(threshold):
                return False
        return True

    @classmethod
    def from_points(
        cls,
        points: Mapping[Union[str, int, BodyLandmark], Tuple[float, ...]],
        timestamp_ms: Optional[float] = None
    ) -> "LandmarkFrame":
        """
        Build a frame from ``{landmark: (x, y)}`` or ``{landmark: (x, y, visibility)}``.

        Keys may be BodyLandmark members, indices or names. Points with
        non-finite values are dropped, as if the detector had not returned them.
        """
        landmarks: Dict[BodyLandmark, Landmark] = {}
        for key, values in points.items():
            landmark_type = BodyLandmark.parse(key)
            visibility = values[2] if len(values) > 2 else 1.0
            landmark = Landmark(
                landmark=landmark_type,
                x=float(values[0]),
                y=float(values[1]),
                visibility=float(visibility)
            )
            if landmark.is_finite:
                landmarks[landmark_type] = landmark
        return cls(landmarks=landmarks, timestamp_ms=timestamp_ms)

    @classmethod
    def from_mediapipe_tasks(
        cls,
        result,
        timestamp_ms: Optional[float] = None,
        frame_width: float = 1.0,
        frame_height: float = 1.0
    ) -> "LandmarkFrame":
        """
        Create a frame from a MediaPipe Tasks PoseLandmarkerResult.

        Only the first detected person is used. MediaPipe coordinates are
        normalized (0-1); pass the frame size to get pixel coordinates.
        """
        if not result.pose_landmarks or len(result.pose_landmarks) == 0:
            return cls(timestamp_ms=timestamp_ms)

        landmarks: Dict[BodyLandmark, Landmark] = {}
        for index, mp_landmark in enumerate(result.pose_landmarks[0]):
            if index >= len(BodyLandmark):
                break
            landmark_type = BodyLandmark(index)
            vis = mp_landmark.visibility if hasattr(mp_landmark, 'visibility') else 0.5
            landmark = Landmark(
                landmark=landmark_type,
                x=mp_landmark.x * frame_width,
                y=mp_landmark.y * frame_height,
                visibility=vis if vis is not None else 0.5
            )
            if landmark.is_finite:
                landmarks[landmark_type] = landmark

        return cls(landmarks=landmarks, timestamp_ms=timestamp_ms)
