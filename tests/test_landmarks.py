"""Tests for the landmark data model and pose-estimator adapters."""

from types import SimpleNamespace

import pytest

from repcounter.cv.landmarks import BodyLandmark, Landmark, LandmarkFrame


class TestBodyLandmark:

    def test_parse_name(self):
        assert BodyLandmark.parse("left_hip") == BodyLandmark.LEFT_HIP
        assert BodyLandmark.parse(" RIGHT_ANKLE ") == BodyLandmark.RIGHT_ANKLE

    def test_parse_index_and_member(self):
        assert BodyLandmark.parse(0) == BodyLandmark.NOSE
        assert BodyLandmark.parse(BodyLandmark.LEFT_KNEE) is BodyLandmark.LEFT_KNEE

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            BodyLandmark.parse("left_tail")
        with pytest.raises(ValueError):
            BodyLandmark.parse(99)

    def test_mediapipe_topology(self):
        assert len(BodyLandmark) == 33
        assert BodyLandmark.LEFT_SHOULDER == 11
        assert BodyLandmark.RIGHT_FOOT_INDEX == 32


class TestLandmarkFrame:

    def test_from_points_default_visibility(self):
        frame = LandmarkFrame.from_points({"LEFT_HIP": (1, 2)}, timestamp_ms=10.0)
        hip = frame.get(BodyLandmark.LEFT_HIP)

        assert hip == Landmark(BodyLandmark.LEFT_HIP, 1.0, 2.0, 1.0)
        assert frame.timestamp_ms == 10.0
        assert len(frame) == 1

    def test_from_points_mixed_keys(self):
        frame = LandmarkFrame.from_points({
            BodyLandmark.NOSE: (0, 0, 0.5),
            23: (1, 1, 0.9),
            "left_knee": (2, 2, 0.8),
        })
        assert BodyLandmark.NOSE in frame
        assert BodyLandmark.LEFT_HIP in frame
        assert frame.get(BodyLandmark.LEFT_KNEE).visibility == pytest.approx(0.8)
        assert frame.get(BodyLandmark.RIGHT_KNEE) is None

    def test_all_visible(self):
        frame = LandmarkFrame.from_points({
            BodyLandmark.LEFT_HIP: (0, 0, 0.9),
            BodyLandmark.LEFT_KNEE: (0, 0, 0.65),
        })
        assert frame.all_visible([BodyLandmark.LEFT_HIP], 0.65)
        # Visibility must be strictly above the floor
        assert not frame.all_visible([BodyLandmark.LEFT_KNEE], 0.65)
        assert not frame.all_visible([BodyLandmark.LEFT_HIP, BodyLandmark.LEFT_ANKLE], 0.65)
        assert frame.all_visible([], 0.65)

    def test_non_finite_points_dropped(self):
        frame = LandmarkFrame.from_points({
            "LEFT_HIP": (float("nan"), 1.0),
            "LEFT_KNEE": (1.0, float("inf"), 0.9),
            "LEFT_ANKLE": (1.0, 1.0, float("nan")),
            "NOSE": (1.0, 1.0),
        })
        assert len(frame) == 1
        assert BodyLandmark.NOSE in frame

    def test_non_finite_landmark_not_visible(self):
        frame = LandmarkFrame({
            BodyLandmark.LEFT_HIP: Landmark(BodyLandmark.LEFT_HIP, float("nan"), 0.0, 0.99),
        })
        assert not frame.all_visible([BodyLandmark.LEFT_HIP], 0.65)

    def test_from_mediapipe_tasks(self):
        points = [SimpleNamespace(x=0.5, y=0.25, visibility=0.9) for _ in range(33)]
        points[BodyLandmark.NOSE] = SimpleNamespace(x=0.1, y=0.2, visibility=None)
        result = SimpleNamespace(pose_landmarks=[points])

        frame = LandmarkFrame.from_mediapipe_tasks(result, timestamp_ms=5.0, frame_width=640, frame_height=480)

        assert len(frame) == 33
        hip = frame.get(BodyLandmark.LEFT_HIP)
        assert hip.x == pytest.approx(320.0)
        assert hip.y == pytest.approx(120.0)
        assert hip.visibility == pytest.approx(0.9)
        assert frame.get(BodyLandmark.NOSE).visibility == pytest.approx(0.5)
        assert frame.timestamp_ms == 5.0

    def test_from_mediapipe_tasks_no_person(self):
        frame = LandmarkFrame.from_mediapipe_tasks(SimpleNamespace(pose_landmarks=[]), timestamp_ms=1.0)
        assert len(frame) == 0
        assert frame.timestamp_ms == 1.0
