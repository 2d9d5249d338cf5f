"""HTTP API tests."""

import pytest
from fastapi.testclient import TestClient

from conftest import FRAME_MS, squat_cycle, squat_points
from repcounter.api import sessions
from repcounter.main import app


@pytest.fixture
def client():
    registry = sessions._registry
    max_sessions = registry.max_sessions
    registry.clear()
    with TestClient(app) as test_client:
        yield test_client
    registry.clear()
    registry.max_sessions = max_sessions


def frame_payload(hip_knee, timestamp_ms=None, **kwargs):
    return {
        "timestamp_ms": timestamp_ms,
        "landmarks": [
            {"name": landmark.name, "x": x, "y": y, "visibility": visibility}
            for landmark, (x, y, visibility) in squat_points(hip_knee, **kwargs).items()
        ],
    }


def create(client, exercise="squat"):
    response = client.post("/api/sessions", json={"exercise": exercise})
    assert response.status_code == 201
    return response.json()["id"]


class TestService:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_list_exercises(self, client):
        response = client.get("/api/sessions/exercises")
        assert response.json() == {"exercises": ["squat", "pushup"]}

    def test_no_cors_by_default(self, client):
        response = client.options(
            "/api/sessions",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            }
        )
        assert "access-control-allow-origin" not in response.headers


class TestSessions:

    def test_create_and_get(self, client):
        response = client.post("/api/sessions", json={"exercise": "Push-Up"})
        assert response.status_code == 201
        body = response.json()
        assert body["exercise"] == "pushup"
        assert body["rep_count"] == 0
        assert body["paused"] is False

        fetched = client.get(f"/api/sessions/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == body["id"]

    def test_unsupported_exercise(self, client):
        response = client.post("/api/sessions", json={"exercise": "deadlift"})
        assert response.status_code == 422

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/missing").status_code == 404
        response = client.post("/api/sessions/missing/frames", json=frame_payload(20.0))
        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found"

    def test_delete(self, client):
        session_id = create(client)
        assert client.delete(f"/api/sessions/{session_id}").status_code == 204
        assert client.get(f"/api/sessions/{session_id}").status_code == 404

    def test_oldest_session_evicted_when_full(self, client):
        sessions._registry.max_sessions = 2
        first = create(client)
        second = create(client)
        third = create(client)

        assert client.get(f"/api/sessions/{first}").status_code == 404
        assert client.get(f"/api/sessions/{second}").status_code == 200
        assert client.get(f"/api/sessions/{third}").status_code == 200


class TestFrames:

    def test_count_squat(self, client):
        session_id = create(client)

        outcomes = []
        for i, angle in enumerate(squat_cycle()):
            response = client.post(
                f"/api/sessions/{session_id}/frames",
                json=frame_payload(angle, timestamp_ms=i * FRAME_MS)
            )
            assert response.status_code == 200
            body = response.json()
            if body["rep_outcome"]:
                outcomes.append(body["rep_outcome"])

        assert outcomes == ["counted"]
        assert body["rep_count"] == 1
        assert body["phase"] == "neutral"

    def test_incomplete_frame_asks_to_reposition(self, client):
        session_id = create(client)
        payload = frame_payload(20.0, timestamp_ms=0.0)
        payload["landmarks"] = [lm for lm in payload["landmarks"] if lm["name"] != "RIGHT_ANKLE"]

        body = client.post(f"/api/sessions/{session_id}/frames", json=payload).json()

        assert body["phase"] == "unknown"
        assert body["feedback"] == "Please step back to show full body"
        assert client.get(f"/api/sessions/{session_id}").json()["frames_skipped"] == 1

    def test_invalid_landmark_name(self, client):
        session_id = create(client)
        payload = {"landmarks": [{"name": "LEFT_TAIL", "x": 0, "y": 0}]}
        response = client.post(f"/api/sessions/{session_id}/frames", json=payload)
        assert response.status_code == 422

    def test_invalid_visibility(self, client):
        session_id = create(client)
        payload = {"landmarks": [{"name": "LEFT_HIP", "x": 0, "y": 0, "visibility": 1.5}]}
        response = client.post(f"/api/sessions/{session_id}/frames", json=payload)
        assert response.status_code == 422

    def test_non_finite_coordinate_rejected(self, client):
        session_id = create(client)
        response = client.post(
            f"/api/sessions/{session_id}/frames",
            content='{"landmarks": [{"name": "LEFT_KNEE", "x": NaN, "y": 0}]}',
            headers={"content-type": "application/json"}
        )
        assert response.status_code == 422
        assert client.get(f"/api/sessions/{session_id}").json()["frames_processed"] == 0


class TestControl:

    def test_vitals_pause_and_resume(self, client):
        session_id = create(client)

        response = client.post(f"/api/sessions/{session_id}/vitals", json={"heart_rate": 130, "spo2": 97})
        body = response.json()
        assert body["paused"] is True
        assert len(body["warnings"]) == 1

        frame = client.post(f"/api/sessions/{session_id}/frames", json=frame_payload(20.0, 0.0)).json()
        assert frame["phase"] == "paused"

        body = client.post(f"/api/sessions/{session_id}/vitals", json={"heart_rate": 80}).json()
        assert body == {"paused": False, "warnings": []}

        frame = client.post(f"/api/sessions/{session_id}/frames", json=frame_payload(20.0, 33.0)).json()
        assert frame["phase"] == "neutral"

    def test_switch_and_reset(self, client):
        session_id = create(client)
        for i, angle in enumerate(squat_cycle()):
            client.post(f"/api/sessions/{session_id}/frames", json=frame_payload(angle, i * FRAME_MS))

        body = client.put(f"/api/sessions/{session_id}/exercise", json={"exercise": "pushup"}).json()
        assert body["exercise"] == "pushup"
        assert body["rep_count"] == 1

        body = client.put(
            f"/api/sessions/{session_id}/exercise",
            json={"exercise": "squat", "reset_count": True}
        ).json()
        assert body["exercise"] == "squat"
        assert body["rep_count"] == 0

        body = client.post(f"/api/sessions/{session_id}/reset").json()
        assert body["rep_count"] == 0
        assert body["frames_processed"] == 0

    def test_switch_to_unknown_exercise(self, client):
        session_id = create(client)
        response = client.put(f"/api/sessions/{session_id}/exercise", json={"exercise": "burpee"})
        assert response.status_code == 422
