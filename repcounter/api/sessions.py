"""Exercise session API endpoints."""

import time
import uuid
import logging
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, status

from repcounter.config import get_settings
from repcounter.cv.exercise_session import ExerciseSession
from repcounter.schemas.session import (
    SessionCreate,
    SessionResponse,
    ExerciseSwitchRequest,
    ExerciseListResponse,
    FrameRequest,
    ClassificationResponse,
    VitalsRequest,
    VitalsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class SessionRegistry:
    """
    In-process session store with idle eviction and a size cap.

    Handlers never await, so each request runs to completion on the event
    loop before the next one touches the registry.
    """

    def __init__(
        self,
        max_sessions: int = 100,
        idle_timeout_s: float = 1800.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_sessions = max_sessions
        self.idle_timeout_s = idle_timeout_s
        self._clock = clock
        # Insertion order doubles as least-recently-used order
        self._sessions: "OrderedDict[str, Tuple[ExerciseSession, float]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def add(self, session: ExerciseSession) -> str:
        now = self._clock()
        self._evict_idle(now)
        while len(self._sessions) >= self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Session {evicted_id} evicted: registry full ({self.max_sessions})")

        session_id = str(uuid.uuid4())
        self._sessions[session_id] = (session, now)
        return session_id

    def get(self, session_id: str) -> Optional[ExerciseSession]:
        """Look up a session and mark it as used."""
        now = self._clock()
        self._evict_idle(now)
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        self._sessions[session_id] = (entry[0], now)
        self._sessions.move_to_end(session_id)
        return entry[0]

    def remove(self, session_id: str):
        self._sessions.pop(session_id, None)

    def clear(self):
        self._sessions.clear()

    def _evict_idle(self, now: float):
        # Oldest first, so stop at the first session still in use
        while self._sessions:
            session_id, (_, last_used) = next(iter(self._sessions.items()))
            if now - last_used < self.idle_timeout_s:
                break
            del self._sessions[session_id]
            logger.info(f"Session {session_id} evicted after {now - last_used:.0f}s idle")


settings = get_settings()
_registry = SessionRegistry(
    max_sessions=settings.max_sessions,
    idle_timeout_s=settings.session_idle_timeout_s
)


def get_session(session_id: str) -> ExerciseSession:
    """Resolve a session or fail with 404."""
    session = _registry.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )
    return session


def _session_response(session_id: str, session: ExerciseSession) -> SessionResponse:
    summary = session.get_summary()
    return SessionResponse(id=session_id, **summary)


@router.get("/exercises", response_model=ExerciseListResponse)
async def list_exercises():
    """List supported exercises."""
    return ExerciseListResponse()


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(request: SessionCreate):
    """Start a new exercise session."""
    session = ExerciseSession(request.exercise, settings=settings)
    session_id = _registry.add(session)

    logger.info(f"Session {session_id} created ({request.exercise})")
    return _session_response(session_id, session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session_state(session_id: str, session: ExerciseSession = Depends(get_session)):
    """Get session counters and flags."""
    return _session_response(session_id, session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, session: ExerciseSession = Depends(get_session)):
    """End a session."""
    _registry.remove(session_id)
    logger.info(f"Session {session_id} deleted after {session.rep_count} reps")


@router.post("/{session_id}/frames", response_model=ClassificationResponse)
async def process_frame(
    request: FrameRequest,
    session: ExerciseSession = Depends(get_session)
):
    """Classify one frame of landmarks."""
    result = session.process_frame(request.to_frame())
    return ClassificationResponse.from_result(result)


@router.post("/{session_id}/vitals", response_model=VitalsResponse)
async def update_vitals(
    request: VitalsRequest,
    session: ExerciseSession = Depends(get_session)
):
    """
    Update vital signs.

    Out-of-range readings pause tracking: frames received while paused do
    not change phase, rep or smoothing state.
    """
    check = session.update_vitals(request.to_vitals())
    return VitalsResponse(paused=check.should_pause, warnings=check.warnings)


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str, session: ExerciseSession = Depends(get_session)):
    """Reset the counter and all tracking state."""
    session.reset()
    return _session_response(session_id, session)


@router.put("/{session_id}/exercise", response_model=SessionResponse)
async def switch_exercise(
    session_id: str,
    request: ExerciseSwitchRequest,
    session: ExerciseSession = Depends(get_session)
):
    """Change exercise; the counter is kept unless reset_count is set."""
    session.switch_profile(request.exercise, reset_count=request.reset_count)
    return _session_response(session_id, session)
