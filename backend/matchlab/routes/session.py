"""Questionnaire session endpoints.

Drives one session's view state machine:
- POST /api/sessions                 -> create a session (hero, or admin)
- GET  /api/sessions/{id}            -> current view and state
- POST /api/sessions/{id}/start      -> hero -> form
- POST /api/sessions/{id}/submit     -> gate, then analyze in background
- POST /api/sessions/{id}/back       -> insufficient_data -> form
- POST /api/sessions/{id}/edit       -> result -> form
- POST /api/sessions/{id}/reset      -> any view -> hero
- GET  /api/sessions/{id}/events     -> SSE stream of view changes
- GET  /api/sessions/{id}/card       -> shareable result card
- DELETE /api/sessions/{id}          -> close the session
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from matchlab.card import ShareCard, build_share_card
from matchlab.dependencies import get_pipeline, require_admin
from matchlab.errors import InvalidTransition
from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import Profile, RelationshipGoal
from matchlab.pipeline import SubmissionPipeline
from matchlab.session import MatchSession, View, create_session, get_session, remove_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["session"])


class SessionState(BaseModel):
    session_id: str
    view: View
    error: str | None = None
    completeness: int | None = None
    relationship_goal: RelationshipGoal
    profile: Profile | None = None
    result: AnalysisResult | None = None
    image: str | None = None


class SubmitRequest(BaseModel):
    profile: Profile
    relationship_goal: RelationshipGoal = RelationshipGoal.LIFE_PARTNER


def _lookup(session_id: str) -> MatchSession:
    try:
        return get_session(session_id)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")


@router.post("/sessions", response_model=SessionState)
async def open_session(
    admin: bool = False,
    x_admin_token: str | None = Header(default=None),
    pipeline: SubmissionPipeline = Depends(get_pipeline),
):
    """Create a session.

    ``?admin=true`` opens the session directly in the admin view; this
    bypasses the questionnaire entirely and is refused unless the admin
    view is enabled.
    """
    if admin:
        require_admin(x_admin_token)
    session = create_session(pipeline, admin=admin)
    logger.info("Opened session %s in view %s", session.id, session.view.value)
    return session.snapshot()


@router.get("/sessions/{session_id}", response_model=SessionState)
async def read_session(session_id: str):
    return _lookup(session_id).snapshot()


@router.post("/sessions/{session_id}/start", response_model=SessionState)
async def start_session(session_id: str):
    session = _lookup(session_id)
    try:
        session.start()
    except InvalidTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return session.snapshot()


@router.post("/sessions/{session_id}/submit", response_model=SessionState)
async def submit_profile(session_id: str, req: SubmitRequest, wait: bool = False):
    """Submit the questionnaire.

    Returns immediately in the ``analyzing`` view; follow ``/events`` or
    poll the session.  With ``?wait=true`` the response is sent only once
    the submission has settled in ``result`` or back in ``form``.
    """
    session = _lookup(session_id)
    try:
        session.submit(req.profile, req.relationship_goal)
    except InvalidTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    if wait:
        await session.wait()
    return session.snapshot()


@router.post("/sessions/{session_id}/back", response_model=SessionState)
async def back_to_form(session_id: str):
    session = _lookup(session_id)
    try:
        session.back()
    except InvalidTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return session.snapshot()


@router.post("/sessions/{session_id}/edit", response_model=SessionState)
async def edit_profile(session_id: str):
    session = _lookup(session_id)
    try:
        session.edit()
    except InvalidTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return session.snapshot()


@router.post("/sessions/{session_id}/reset", response_model=SessionState)
async def reset_session(session_id: str):
    session = _lookup(session_id)
    session.reset()
    return session.snapshot()


@router.get("/sessions/{session_id}/events")
async def session_events(session_id: str):
    """SSE stream of view changes for a session.

    Events: form, insufficient_data, analyzing, analyzed, result,
    analysis_failed, reset.  The stream closes once the current
    submission settles.
    """
    session = _lookup(session_id)
    return StreamingResponse(
        session.status_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/sessions/{session_id}/card", response_model=ShareCard)
async def share_card(session_id: str):
    session = _lookup(session_id)
    if session.view != View.RESULT or session.result is None:
        raise HTTPException(status_code=409, detail="No result to share yet")
    return build_share_card(session.result, session.image, session.goal)


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    if not remove_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")
    return {"ok": True}
