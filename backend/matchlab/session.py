"""Questionnaire session manager.

Owns the view state machine for one browser session:
- hero -> form -> analyzing -> result on the happy path
- form -> insufficient_data -> form when the completeness gate fails
- analyzing -> form (with an error message) when analysis fails
- any view -> hero on reset; admin is only entered at creation

The analysis and image phases run as one background asyncio task per
submission.  A reset while analyzing abandons that task: it keeps
running, but whatever it produces afterwards is discarded.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
import uuid
from enum import Enum
from typing import Any, AsyncIterator

from matchlab.completeness import require_sufficient
from matchlab.errors import AnalysisFailure, InsufficientDataError, InvalidTransition
from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import Profile, RelationshipGoal
from matchlab.models.submission import SubmissionRecord
from matchlab.pipeline import SubmissionPipeline

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_MESSAGE = "實驗室連線異常，數據傳輸失敗。請檢查網絡連接。"
INSUFFICIENT_DATA_MESSAGE = (
    "你提供的資料不足，AI 無法進行精準的運算。"
    "請返回並補充更多關於你的生活習慣、價值觀與個人特質的描述，"
    "這樣才能算出真正適合你的對象。"
)


class View(str, Enum):
    HERO = "hero"
    FORM = "form"
    ANALYZING = "analyzing"
    RESULT = "result"
    INSUFFICIENT_DATA = "insufficient_data"
    ADMIN = "admin"


# Event types after which a status stream has nothing more to report.
_SETTLED_EVENTS = {"result", "analysis_failed", "insufficient_data", "reset"}

# Settled sessions idle for longer than this are dropped from the registry.
SESSION_IDLE_TTL: float = 2 * 60 * 60


class MatchSession:
    """One user's trip through the questionnaire."""

    def __init__(self, pipeline: SubmissionPipeline, *, admin: bool = False) -> None:
        self.id: str = uuid.uuid4().hex[:12]
        self.pipeline = pipeline
        self.view: View = View.ADMIN if admin else View.HERO
        self.status_queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

        self.profile: Profile | None = None
        self.goal: RelationshipGoal = RelationshipGoal.LIFE_PARTNER
        self.completeness: int | None = None
        self.result: AnalysisResult | None = None
        self.image: str | None = None
        self.error: str | None = None

        self._generation = 0
        self._task: asyncio.Task | None = None
        self.last_active: float = time.monotonic()

    # -- events ------------------------------------------------------------

    def start(self) -> None:
        self._require(View.HERO, "start")
        self._transition(View.FORM, "form", "Questionnaire opened.")

    def submit(self, profile: Profile, goal: RelationshipGoal) -> View:
        """Gate *profile* and, if it passes, launch the analysis task.

        Must be called from a running event loop.  Only accepted in the
        form view, so a second submit while analyzing is rejected.
        Pending status events from earlier submissions are dropped so a
        stream opened now follows only this one.
        """
        self._require(View.FORM, "submit")
        self._clear_status()

        submitted = profile.model_copy(deep=True)
        self.profile = submitted
        self.goal = goal

        try:
            self.completeness = require_sufficient(submitted)
        except InsufficientDataError as exc:
            self.completeness = exc.score
            logger.info("Session %s: data completeness %d%% below threshold", self.id, exc.score)
            self._transition(View.INSUFFICIENT_DATA, "insufficient_data", INSUFFICIENT_DATA_MESSAGE)
            return self.view

        logger.info("Session %s: data completeness %d%%", self.id, self.completeness)
        self.error = None
        self.result = None
        self.image = None
        self._transition(View.ANALYZING, "analyzing", "Analyzing profile...")

        self._task = asyncio.create_task(
            self._run(self._generation, submitted, goal),
            name=f"submission-{self.id}",
        )
        return self.view

    def back(self) -> None:
        self._require(View.INSUFFICIENT_DATA, "back")
        self._transition(View.FORM, "form", "Back to the questionnaire.")

    def edit(self) -> None:
        self._require(View.RESULT, "edit")
        self._transition(View.FORM, "form", "Back to the questionnaire.")

    def reset(self) -> None:
        """Return to hero from any view, dropping result, image and error."""
        if self.view == View.ANALYZING:
            logger.info("Session %s: abandoning in-flight submission", self.id)
        self._generation += 1
        self.result = None
        self.image = None
        self.error = None
        self.completeness = None
        self._clear_status()
        self._transition(View.HERO, "reset", "Session reset.")

    def close(self) -> None:
        """Abandon any in-flight submission and drop pending status events."""
        self._generation += 1
        self._clear_status()

    async def wait(self) -> None:
        """Wait for the most recent submission task, if any, to settle."""
        if self._task is not None:
            await self._task

    # -- pipeline ----------------------------------------------------------

    async def _run(self, generation: int, profile: Profile, goal: RelationshipGoal) -> None:
        record = SubmissionRecord(relationship_goal=goal, profile=profile)
        await self.pipeline.archive(record)

        try:
            result = await self.pipeline.analyze(profile, goal)
        except AnalysisFailure as exc:
            if self._is_stale(generation):
                logger.info("Discarding failure of abandoned submission %s", record.id)
                return
            logger.error("Analysis failed for submission %s: %s", record.id, exc)
            self.error = ANALYSIS_ERROR_MESSAGE
            self._transition(View.FORM, "analysis_failed", self.error)
            return

        if self._is_stale(generation):
            logger.info("Discarding late analysis of abandoned submission %s", record.id)
            return

        self.result = result
        await self.pipeline.archive(record.with_analysis(result))
        if self._is_stale(generation):
            logger.info("Discarding analysis of submission %s reset during archiving", record.id)
            return

        self._push_status("analyzed", "Analysis complete, rendering portrait...")

        image = await self.pipeline.render_image(result)
        if self._is_stale(generation):
            logger.info("Discarding late image of abandoned submission %s", record.id)
            return

        self.image = image
        self._transition(View.RESULT, "result", "Your match specification is ready.")

    # -- helpers -----------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        return {
            "session_id": self.id,
            "view": self.view.value,
            "error": self.error,
            "completeness": self.completeness,
            "relationship_goal": self.goal.value,
            "profile": self.profile.model_dump(mode="json") if self.profile else None,
            "result": self.result.model_dump(mode="json") if self.result else None,
            "image": self.image,
        }

    async def status_stream(self) -> AsyncIterator[str]:
        """Yield SSE-formatted events until the current submission settles."""
        while True:
            try:
                event = await asyncio.wait_for(self.status_queue.get(), timeout=30)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue

            yield f"data: {json.dumps(event, ensure_ascii=False)}\n\n"

            if event.get("type") in _SETTLED_EVENTS:
                break

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _require(self, expected: View, event: str) -> None:
        if self.view != expected:
            raise InvalidTransition(f"Cannot {event} in view {self.view.value!r}")

    def _transition(self, view: View, event_type: str, message: str) -> None:
        logger.debug("Session %s: %s -> %s", self.id, self.view.value, view.value)
        self.view = view
        self.last_active = time.monotonic()
        self._push_status(event_type, message)

    def _clear_status(self) -> None:
        while not self.status_queue.empty():
            self.status_queue.get_nowait()

    def _push_status(self, event_type: str, message: str) -> None:
        self.status_queue.put_nowait(
            {"type": event_type, "message": message, "view": self.view.value}
        )


_sessions: dict[str, MatchSession] = {}
_sessions_lock = threading.Lock()


def create_session(pipeline: SubmissionPipeline, *, admin: bool = False) -> MatchSession:
    prune_sessions()
    session = MatchSession(pipeline, admin=admin)
    with _sessions_lock:
        _sessions[session.id] = session
    return session


def get_session(session_id: str) -> MatchSession:
    with _sessions_lock:
        session = _sessions.get(session_id)
    if session is None:
        raise ValueError(f"Session {session_id!r} not found")
    return session


def remove_session(session_id: str) -> bool:
    """Close and forget a session. Returns False if it was not registered."""
    with _sessions_lock:
        session = _sessions.pop(session_id, None)
    if session is None:
        return False
    session.close()
    logger.info("Closed session %s", session_id)
    return True


def prune_sessions(max_idle: float = SESSION_IDLE_TTL, now: float | None = None) -> int:
    """Drop sessions idle for more than *max_idle* seconds.

    Sessions still analyzing are kept regardless of age.
    """
    now = time.monotonic() if now is None else now
    with _sessions_lock:
        expired = [
            sid
            for sid, session in _sessions.items()
            if session.view != View.ANALYZING and now - session.last_active > max_idle
        ]
        for sid in expired:
            _sessions.pop(sid).close()
    if expired:
        logger.info("Pruned %d idle session(s)", len(expired))
    return len(expired)
