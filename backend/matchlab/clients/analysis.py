"""Client for the remote text-generation service.

Sends one profile to the analysis agent and turns the reply into a
validated ``AnalysisResult``.  A single attempt is made; every kind of
failure surfaces as ``AnalysisFailure``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable

from pydantic import ValidationError

from matchlab.agents.match_agent import build_content_blocks, create_agent
from matchlab.errors import AnalysisFailure
from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import Profile, RelationshipGoal

logger = logging.getLogger(__name__)


def _strip_code_fence(text: str) -> str:
    s = text.strip()
    if s.startswith("```"):
        s = "\n".join(s.splitlines()[1:])
        if s.rstrip().endswith("```"):
            s = "\n".join(s.rstrip().splitlines()[:-1])
    return s.strip()


def parse_analysis(text: str) -> AnalysisResult:
    """Parse and validate the raw reply of the text model.

    Raises ``AnalysisFailure`` for empty replies, invalid JSON, non-object
    JSON, and objects that miss or mistype any required field.
    """
    body = _strip_code_fence(text or "")
    if not body:
        raise AnalysisFailure("Empty reply from the analysis service")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise AnalysisFailure(f"Analysis reply is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise AnalysisFailure("Analysis reply must be a JSON object")

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as exc:
        raise AnalysisFailure(
            f"Analysis reply does not match the expected shape: {exc.error_count()} error(s)"
        ) from exc


class AnalysisClient:
    """Asks the text model for an ``AnalysisResult``."""

    def __init__(
        self,
        agent_factory: Callable[[], Any] = create_agent,
        timeout: float | None = None,
    ) -> None:
        self._agent_factory = agent_factory
        self._timeout = timeout

    async def analyze(self, profile: Profile, goal: RelationshipGoal) -> AnalysisResult:
        try:
            blocks = build_content_blocks(profile, goal)
        except ValueError as exc:
            raise AnalysisFailure(f"Could not encode photo: {exc}") from exc

        try:
            agent = self._agent_factory()
            call = agent.invoke_async(blocks)
            if self._timeout is not None:
                reply = await asyncio.wait_for(call, timeout=self._timeout)
            else:
                reply = await call
        except asyncio.TimeoutError as exc:
            raise AnalysisFailure(f"Analysis timed out after {self._timeout}s") from exc
        except Exception as exc:
            logger.exception("Analysis agent call failed")
            raise AnalysisFailure(f"Analysis service error: {exc}") from exc

        response_text = str(reply)
        logger.info("Analysis reply received. Length: %d", len(response_text))
        return parse_analysis(response_text)
