"""The submission pipeline's collaborators and their failure policy.

``analyze`` is the essential phase and propagates ``AnalysisFailure``.
``archive`` and ``render_image`` are best-effort: their failures are
logged here and never reach the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from matchlab.clients.image import styled_image_prompt
from matchlab.errors import AnalysisFailure
from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import Profile, RelationshipGoal
from matchlab.models.submission import SubmissionRecord
from matchlab.storage.archive import Archive

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    async def analyze(self, profile: Profile, goal: RelationshipGoal) -> AnalysisResult: ...


class ImageGenerator(Protocol):
    async def generate_image(self, prompt: str) -> str: ...


class SubmissionPipeline:
    def __init__(
        self,
        archive: Archive,
        analysis_client: Analyzer,
        image_client: ImageGenerator,
    ) -> None:
        self.archive_store = archive
        self.analysis_client = analysis_client
        self.image_client = image_client

    async def archive(self, record: SubmissionRecord) -> bool:
        """Persist *record*; return ``False`` instead of raising on failure."""
        try:
            await asyncio.to_thread(self.archive_store.append, record)
        except Exception:
            logger.exception("Failed to archive submission %s", record.id)
            return False
        return True

    async def analyze(self, profile: Profile, goal: RelationshipGoal) -> AnalysisResult:
        try:
            return await self.analysis_client.analyze(profile, goal)
        except AnalysisFailure:
            raise
        except Exception as exc:
            raise AnalysisFailure(f"Analysis service error: {exc}") from exc

    async def render_image(self, result: AnalysisResult) -> str | None:
        """Return the portrait for *result*, or ``None`` if it cannot be made."""
        if not result.image_prompt.strip():
            logger.info("Analysis has no image prompt; skipping image generation")
            return None
        try:
            return await self.image_client.generate_image(styled_image_prompt(result.image_prompt))
        except Exception as exc:
            logger.warning("Failed to generate image, proceeding with text only: %s", exc)
            return None
