"""The archived unit of one questionnaire submission."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import Profile, RelationshipGoal


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SubmissionRecord(BaseModel):
    """Profile + goal, optionally with the analysis that came back.

    The pre-analysis record has ``analysis=None``.  The post-analysis
    record reuses the same ``id`` and is appended next to it.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: str = Field(default_factory=_now)
    relationship_goal: RelationshipGoal
    profile: Profile
    analysis: AnalysisResult | None = None

    def with_analysis(self, result: AnalysisResult) -> SubmissionRecord:
        """Return the post-analysis copy of this record."""
        return self.model_copy(update={"analysis": result, "timestamp": _now()})
