"""Completeness endpoint, used by the form to show its progress meter."""

from __future__ import annotations

from fastapi import APIRouter

from matchlab.completeness import COMPLETENESS_THRESHOLD, is_sufficient, score
from matchlab.models.profile import Profile

router = APIRouter()


@router.post("/api/completeness")
async def profile_completeness(profile: Profile):
    return {
        "score": score(profile),
        "threshold": COMPLETENESS_THRESHOLD,
        "sufficient": is_sufficient(profile),
    }
