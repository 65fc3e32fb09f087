"""Shareable result card.

The card theme is picked deterministically from the archetype title so
the same reading always renders with the same palette.
"""

from __future__ import annotations

import time

from pydantic import BaseModel

from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import RelationshipGoal

THEMES: tuple[str, ...] = ("tech", "passionate", "nature", "mystery", "warmth")


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def title_hash(seed: str) -> int:
    """``code_unit + ((hash << 5) - hash)`` over UTF-16 code units.

    Only the shift wraps to 32 bits, exactly as in the browser's card.
    """
    h = 0
    data = seed.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = unit + (_to_int32(_to_int32(h) << 5) - h)
    return h


def theme_for(title: str) -> str:
    return THEMES[abs(title_hash(title or "default")) % len(THEMES)]


class ShareCard(BaseModel):
    theme: str
    goal: RelationshipGoal
    archetype_title: str
    tagline: str
    personality_traits: list[str]
    compatibility_score: float
    green_flags: list[str]
    red_flags: list[str]
    where_to_meet: list[str]
    wish_specification: str
    image: str | None = None
    download_filename: str


def build_share_card(
    result: AnalysisResult,
    image: str | None,
    goal: RelationshipGoal,
) -> ShareCard:
    return ShareCard(
        theme=theme_for(result.archetype_title),
        goal=goal,
        archetype_title=result.archetype_title,
        tagline=result.tagline,
        personality_traits=list(result.personality_traits),
        compatibility_score=result.compatibility_score,
        green_flags=list(result.green_flags),
        red_flags=list(result.red_flags),
        where_to_meet=list(result.where_to_meet),
        wish_specification=result.wish_specification,
        image=image,
        download_filename=f"MATCHLAB-SPEC-{int(time.time() * 1000)}.png",
    )
