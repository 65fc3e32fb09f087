"""Completeness scoring for submitted profiles.

A profile is only sent for analysis when enough of a fixed checklist of
fields has been filled.  Fields outside the checklist (photo, pet
peeves, ideal weekend, ...) never move the score.
"""

from __future__ import annotations

import math

from matchlab.errors import InsufficientDataError
from matchlab.models.profile import Profile

COMPLETENESS_THRESHOLD: int = 80

CHECKLIST: tuple[str, ...] = (
    "name",
    "age",
    "gender",
    "sexual_orientation",
    "height",
    "weight",
    "occupation",
    "income",
    "email",
    "personality_type",
    "intro_extro_scale",
    "thinking_feeling_scale",
    "interests",
    "values",
    "weaknesses",
)


def _is_filled(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return len(value.strip()) > 0
    if isinstance(value, (int, float)):
        return value > 0
    return False


def score(profile: Profile) -> int:
    """Return the percentage (0-100) of checklist fields that are filled."""
    filled = sum(1 for field in CHECKLIST if _is_filled(getattr(profile, field)))
    # half-up, like the browser's Math.round
    return math.floor(filled / len(CHECKLIST) * 100 + 0.5)


def is_sufficient(profile: Profile) -> bool:
    return score(profile) >= COMPLETENESS_THRESHOLD


def require_sufficient(profile: Profile) -> int:
    """Return the score, raising ``InsufficientDataError`` below the threshold."""
    value = score(profile)
    if value < COMPLETENESS_THRESHOLD:
        raise InsufficientDataError(value, COMPLETENESS_THRESHOLD)
    return value
