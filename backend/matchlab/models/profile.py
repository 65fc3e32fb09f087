"""Pydantic models for the questionnaire profile.

A ``Profile`` is the self-reported data a user fills in across the
multi-step form.  It may be partially filled while the user is editing;
only the completeness gate decides whether it is good enough to be sent
for analysis.
"""

from __future__ import annotations

import base64
import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator

_DATA_URI_RE = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)


class RelationshipGoal(str, Enum):
    CASUAL_PARTNER = "CASUAL_PARTNER"
    LIFE_PARTNER = "LIFE_PARTNER"


class Profile(BaseModel):
    """Everything the user tells us about themselves."""

    # Identity
    name: str = ""
    age: str = ""
    gender: str = ""
    sexual_orientation: str = ""
    email: str = ""

    # Physical / status
    height: str = ""  # cm
    weight: str = ""  # kg
    occupation: str = ""
    income: str = ""

    # Psychometrics; sliders run 1-10, 0 means "not answered"
    personality_type: str | None = None
    intro_extro_scale: int = Field(default=5, ge=0, le=10)
    thinking_feeling_scale: int = Field(default=5, ge=0, le=10)

    # Qualitative
    interests: str = ""
    values: str = ""
    preferences: str = ""
    pet_peeves: str = ""
    ideal_weekend: str = ""
    love_language: str = ""
    weaknesses: str = ""

    photo: str | None = None  # data:image/...;base64,...

    @field_validator("photo")
    @classmethod
    def _check_photo(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        if not _DATA_URI_RE.match(value):
            raise ValueError("photo must be a base64 image data URI")
        return value


def split_data_uri(uri: str) -> tuple[str, bytes]:
    """Return ``(mime_type, raw_bytes)`` for a base64 image data URI.

    Raises ``ValueError`` when *uri* is not a well-formed data URI.
    """
    match = _DATA_URI_RE.match(uri)
    if match is None:
        raise ValueError("not a base64 image data URI")
    mime_type, payload = match.groups()
    return mime_type, base64.b64decode(payload, validate=True)
