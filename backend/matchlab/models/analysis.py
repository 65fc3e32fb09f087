"""Pydantic model for the structured reply of the analysis service."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnalysisResult(BaseModel):
    """The "ideal match" reading produced by the text model.

    Every field is required.  The model is frozen once validated.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    archetype_title: str = Field(description="Creative psychological archetype name for the match.")
    tagline: str = Field(description="One sentence summary of the match vibe.")
    personality_traits: list[str] = Field(description="Five adjectives describing the partner.")
    physical_description: str = Field(
        description="Visual description of the partner (height, build, style) at the user's level."
    )
    psychological_profile: str = Field(
        description="Why this pairing works, tied to the user's own traits."
    )
    compatibility_score: float = Field(ge=0, le=100, description="0-100")
    green_flags: list[str] = Field(description="Five concrete behaviours to look for.")
    red_flags: list[str] = Field(description="Five concrete warning signs.")
    where_to_meet: list[str] = Field(description="Three specific places to meet this person.")
    interaction_advice: str = Field(description="One actionable piece of advice on approaching them.")
    wish_specification: str = Field(
        description="Numbered specification list: '1. [Category]: details' per line."
    )
    image_prompt: str = Field(description="English prompt for a photorealistic portrait of the match.")

    @field_validator("compatibility_score", mode="before")
    @classmethod
    def _score_must_be_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("compatibility_score must be a number")
        return value
