"""Strands agent that writes the "ideal match" reading for a profile.

The agent has no tools: it receives the profile as text (plus the photo
as an image block, when one was uploaded) and must answer with a single
JSON object shaped like ``AnalysisResult``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from strands import Agent
from strands.agent.conversation_manager import SlidingWindowConversationManager

from matchlab.config import get_model
from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import Profile, RelationshipGoal, split_data_uri

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an expert in evolutionary psychology, astrological archetypes and
modern dating markets. You analyse the user's realistic data and write a
result in the style of a popular psychology-magazine test or a detailed
horoscope reading.

## Core Logic

1. Homophily: people with similar attractiveness, income and values stay
   together.
2. Status matching: a high-income user gets a high-income match, an average
   user an average match.
3. Physical matching: a fit user gets a fit match, a heavy user a heavy match.

## Tone & Style

- Traditional Chinese (繁體中文) only, except `image_prompt` which is English.
- Direct and concrete. Never use abstract phrases such as "willingness to
  explore" or "potential connection".
- Use specific scenarios: instead of "good communication" write "someone who
  puts their phone down when you speak".

## Wish Specification

The user is tired of vague wishes and wants a PRECISE SPECIFICATION LIST.
Write `wish_specification` as a vernacular numbered list of demands, e.g.:

拜託月老，我要訂製這一位對象：
1. [外型]: 身高178-183cm，體脂15%以下的精壯身材，穿著Uniqlo日系風格。
2. [職業]: 金融或是科技業主管，年薪200萬以上，有投資習慣。
3. [個性]: 吵架會先低頭，回訊息秒讀秒回，情緒極度穩定。
4. [習慣]: 週末喜歡爬百岳，不抽菸，睡前會閱讀。

Include specific numbers (height, income, age gap) and specific behaviours.

## Output

Reply with ONE JSON object and nothing else. It must match this JSON schema
exactly (every property is required):

{schema}
"""

GOAL_DESCRIPTIONS: dict[RelationshipGoal, str] = {
    RelationshipGoal.CASUAL_PARTNER: (
        "Casual Partner (focus on physical attractiveness parity, realistic "
        "chemistry, no commitment)"
    ),
    RelationshipGoal.LIFE_PARTNER: (
        "Life Partner / Spouse (focus on socioeconomic similarity "
        "'men dang hu dui', shared lifestyle, long term)"
    ),
}

# Bedrock-style image formats accepted in a Strands image content block.
_IMAGE_FORMATS: dict[str, str] = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/gif": "gif",
    "image/webp": "webp",
}


def build_system_prompt() -> str:
    schema = json.dumps(AnalysisResult.model_json_schema(), ensure_ascii=False, indent=2)
    return SYSTEM_PROMPT.replace("{schema}", schema)


def energy_label(scale: int) -> str:
    return "More Introverted (偏內向)" if scale <= 5 else "More Extroverted (偏外向)"


def decision_label(scale: int) -> str:
    return (
        "Logic/Rational Priority (理性優先)"
        if scale <= 5
        else "Emotion/Feeling Priority (感性優先)"
    )


def build_user_prompt(profile: Profile, goal: RelationshipGoal) -> str:
    """Render the profile and the goal as the text part of the request."""
    return f"""\
User Data:
- Name: {profile.name} ({profile.age} y/o, {profile.gender})
- Sexual Orientation: {profile.sexual_orientation}
- Email: {profile.email}
- Body: {profile.height}cm, {profile.weight}kg
- Social: {profile.occupation}, Income: {profile.income}
- Psychology:
   * MBTI: {profile.personality_type or 'N/A'}
   * Energy: Score {profile.intro_extro_scale}/10 -> {energy_label(profile.intro_extro_scale)}
   * Decision Making: Score {profile.thinking_feeling_scale}/10 -> {decision_label(profile.thinking_feeling_scale)}
- Interests: {profile.interests}
- Values: {profile.values}
- Preferences: {profile.preferences or 'N/A'}
- Pet Peeves: {profile.pet_peeves or 'N/A'}
- Ideal Weekend: {profile.ideal_weekend or 'N/A'}
- Love Language: {profile.love_language or 'N/A'}
- Dark Side: {profile.weaknesses}

Looking for: {GOAL_DESCRIPTIONS[goal]}

Task:
1. Analyse who fits them based on "Realistic Similarity".
2. Explain WHY using a psychological-analysis tone.
3. Suggest WHERE to meet based on lifestyle probability.
4. List concrete GREEN flags (specific behaviours that fit the user).
5. List concrete RED flags (specific behaviours that clash with the user).
6. Write the precise wish specification list.
"""


def build_content_blocks(profile: Profile, goal: RelationshipGoal) -> list[dict[str, Any]]:
    """Return the Strands content blocks: the text prompt, then the photo."""
    blocks: list[dict[str, Any]] = [{"text": build_user_prompt(profile, goal)}]
    if profile.photo:
        mime_type, raw = split_data_uri(profile.photo)
        image_format = _IMAGE_FORMATS.get(mime_type.lower())
        if image_format is None:
            logger.warning("Skipping photo with unsupported type %s", mime_type)
        else:
            blocks.append({"image": {"format": image_format, "source": {"bytes": raw}}})
    return blocks


def create_agent() -> Agent:
    """Create a single-use, tool-less analysis agent."""
    return Agent(
        model=get_model(),
        system_prompt=build_system_prompt(),
        tools=[],
        callback_handler=None,
        conversation_manager=SlidingWindowConversationManager(window_size=4),
    )
