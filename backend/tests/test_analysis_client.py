from __future__ import annotations

import asyncio
import json

import pytest

from helpers import TINY_PNG, make_full_profile, make_result_data
from matchlab.agents.match_agent import (
    build_content_blocks,
    build_system_prompt,
    build_user_prompt,
    decision_label,
    energy_label,
)
from matchlab.clients.analysis import AnalysisClient, parse_analysis
from matchlab.errors import AnalysisFailure
from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import RelationshipGoal


class _Reply:
    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text


class FakeAgent:
    def __init__(self, reply: str = "", error: Exception | None = None, delay: float = 0) -> None:
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts: list = []

    async def invoke_async(self, prompt):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return _Reply(self.reply)


# -- prompt building --------------------------------------------------------


@pytest.mark.parametrize(
    "scale, energy, decision",
    [
        (1, "Introverted", "Logic"),
        (5, "Introverted", "Logic"),
        (6, "Extroverted", "Emotion"),
        (10, "Extroverted", "Emotion"),
    ],
)
def test_slider_midpoint_split(scale, energy, decision):
    assert energy in energy_label(scale)
    assert decision in decision_label(scale)


def test_user_prompt_embeds_profile_and_goal():
    profile = make_full_profile(intro_extro_scale=8, thinking_feeling_scale=2)
    text = build_user_prompt(profile, RelationshipGoal.CASUAL_PARTNER)

    assert "Mei (29 y/o, female)" in text
    assert "162cm, 52kg" in text
    assert "MBTI: INFJ" in text
    assert "Score 8/10 -> More Extroverted" in text
    assert "Score 2/10 -> Logic/Rational Priority" in text
    assert "Dark Side: I overthink replies" in text
    assert "Casual Partner" in text


def test_user_prompt_marks_missing_personality_type():
    text = build_user_prompt(make_full_profile(personality_type=None), RelationshipGoal.LIFE_PARTNER)
    assert "MBTI: N/A" in text
    assert "Life Partner" in text


def test_system_prompt_carries_result_schema():
    prompt = build_system_prompt()
    for field in AnalysisResult.model_fields:
        assert field in prompt
    assert "{schema}" not in prompt


def test_photo_is_sent_as_separate_image_block():
    blocks = build_content_blocks(make_full_profile(photo=TINY_PNG), RelationshipGoal.LIFE_PARTNER)
    assert len(blocks) == 2
    assert "text" in blocks[0]
    image = blocks[1]["image"]
    assert image["format"] == "png"
    assert image["source"]["bytes"].startswith(b"\x89PNG")


def test_no_photo_means_text_only():
    blocks = build_content_blocks(make_full_profile(), RelationshipGoal.LIFE_PARTNER)
    assert len(blocks) == 1


# -- reply parsing ----------------------------------------------------------


def test_parse_plain_json():
    result = parse_analysis(json.dumps(make_result_data(), ensure_ascii=False))
    assert result.archetype_title == "理性的建築師"
    assert result.compatibility_score == 87


def test_parse_fenced_json():
    text = "```json\n" + json.dumps(make_result_data()) + "\n```"
    assert parse_analysis(text).tagline


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "Sorry, I cannot help with that.",
        "[1, 2, 3]",
        json.dumps({"archetype_title": "only one field"}),
        json.dumps(make_result_data(compatibility_score=140)),
        json.dumps(make_result_data(green_flags="not a list")),
    ],
)
def test_parse_rejects_unusable_replies(text):
    with pytest.raises(AnalysisFailure):
        parse_analysis(text)


# -- client -----------------------------------------------------------------


async def test_analyze_returns_validated_result():
    agent = FakeAgent(reply=json.dumps(make_result_data()))
    client = AnalysisClient(agent_factory=lambda: agent)

    result = await client.analyze(make_full_profile(), RelationshipGoal.LIFE_PARTNER)

    assert isinstance(result, AnalysisResult)
    assert len(agent.prompts) == 1


async def test_analyze_wraps_provider_errors():
    agent = FakeAgent(error=RuntimeError("503 from provider"))
    client = AnalysisClient(agent_factory=lambda: agent)

    with pytest.raises(AnalysisFailure, match="503"):
        await client.analyze(make_full_profile(), RelationshipGoal.LIFE_PARTNER)


async def test_analyze_fails_on_malformed_reply():
    client = AnalysisClient(agent_factory=lambda: FakeAgent(reply="{not json"))

    with pytest.raises(AnalysisFailure):
        await client.analyze(make_full_profile(), RelationshipGoal.LIFE_PARTNER)


async def test_analyze_times_out_when_configured():
    agent = FakeAgent(reply=json.dumps(make_result_data()), delay=1.0)
    client = AnalysisClient(agent_factory=lambda: agent, timeout=0.01)

    with pytest.raises(AnalysisFailure, match="timed out"):
        await client.analyze(make_full_profile(), RelationshipGoal.LIFE_PARTNER)


async def test_analyze_makes_a_single_attempt():
    calls = []

    def factory():
        agent = FakeAgent(error=ConnectionError("reset by peer"))
        calls.append(agent)
        return agent

    client = AnalysisClient(agent_factory=factory)
    with pytest.raises(AnalysisFailure):
        await client.analyze(make_full_profile(), RelationshipGoal.CASUAL_PARTNER)
    assert len(calls) == 1
    assert len(calls[0].prompts) == 1
