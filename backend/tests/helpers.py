from __future__ import annotations

import asyncio
from typing import Any

from matchlab.models.analysis import AnalysisResult
from matchlab.models.profile import Profile, RelationshipGoal
from matchlab.storage.archive import MemoryArchive

TINY_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def make_result_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "archetype_title": "理性的建築師",
        "tagline": "一個會先放下手機聽你說話的人。",
        "personality_traits": ["穩定", "務實", "幽默", "細心", "守時"],
        "physical_description": "身高178cm，精壯身材，日系簡約穿搭。",
        "psychological_profile": "你偏內向又理性，需要同樣重視邏輯的伴侶。",
        "compatibility_score": 87,
        "green_flags": ["會主動幫你剝蝦"],
        "red_flags": ["吃飯一直滑手機"],
        "where_to_meet": ["誠品書店財經區"],
        "interaction_advice": "約他去看建築展。",
        "wish_specification": "拜託月老，我要訂製這一位對象：\n1. [外型]: 身高178-183cm。",
        "image_prompt": "A calm man in his early thirties wearing a navy knit sweater",
    }
    data.update(overrides)
    return data


def make_result(**overrides: Any) -> AnalysisResult:
    return AnalysisResult.model_validate(make_result_data(**overrides))


def make_full_profile(**overrides: Any) -> Profile:
    data: dict[str, Any] = {
        "name": "Mei",
        "age": "29",
        "gender": "female",
        "sexual_orientation": "heterosexual",
        "height": "162",
        "weight": "52",
        "occupation": "UX designer",
        "income": "1.2M TWD",
        "email": "mei@example.com",
        "personality_type": "INFJ",
        "intro_extro_scale": 3,
        "thinking_feeling_scale": 7,
        "interests": "climbing, film photography",
        "values": "honesty, growth",
        "weaknesses": "I overthink replies",
        "pet_peeves": "lateness",
    }
    data.update(overrides)
    return Profile(**data)


class FakeAnalysisClient:
    def __init__(self, result: AnalysisResult | None = None, error: Exception | None = None) -> None:
        self.result = result or make_result()
        self.error = error
        self.calls: list[tuple[Profile, RelationshipGoal]] = []
        self.release: asyncio.Event | None = None

    async def analyze(self, profile: Profile, goal: RelationshipGoal) -> AnalysisResult:
        self.calls.append((profile, goal))
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


class FakeImageClient:
    def __init__(self, image: str = TINY_PNG, error: Exception | None = None) -> None:
        self.image = image
        self.error = error
        self.prompts: list[str] = []

    async def generate_image(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.image


class CountingArchive(MemoryArchive):
    def __init__(self, fail: bool = False) -> None:
        super().__init__()
        self.fail = fail
        self.writes = 0

    def append(self, record) -> None:
        self.writes += 1
        if self.fail:
            raise OSError("disk full")
        super().append(record)

