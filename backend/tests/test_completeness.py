from __future__ import annotations

import pytest

from helpers import make_full_profile
from matchlab.completeness import (
    CHECKLIST,
    COMPLETENESS_THRESHOLD,
    is_sufficient,
    require_sufficient,
    score,
)
from matchlab.errors import InsufficientDataError
from matchlab.models.profile import Profile

_EMPTY = {
    "personality_type": None,
    "intro_extro_scale": 0,
    "thinking_feeling_scale": 0,
}


def _blank(field: str):
    return _EMPTY.get(field, "")


def test_checklist_has_fifteen_fields():
    assert len(CHECKLIST) == 15
    assert COMPLETENESS_THRESHOLD == 80


def test_fully_filled_profile_scores_100(full_profile):
    assert score(full_profile) == 100


def test_default_profile_counts_only_the_sliders():
    assert score(Profile()) == round(2 / 15 * 100) == 13


@pytest.mark.parametrize("k", range(16))
def test_score_is_fraction_of_filled_checklist_fields(k):
    emptied = {field: _blank(field) for field in CHECKLIST[k:]}
    profile = make_full_profile(**emptied)
    assert score(profile) == round(k / 15 * 100)


def test_whitespace_only_strings_do_not_count():
    profile = make_full_profile(name="   ", interests="\n\t")
    assert score(profile) == round(13 / 15 * 100)


def test_fields_outside_checklist_are_ignored(full_profile):
    trimmed = full_profile.model_copy(
        update={"pet_peeves": "", "ideal_weekend": "", "love_language": "", "photo": None}
    )
    assert score(trimmed) == 100
    assert score(Profile(pet_peeves="a lot", ideal_weekend="hiking")) == 13


def test_score_is_idempotent(full_profile):
    partial = full_profile.model_copy(update={"email": "", "income": ""})
    assert score(partial) == score(partial)


def test_gate_boundary():
    # 12 of 15 -> 80, 11 of 15 -> 73
    at_threshold = make_full_profile(name="", age="", gender="")
    below = make_full_profile(name="", age="", gender="", email="")
    assert score(at_threshold) == 80
    assert is_sufficient(at_threshold)
    assert require_sufficient(at_threshold) == 80

    assert score(below) == 73
    assert not is_sufficient(below)
    with pytest.raises(InsufficientDataError) as excinfo:
        require_sufficient(below)
    assert excinfo.value.score == 73
    assert excinfo.value.threshold == 80
