from __future__ import annotations

import io
from datetime import date

import pandas as pd
import pytest

from helpers import TINY_PNG, make_full_profile, make_result
from matchlab.export import SHEET_NAME, export_filename, export_xlsx, flatten_record
from matchlab.models.profile import RelationshipGoal
from matchlab.models.submission import SubmissionRecord

COLUMNS = [
    "ID", "Timestamp", "Name", "Email", "Age", "Gender", "Orientation", "Goal",
    "Height", "Weight", "Occupation", "Income", "MBTI", "Extroversion", "Thinking",
    "Interests", "Values", "Weaknesses", "Archetype", "Score",
]


def _pair():
    pre = SubmissionRecord(
        relationship_goal=RelationshipGoal.CASUAL_PARTNER,
        profile=make_full_profile(photo=TINY_PNG),
    )
    return pre, pre.with_analysis(make_result(compatibility_score=91))


def test_flatten_names_every_column_and_skips_photo():
    pre, post = _pair()
    row = flatten_record(post)

    assert list(row) == COLUMNS
    assert TINY_PNG not in row.values()
    assert row["Goal"] == "CASUAL_PARTNER"
    assert row["MBTI"] == "INFJ"
    assert row["Archetype"] == "理性的建築師"
    assert row["Score"] == 91


def test_flatten_without_analysis_uses_placeholders():
    pre, _ = _pair()
    row = flatten_record(pre)
    assert row["Archetype"] == "N/A"
    assert row["Score"] == "N/A"


def test_export_filename():
    assert export_filename(date(2026, 10, 19)) == "MatchLab_Data_Export_2026-10-19.xlsx"


def test_export_writes_single_sheet(tmp_path):
    pre, post = _pair()
    target = tmp_path / "out" / "export.xlsx"

    assert export_xlsx([pre, post], target) == 2

    frame = pd.read_excel(target, sheet_name=SHEET_NAME)
    assert list(frame.columns) == COLUMNS
    assert frame["ID"].tolist() == [pre.id, post.id]


def test_export_to_buffer():
    pre, _ = _pair()
    buffer = io.BytesIO()
    export_xlsx([pre], buffer)
    assert buffer.getvalue().startswith(b"PK")


def test_export_refuses_empty_archive(tmp_path):
    with pytest.raises(ValueError, match="No data"):
        export_xlsx([], tmp_path / "empty.xlsx")
