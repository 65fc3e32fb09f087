"""Spreadsheet export of the submission archive."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, BinaryIO, Iterable

import pandas as pd

from matchlab.models.submission import SubmissionRecord

logger = logging.getLogger(__name__)

SHEET_NAME = "Submissions"


def flatten_record(record: SubmissionRecord) -> dict[str, Any]:
    """One spreadsheet row per record; the photo is never exported."""
    p = record.profile
    a = record.analysis
    return {
        "ID": record.id,
        "Timestamp": record.timestamp,
        "Name": p.name,
        "Email": p.email,
        "Age": p.age,
        "Gender": p.gender,
        "Orientation": p.sexual_orientation,
        "Goal": record.relationship_goal.value,
        "Height": p.height,
        "Weight": p.weight,
        "Occupation": p.occupation,
        "Income": p.income,
        "MBTI": p.personality_type or "",
        "Extroversion": p.intro_extro_scale,
        "Thinking": p.thinking_feeling_scale,
        "Interests": p.interests,
        "Values": p.values,
        "Weaknesses": p.weaknesses,
        "Archetype": a.archetype_title if a else "N/A",
        "Score": a.compatibility_score if a else "N/A",
    }


def export_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"MatchLab_Data_Export_{today.isoformat()}.xlsx"


def export_xlsx(records: Iterable[SubmissionRecord], target: Path | BinaryIO) -> int:
    """Write *records* to a single-sheet workbook; return the row count.

    *target* is a file path or a writable binary buffer.

    Raises ``ValueError`` when there is nothing to export.
    """
    rows = [flatten_record(r) for r in records]
    if not rows:
        raise ValueError("No data to export")

    if isinstance(target, Path):
        target.parent.mkdir(parents=True, exist_ok=True)
    frame = pd.DataFrame(rows)
    frame.to_excel(target, sheet_name=SHEET_NAME, index=False, engine="openpyxl")
    logger.info("Exported %d submission(s)", len(rows))
    return len(rows)
