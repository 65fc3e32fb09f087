"""Submission archive backends.

Every backend keeps records in insertion order and accepts records with
or without an analysis result.  The file-backed archive stores one JSON
record per line at ``~/.matchlab/data/submissions.jsonl``.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from matchlab.errors import ArchiveWriteFailure
from matchlab.models.submission import SubmissionRecord

logger = logging.getLogger(__name__)


class Archive(Protocol):
    def append(self, record: SubmissionRecord) -> None: ...

    def list(self) -> list[SubmissionRecord]: ...

    def clear(self) -> None: ...


class MemoryArchive:
    """Process-local archive; contents are lost on restart."""

    def __init__(self) -> None:
        self._records: list[SubmissionRecord] = []
        self._lock = threading.Lock()

    def append(self, record: SubmissionRecord) -> None:
        with self._lock:
            self._records.append(record.model_copy(deep=True))

    def list(self) -> list[SubmissionRecord]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._records]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class JsonlArchive:
    """Append-only JSON-lines archive on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def append(self, record: SubmissionRecord) -> None:
        line = record.model_dump_json()
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
            except OSError as exc:
                raise ArchiveWriteFailure(
                    f"Could not write submission {record.id} to {self.path}: {exc}"
                ) from exc
        logger.info("Submission %s saved to %s", record.id, self.path)

    def list(self) -> list[SubmissionRecord]:
        with self._lock:
            if not self.path.exists():
                return []
            raw_lines = self.path.read_text(encoding="utf-8").splitlines()

        records: list[SubmissionRecord] = []
        for lineno, raw in enumerate(raw_lines, 1):
            if not raw.strip():
                continue
            try:
                records.append(SubmissionRecord(**json.loads(raw)))
            except (json.JSONDecodeError, TypeError, ValidationError) as exc:
                logger.warning("Skipping corrupted archive line %d in %s: %s", lineno, self.path, exc)
        return records

    def clear(self) -> None:
        with self._lock:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as exc:
                raise ArchiveWriteFailure(f"Could not clear archive {self.path}: {exc}") from exc
        logger.info("Archive %s cleared", self.path)
