"""Mirror archived submissions to a spreadsheet web app.

The spreadsheet side is a Google Apps Script deployed as a web app whose
``doPost`` appends the posted JSON as a row.  Photos are never sent.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from matchlab.models.submission import SubmissionRecord
from matchlab.storage.archive import Archive

logger = logging.getLogger(__name__)


def sheet_payload(record: SubmissionRecord) -> dict[str, Any]:
    """Flatten *record* into the JSON body the web app expects, minus the photo."""
    payload: dict[str, Any] = record.profile.model_dump(mode="json", exclude={"photo"})
    payload.update(
        {
            "id": record.id,
            "timestamp": record.timestamp,
            "relationship_goal": record.relationship_goal.value,
            "analysis": record.analysis.model_dump(mode="json") if record.analysis else None,
        }
    )
    return payload


class SheetsMirrorArchive:
    """Wraps another archive and posts every appended record to *url*.

    The wrapped archive is the source of truth; a failed post is logged
    and otherwise ignored.  Without an injected *client*, each post opens
    and closes its own short-lived ``httpx.Client``.
    """

    def __init__(
        self,
        inner: Archive,
        url: str,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.inner = inner
        self.url = url
        self._client = client
        self._timeout = timeout
        self._transport = transport

    def append(self, record: SubmissionRecord) -> None:
        self.inner.append(record)
        try:
            if self._client is not None:
                resp = self._client.post(self.url, json=sheet_payload(record))
            else:
                with httpx.Client(
                    timeout=self._timeout,
                    follow_redirects=True,
                    transport=self._transport,
                ) as client:
                    resp = client.post(self.url, json=sheet_payload(record))
            resp.raise_for_status()
            logger.info("Submission %s mirrored to spreadsheet", record.id)
        except httpx.HTTPError as exc:
            logger.warning("Spreadsheet sync failed for %s: %s", record.id, exc)

    def list(self) -> list[SubmissionRecord]:
        return self.inner.list()

    def clear(self) -> None:
        self.inner.clear()
