"""Process-wide collaborators, built once and injected into routes.

Routes depend on ``get_pipeline`` / ``get_archive`` so tests can swap
them through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
import secrets
import threading

from fastapi import Depends, Header, HTTPException

from matchlab.clients.analysis import AnalysisClient
from matchlab.clients.image import ImageClient
from matchlab.config import (
    get_admin_token,
    get_analysis_timeout,
    get_archive_backend,
    get_sheets_url,
    is_admin_enabled,
)
from matchlab.pipeline import SubmissionPipeline
from matchlab.storage.archive import Archive, JsonlArchive, MemoryArchive
from matchlab.storage.filesystem import get_archive_path
from matchlab.storage.sheets import SheetsMirrorArchive

logger = logging.getLogger(__name__)

_pipeline: SubmissionPipeline | None = None
_pipeline_lock = threading.Lock()


def build_archive() -> Archive:
    """Build the archive selected by ``MATCHLAB_ARCHIVE``."""
    backend = get_archive_backend()
    if backend == "memory":
        archive: Archive = MemoryArchive()
    elif backend == "jsonl":
        archive = JsonlArchive(get_archive_path())
    else:
        raise ValueError(f"Unknown archive backend: {backend!r}. Supported: jsonl, memory.")

    sheets_url = get_sheets_url()
    if sheets_url:
        logger.info("Mirroring submissions to spreadsheet web app")
        archive = SheetsMirrorArchive(archive, sheets_url)
    return archive


def build_pipeline() -> SubmissionPipeline:
    return SubmissionPipeline(
        archive=build_archive(),
        analysis_client=AnalysisClient(timeout=get_analysis_timeout()),
        image_client=ImageClient(),
    )


def get_pipeline() -> SubmissionPipeline:
    global _pipeline
    with _pipeline_lock:
        if _pipeline is None:
            _pipeline = build_pipeline()
        return _pipeline


def get_archive(pipeline: SubmissionPipeline = Depends(get_pipeline)) -> Archive:
    return pipeline.archive_store


def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    """Guard for the admin surface.

    The admin view is disabled unless ``MATCHLAB_ADMIN_ENABLED`` is set;
    when ``MATCHLAB_ADMIN_TOKEN`` is also set, the ``X-Admin-Token``
    header must match it.
    """
    if not is_admin_enabled():
        raise HTTPException(status_code=403, detail="Admin view is disabled")
    token = get_admin_token()
    if token is not None and not secrets.compare_digest(x_admin_token or "", token):
        raise HTTPException(status_code=403, detail="Invalid admin token")
