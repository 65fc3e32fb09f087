"""Health check endpoint for matchlab.

Returns server status along with the archived submission count and
whether the admin view is enabled.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from matchlab.config import is_admin_enabled
from matchlab.dependencies import get_archive
from matchlab.storage.archive import Archive

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/health")
async def health(archive: Archive = Depends(get_archive)):
    """Health check endpoint."""
    try:
        submissions_count = len(archive.list())
    except Exception as exc:
        logger.warning("Failed to count submissions: %s", exc)
        submissions_count = 0

    return {
        "status": "ok",
        "submissions_count": submissions_count,
        "admin_enabled": is_admin_enabled(),
    }
