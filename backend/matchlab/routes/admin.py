"""Admin endpoints over the submission archive.

- GET    /api/admin/submissions -> every archived record, oldest first
- DELETE /api/admin/submissions -> wipe the archive
- GET    /api/admin/export      -> spreadsheet download

All routes are refused unless the admin view is enabled in the
configuration (and, if configured, the admin token matches).
"""

from __future__ import annotations

import io
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from matchlab.dependencies import get_archive, require_admin
from matchlab.errors import ArchiveWriteFailure
from matchlab.export import export_filename, export_xlsx
from matchlab.storage.archive import Archive

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/submissions")
async def list_submissions(archive: Archive = Depends(get_archive)):
    """List archived submissions with and without analysis results."""
    records = archive.list()
    return {
        "submissions": [r.model_dump(mode="json") for r in records],
        "total": len(records),
    }


@router.delete("/submissions")
async def clear_submissions(archive: Archive = Depends(get_archive)):
    try:
        archive.clear()
    except ArchiveWriteFailure as exc:
        logger.warning("Failed to clear archive: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    logger.info("Archive cleared from the admin view")
    return {"ok": True}


@router.get("/export")
async def export_submissions(archive: Archive = Depends(get_archive)):
    """Download all submissions as an .xlsx workbook (photos excluded)."""
    buffer = io.BytesIO()
    try:
        export_xlsx(archive.list(), buffer)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    buffer.seek(0)
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
