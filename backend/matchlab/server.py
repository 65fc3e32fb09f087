"""FastAPI application for matchlab.

Run with: uvicorn matchlab.server:app --host 0.0.0.0 --port 8395 --reload
Or: matchlab start
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from matchlab.config import is_admin_enabled
from matchlab.routes import admin, completeness, health, session
from matchlab.storage.filesystem import ensure_directories

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Match Lab",
    description="Questionnaire-driven ideal match specification",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8395",
        "http://127.0.0.1",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8395",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(completeness.router)
app.include_router(session.router)
app.include_router(admin.router)


@app.on_event("startup")
async def on_startup():
    ensure_directories()
    if is_admin_enabled():
        logger.warning("Admin view is enabled; archived submissions are reachable over HTTP.")
    logger.info("Match Lab server started.")
