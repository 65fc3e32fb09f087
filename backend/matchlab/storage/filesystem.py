"""Filesystem helpers for the ~/.matchlab/ directory tree.

Provides path resolution and directory creation used by the archive,
the CLI and the server.
"""

from __future__ import annotations

from pathlib import Path

from matchlab.config import (
    ARCHIVE_FILENAME,
    DIR_DATA,
    ENV_FILENAME,
    get_base_dir,
)


def ensure_directories() -> None:
    """Create the full ~/.matchlab/ directory tree if it does not exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)


def get_data_dir() -> Path:
    """Return the path to ~/.matchlab/data/."""
    return get_base_dir() / DIR_DATA


def get_archive_path() -> Path:
    """Return the path to ~/.matchlab/data/submissions.jsonl."""
    return get_data_dir() / ARCHIVE_FILENAME


def get_env_path() -> Path:
    """Return the path to ~/.matchlab/.env."""
    return get_base_dir() / ENV_FILENAME
