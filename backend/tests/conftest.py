from __future__ import annotations

import pytest

from helpers import CountingArchive, FakeAnalysisClient, FakeImageClient, make_full_profile
from matchlab import config
from matchlab.models.profile import Profile
from matchlab.pipeline import SubmissionPipeline


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point ~ at a temp dir and drop any MATCHLAB_* settings."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in (
        "MATCHLAB_PORT",
        "MATCHLAB_MODEL_PROVIDER",
        "MATCHLAB_ARCHIVE",
        "MATCHLAB_SHEETS_URL",
        "MATCHLAB_ADMIN_ENABLED",
        "MATCHLAB_ADMIN_TOKEN",
        "MATCHLAB_ANALYSIS_TIMEOUT",
        "MATCHLAB_IMAGE_MODEL",
        "GEMINI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_env_loaded", False)
    return tmp_path


@pytest.fixture
def archive() -> CountingArchive:
    return CountingArchive()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def pipeline(archive, analysis_client, image_client) -> SubmissionPipeline:
    return SubmissionPipeline(archive, analysis_client, image_client)


@pytest.fixture
def full_profile() -> Profile:
    return make_full_profile()
