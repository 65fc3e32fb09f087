"""Configuration management for matchlab.

Loads environment variables from ~/.matchlab/.env and provides
factory functions for model providers, port settings, the admin view
switch, and base paths.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_PORT: int = 8395
DEFAULT_PROVIDER: str = "anthropic"
DEFAULT_ANTHROPIC_MODEL: str = "claude-haiku-4-5"
DEFAULT_IMAGE_MODEL: str = "gemini-2.5-flash-image"
DEFAULT_ARCHIVE_BACKEND: str = "jsonl"

DIR_DATA: str = "data"

ARCHIVE_FILENAME: str = "submissions.jsonl"
ENV_FILENAME: str = ".env"

_TRUTHY = {"1", "true", "yes", "on"}


def get_base_dir() -> Path:
    return Path("~/.matchlab").expanduser()


def get_port() -> int:
    _ensure_env_loaded()
    raw = os.getenv("MATCHLAB_PORT")
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            pass
    return DEFAULT_PORT


_env_loaded: bool = False


def _ensure_env_loaded() -> None:
    global _env_loaded
    if _env_loaded:
        return
    env_path = get_base_dir() / ENV_FILENAME
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
    _env_loaded = True


def reload_env() -> None:
    global _env_loaded
    _env_loaded = False
    _ensure_env_loaded()


def get_model():
    """Return a Strands model instance based on the configured provider."""
    _ensure_env_loaded()
    provider = os.getenv("MATCHLAB_MODEL_PROVIDER", DEFAULT_PROVIDER).lower().strip()

    if provider == "anthropic":
        from strands.models.anthropic import AnthropicModel
        model_id = os.getenv("MATCHLAB_ANTHROPIC_MODEL", DEFAULT_ANTHROPIC_MODEL).strip()
        return AnthropicModel(model_id=model_id, max_tokens=4096)

    if provider == "openai":
        from strands.models.openai import OpenAIModel
        return OpenAIModel(model_id="gpt-4o")

    if provider == "bedrock":
        from strands.models.bedrock import BedrockModel
        return BedrockModel(model_id="anthropic.claude-sonnet-4-20250514-v1:0")

    raise ValueError(
        f"Unknown model provider: {provider!r}. "
        "Supported providers: anthropic, openai, bedrock."
    )


def get_image_model() -> str:
    _ensure_env_loaded()
    return os.getenv("MATCHLAB_IMAGE_MODEL", DEFAULT_IMAGE_MODEL).strip()


def get_gemini_api_key() -> str | None:
    _ensure_env_loaded()
    return os.getenv("GEMINI_API_KEY") or None


def get_archive_backend() -> str:
    _ensure_env_loaded()
    return os.getenv("MATCHLAB_ARCHIVE", DEFAULT_ARCHIVE_BACKEND).lower().strip()


def get_sheets_url() -> str | None:
    """Return the spreadsheet web-app URL records are mirrored to, if any."""
    _ensure_env_loaded()
    url = os.getenv("MATCHLAB_SHEETS_URL", "").strip()
    return url or None


def is_admin_enabled() -> bool:
    """The admin view is off unless explicitly switched on."""
    _ensure_env_loaded()
    return os.getenv("MATCHLAB_ADMIN_ENABLED", "").lower().strip() in _TRUTHY


def get_admin_token() -> str | None:
    _ensure_env_loaded()
    token = os.getenv("MATCHLAB_ADMIN_TOKEN", "").strip()
    return token or None


def get_analysis_timeout() -> float | None:
    """Seconds to wait for the analysis reply; ``None`` waits forever."""
    _ensure_env_loaded()
    raw = os.getenv("MATCHLAB_ANALYSIS_TIMEOUT")
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None
