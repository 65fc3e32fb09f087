"""Client for the remote image-generation service (Gemini image model)."""

from __future__ import annotations

import base64
import logging
from typing import Any

from google import genai
from google.genai import types

from matchlab.config import get_gemini_api_key, get_image_model
from matchlab.errors import ImageGenerationFailure

logger = logging.getLogger(__name__)

IMAGE_STYLE_SUFFIX: str = (
    "photorealistic, cinematic studio lighting, 8k, sharp focus, "
    "portrait photography, neutral studio background"
)


def styled_image_prompt(prompt: str) -> str:
    """Append the fixed portrait style to the prompt written by the text model."""
    return f"{prompt.strip()}. {IMAGE_STYLE_SUFFIX}"


def _first_inline_image(response: Any) -> tuple[str, bytes] | None:
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is None or not inline.data:
                continue
            data = inline.data
            if isinstance(data, str):
                data = base64.b64decode(data)
            return inline.mime_type or "image/png", data
    return None


class ImageClient:
    """Turns a text prompt into a ``data:`` URI holding the generated image."""

    def __init__(self, client: genai.Client | None = None, model: str | None = None) -> None:
        self._client = client
        self._model = model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            api_key = get_gemini_api_key()
            if not api_key:
                raise ImageGenerationFailure("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=api_key)
        return self._client

    async def generate_image(self, prompt: str) -> str:
        client = self._get_client()
        model = self._model or get_image_model()
        try:
            response = await client.aio.models.generate_content(
                model=model,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=types.ImageConfig(aspect_ratio="1:1"),
                ),
            )
        except Exception as exc:
            raise ImageGenerationFailure(f"Image service error: {exc}") from exc

        image = _first_inline_image(response)
        if image is None:
            raise ImageGenerationFailure("No image part in the image service response")

        mime_type, raw = image
        logger.info("Generated %s image (%d bytes)", mime_type, len(raw))
        return f"data:{mime_type};base64,{base64.b64encode(raw).decode('ascii')}"
