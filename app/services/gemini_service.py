"""Gemini API: social image generation, alt text and post revision."""
import base64
from dataclasses import dataclass
from typing import Any

from app.config import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)

# Lazy client to avoid import errors when API key is missing
_gemini_client: Any = None


@dataclass
class GeneratedImage:
    """One image returned by the model, base64 encoded."""

    base64: str
    mime_type: str


def _get_client():
    """Return Google GenAI client. Uses google-genai SDK."""
    global _gemini_client
    if _gemini_client is None:
        try:
            from google import genai

            _gemini_client = genai.Client(api_key=settings.gemini_api_key)
        except Exception as e:
            logger.warning("gemini_client_init_failed", error=str(e))
            raise ValueError("Gemini API key not configured or invalid") from e
    return _gemini_client


def _response_parts(response) -> list:
    parts = getattr(response, "parts", None)
    if parts is None and getattr(response, "candidates", None):
        content = response.candidates[0].content
        parts = content.parts if content is not None else None
    return list(parts or [])


def image_parts(response) -> list[GeneratedImage]:
    """Collect every inline image part from a generate_content response."""
    images = []
    for part in _response_parts(response):
        inline = getattr(part, "inline_data", None)
        if inline is None or not getattr(inline, "data", None):
            continue
        mime_type = getattr(inline, "mime_type", None) or ""
        if not mime_type.startswith("image/"):
            continue
        data = inline.data
        encoded = base64.b64encode(data).decode("ascii") if isinstance(data, bytes) else str(data)
        images.append(GeneratedImage(base64=encoded, mime_type=mime_type))
    return images


def generate_image(prompt: str) -> GeneratedImage:
    """
    Ask the image model for a picture matching prompt.
    Raises LookupError when the response carries no image part.
    """
    from google.genai import types

    client = _get_client()
    response = client.models.generate_content(
        model=settings.gemini_image_model,
        contents=[prompt],
        config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
    )
    images = image_parts(response)
    if not images:
        logger.warning("gemini_image_missing", model=settings.gemini_image_model)
        raise LookupError("No image was generated")
    return images[0]


def generate_alt_text(prompt: str) -> str:
    """Short descriptive alt text for an image made from prompt. May be empty."""
    from google.genai import types

    client = _get_client()
    response = client.models.generate_content(
        model=settings.gemini_text_model,
        contents=[f"Generate a concise, descriptive alt text for this image: {prompt}"],
        config=types.GenerateContentConfig(max_output_tokens=settings.alt_text_max_tokens),
    )
    return (response.text or "").strip()


def revise_post_text(platform: str, content: str, instruction: str) -> str:
    """Rewrite a post following instruction; returns only the new post text."""
    client = _get_client()
    prompt = f"""You are editing a {platform} post.

Current post:
{content}

Instruction:
{instruction}

Return ONLY the rewritten post text, with no preamble, quotes or markdown fences.
"""
    try:
        response = client.models.generate_content(
            model=settings.gemini_text_model,
            contents=[prompt],
        )
    except Exception as e:
        logger.exception("gemini_revision_failed", error=str(e))
        raise
    text = (response.text or "").strip()
    if text.startswith("```") and text.endswith("```"):
        text = text.strip("`").strip()
    return text
