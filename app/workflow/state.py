"""LangGraph state schema for the image generation workflow."""
from typing import Any, TypedDict


class ImageWorkflowState(TypedDict, total=False):
    """State passed between nodes. All keys optional for partial updates."""

    # Injected by the handler (never persisted as-is)
    session: Any  # AsyncSession
    user_id: str
    platform: str
    prompt: str
    size: str
    style: str | None
    content_id: int | None

    # Prompt composer
    composed_prompt: str

    # Image generator
    image_base64: str
    mime_type: str
    model_used: str

    # Alt text writer
    alt_text: str

    # Image store
    image_id: int
