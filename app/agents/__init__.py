"""LangGraph agents in the image generation workflow."""
from app.agents.image_prompt import image_prompt_agent
from app.agents.image_generator import image_generator_agent
from app.agents.alt_text import alt_text_agent
from app.agents.image_store import image_store_agent

__all__ = [
    "image_prompt_agent",
    "image_generator_agent",
    "alt_text_agent",
    "image_store_agent",
]
