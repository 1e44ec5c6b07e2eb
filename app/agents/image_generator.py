"""Image Generation Agent: Gemini image model renders the composed prompt."""
import asyncio

import app.services.gemini_service as gemini_svc
from app.config import settings
from app.workflow.state import ImageWorkflowState


async def image_generator_agent(state: ImageWorkflowState) -> dict:
    """Call Gemini for one image. Raises LookupError if the model returns none."""
    # Gemini client is sync; run in thread to avoid blocking
    image = await asyncio.to_thread(gemini_svc.generate_image, state["composed_prompt"])
    return {
        "image_base64": image.base64,
        "mime_type": image.mime_type,
        "model_used": settings.gemini_image_model,
    }
