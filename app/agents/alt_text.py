"""Alt Text Agent: describe the image for screen readers, falling back to the user's prompt."""
import asyncio

import app.services.gemini_service as gemini_svc
from app.workflow.state import ImageWorkflowState


async def alt_text_agent(state: ImageWorkflowState) -> dict:
    prompt = state.get("prompt") or ""
    alt_text = await asyncio.to_thread(gemini_svc.generate_alt_text, prompt)
    return {"alt_text": alt_text or prompt}
