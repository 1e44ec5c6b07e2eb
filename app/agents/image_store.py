"""Image Store Agent: persist the generated image once every AI call has succeeded."""
from app.models.db_models import SocialImage
from app.utils.helpers import build_data_url
from app.workflow.state import ImageWorkflowState


async def image_store_agent(state: ImageWorkflowState) -> dict:
    """Insert one SocialImage row and flush for its id. The caller commits."""
    session = state["session"]
    image = SocialImage(
        user_id=state["user_id"],
        content_id=state.get("content_id"),
        image_url=build_data_url(state["mime_type"], state["image_base64"]),
        image_base64=state["image_base64"],
        mime_type=state["mime_type"],
        alt_text=state.get("alt_text"),
        size=state.get("size") or "square",
        prompt=state.get("prompt"),
        style=state.get("style"),
        model_used=state["model_used"],
    )
    session.add(image)
    await session.flush()
    return {"image_id": image.id}
