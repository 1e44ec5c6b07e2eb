"""Social image generation: validate, run the Gemini workflow, persist one row."""
from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.db_models import SocialContent, SocialImage, User
from app.models.schemas import GenerateImageRequest, GenerateImageResponse
from app.utils.logging import get_logger
from app.workflow import create_image_graph

logger = get_logger(__name__)

_graph = None


def get_graph():
    global _graph
    if _graph is None:
        _graph = create_image_graph()
    return _graph


class ImageGenerationError(Exception):
    """Any failure while generating or storing an image. The original error is the __cause__."""


class ImageService:
    """Generate and look up a user's social images."""

    def __init__(self, session: AsyncSession, user: User):
        self.session = session
        self.user = user

    async def generate(self, body: GenerateImageRequest) -> GenerateImageResponse:
        """
        Run compose -> image -> alt text -> store and commit.
        Input errors raise HTTPException before any AI call; everything after is
        wrapped in ImageGenerationError and rolled back.
        """
        if body.content_id is not None:
            await self._require_content(body.content_id)

        initial = {
            "session": self.session,
            "user_id": self.user.id,
            "platform": body.platform,
            "prompt": body.prompt,
            "size": body.size,
            "style": body.style,
            "content_id": body.content_id,
        }
        try:
            result = await get_graph().ainvoke(initial)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.exception("image_generation_failed", platform=body.platform, user_id=self.user.id, error=str(e))
            raise ImageGenerationError("Failed to generate social media image") from e

        logger.info("image_generated", image_id=result["image_id"], mime_type=result["mime_type"])
        return GenerateImageResponse(
            image_base64=result["image_base64"],
            mime_type=result["mime_type"],
            alt_text=result["alt_text"],
            image_id=result["image_id"],
        )

    async def list_images(self, limit: int = 50) -> list[SocialImage]:
        r = await self.session.execute(
            select(SocialImage)
            .where(SocialImage.user_id == self.user.id)
            .order_by(SocialImage.created_at.desc(), SocialImage.id.desc())
            .limit(limit)
        )
        return list(r.scalars().all())

    async def get_image(self, image_id: int) -> SocialImage:
        image = await self.session.get(SocialImage, image_id)
        if not image or image.user_id != self.user.id:
            raise HTTPException(status_code=404, detail="Image not found")
        return image

    async def _require_content(self, content_id: int) -> SocialContent:
        content = await self.session.get(SocialContent, content_id)
        if not content or content.user_id != self.user.id:
            raise HTTPException(status_code=404, detail="Content not found")
        return content
