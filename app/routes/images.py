"""POST /images/generate and stored image lookup."""
import base64

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.deps import get_current_user
from app.models.db_models import User
from app.models.schemas import GenerateImageRequest, GenerateImageResponse, SocialImageDetail, SocialImageOut
from app.services.image_service import ImageGenerationError, ImageService

router = APIRouter(prefix="/images", tags=["images"])


def _service(session: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)) -> ImageService:
    return ImageService(session, user)


@router.post("/generate", response_model=GenerateImageResponse)
async def generate_social_image(body: GenerateImageRequest, service: ImageService = Depends(_service)):
    """Generate an image and alt text with Gemini and store it."""
    try:
        return await service.generate(body)
    except ImageGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("", response_model=list[SocialImageOut])
async def list_images(limit: int = 50, service: ImageService = Depends(_service)):
    return await service.list_images(limit=limit)


@router.get("/{image_id}", response_model=SocialImageDetail)
async def get_image(image_id: int, service: ImageService = Depends(_service)):
    return await service.get_image(image_id)


@router.get("/{image_id}/raw")
async def get_image_bytes(image_id: int, service: ImageService = Depends(_service)):
    """Return the decoded image with its stored mime type."""
    image = await service.get_image(image_id)
    return Response(content=base64.b64decode(image.image_base64), media_type=image.mime_type)
