"""GET /published: posts that reached their platform."""
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.deps import get_current_user
from app.models.db_models import PublishedPost, User
from app.models.schemas import PublishedPostOut

router = APIRouter(prefix="/published", tags=["published"])


@router.get("", response_model=list[PublishedPostOut])
async def list_published(
    platform: str | None = None,
    limit: int = 50,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """The caller's published posts, newest first."""
    query = select(PublishedPost).where(PublishedPost.user_id == user.id)
    if platform:
        query = query.where(PublishedPost.platform == platform)
    r = await session.execute(query.order_by(PublishedPost.published_at.desc(), PublishedPost.id.desc()).limit(limit))
    return list(r.scalars().all())
