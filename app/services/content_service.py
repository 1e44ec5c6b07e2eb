"""Social content drafts and their revision history."""
import asyncio

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import app.services.gemini_service as gemini_svc
from app.config import settings
from app.models.db_models import SocialContent, SocialContentHistory, User
from app.models.schemas import ContentCreate, ContentUpdate
from app.utils.helpers import utcnow
from app.utils.logging import get_logger

logger = get_logger(__name__)

MANUAL_EDIT = "manual"


class ContentRevisionError(Exception):
    """The model could not produce a usable revision."""


class ContentService:
    """CRUD over a user's content; every text change appends a history row."""

    def __init__(self, session: AsyncSession, user: User):
        self.session = session
        self.user = user

    async def create(self, body: ContentCreate) -> SocialContent:
        content = SocialContent(
            user_id=self.user.id,
            platform=body.platform,
            content=body.content,
            image_url=body.image_url,
            image_alt_text=body.image_alt_text,
            status="draft",
        )
        self.session.add(content)
        await self.session.commit()
        await self.session.refresh(content)
        return content

    async def list_content(self, platform: str | None = None, status: str | None = None, limit: int = 50) -> list[SocialContent]:
        query = select(SocialContent).where(SocialContent.user_id == self.user.id)
        if platform:
            query = query.where(SocialContent.platform == platform)
        if status:
            query = query.where(SocialContent.status == status)
        r = await self.session.execute(query.order_by(SocialContent.created_at.desc(), SocialContent.id.desc()).limit(limit))
        return list(r.scalars().all())

    async def get(self, content_id: int) -> SocialContent:
        content = await self.session.get(SocialContent, content_id)
        if not content or content.user_id != self.user.id:
            raise HTTPException(status_code=404, detail="Content not found")
        return content

    async def update(self, content_id: int, body: ContentUpdate) -> SocialContent:
        content = await self.get(content_id)
        if body.content is not None and body.content != content.content:
            if not body.content.strip():
                raise HTTPException(status_code=400, detail="Content cannot be empty")
            self._record_revision(content, body.content, model_used=MANUAL_EDIT)
        if body.status is not None:
            content.status = body.status
            if body.status == "published" and content.published_at is None:
                content.published_at = utcnow()
        if body.image_url is not None:
            content.image_url = body.image_url or None
        if body.image_alt_text is not None:
            content.image_alt_text = body.image_alt_text or None
        if body.scheduled_for is not None:
            content.scheduled_for = body.scheduled_for
        await self.session.commit()
        await self.session.refresh(content)
        return content

    async def revise(self, content_id: int, instruction: str) -> SocialContent:
        """Rewrite the text with Gemini and log the edit against the text model."""
        content = await self.get(content_id)
        revised = await asyncio.to_thread(gemini_svc.revise_post_text, content.platform, content.content, instruction)
        if not revised:
            raise ContentRevisionError("Model returned an empty revision")
        self._record_revision(content, revised, model_used=settings.gemini_text_model, prompt=instruction)
        await self.session.commit()
        await self.session.refresh(content)
        logger.info("content_revised", content_id=content_id, model=settings.gemini_text_model)
        return content

    async def history(self, content_id: int) -> list[SocialContentHistory]:
        await self.get(content_id)
        r = await self.session.execute(
            select(SocialContentHistory)
            .where(SocialContentHistory.content_id == content_id)
            .order_by(SocialContentHistory.created_at, SocialContentHistory.id)
        )
        return list(r.scalars().all())

    async def set_engagement(self, content_id: int, metrics: dict) -> SocialContent:
        content = await self.get(content_id)
        content.engagement = metrics
        await self.session.commit()
        await self.session.refresh(content)
        return content

    def _record_revision(self, content: SocialContent, new_text: str, model_used: str, prompt: str | None = None) -> None:
        self.session.add(
            SocialContentHistory(
                content_id=content.id,
                previous_content=content.content,
                updated_content=new_text,
                update_prompt=prompt,
                model_used=model_used,
                created_by=self.user.id,
            )
        )
        content.content = new_text
