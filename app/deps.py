"""Shared FastAPI dependencies."""
import secrets

from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db import get_db
from app.models.db_models import AuthSession, User
from app.utils.logging import get_logger

logger = get_logger(__name__)


async def get_current_user(
    authorization: str | None = Header(default=None),
    session: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller from an `Authorization: Bearer <session token>` header."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1].strip()
    r = await session.execute(select(AuthSession).where(AuthSession.token == token))
    auth_session = r.scalar_one_or_none()
    if not auth_session or auth_session.is_expired():
        logger.info("auth_session_rejected", found=auth_session is not None)
        raise HTTPException(status_code=401, detail="Session expired or invalid")
    user = await session.get(User, auth_session.user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


async def verify_dispatch_token(x_dispatch_token: str | None = Header(default=None)) -> None:
    """Guard the dispatch callback. Without DISPATCH_TOKEN configured the callback is closed."""
    if not settings.dispatch_token:
        logger.warning("dispatch_callback_disabled")
        raise HTTPException(status_code=403, detail="Dispatch callback is not enabled")
    if not x_dispatch_token or not secrets.compare_digest(x_dispatch_token, settings.dispatch_token):
        raise HTTPException(status_code=403, detail="Invalid dispatch token")
