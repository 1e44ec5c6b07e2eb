"""GET /accounts and token bundle upsert/deactivation for linked social accounts."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.deps import get_current_user
from app.models.db_models import SocialAccount, User
from app.models.schemas import AccountPlatform, SocialAccountOut, SocialAccountUpsert
from app.utils.logging import get_logger

router = APIRouter(prefix="/accounts", tags=["accounts"])
logger = get_logger(__name__)


async def _find(session: AsyncSession, user: User, platform: str) -> SocialAccount | None:
    r = await session.execute(
        select(SocialAccount)
        .where(SocialAccount.user_id == user.id, SocialAccount.platform == platform)
        .order_by(SocialAccount.id.desc())
        .limit(1)
    )
    return r.scalar_one_or_none()


@router.get("", response_model=list[SocialAccountOut])
async def list_accounts(
    include_inactive: bool = False,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List the caller's linked social accounts."""
    query = select(SocialAccount).where(SocialAccount.user_id == user.id)
    if not include_inactive:
        query = query.where(SocialAccount.is_active.is_(True))
    r = await session.execute(query.order_by(SocialAccount.platform))
    return list(r.scalars().all())


@router.put("/{platform}", response_model=SocialAccountOut)
async def upsert_account(
    platform: AccountPlatform,
    body: SocialAccountUpsert,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Store the OAuth token bundle for a platform; reactivates an existing link."""
    account = await _find(session, user, platform)
    if account is None:
        account = SocialAccount(user_id=user.id, platform=platform)
        session.add(account)
    account.platform_account_id = body.platform_account_id
    account.access_token = body.access_token
    account.refresh_token = body.refresh_token
    account.token_expires_at = body.token_expires_at
    account.profile_name = body.profile_name
    account.profile_image = body.profile_image
    account.is_active = True
    await session.commit()
    await session.refresh(account)
    logger.info("social_account_linked", platform=platform, user_id=user.id)
    return account


@router.delete("/{platform}", response_model=SocialAccountOut)
async def deactivate_account(
    platform: AccountPlatform,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Mark the link inactive; the row is kept."""
    account = await _find(session, user, platform)
    if account is None:
        raise HTTPException(status_code=404, detail="Account not linked")
    account.is_active = False
    await session.commit()
    await session.refresh(account)
    return account
