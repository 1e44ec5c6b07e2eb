"""APScheduler-backed dispatch of scheduled posts.

Each scheduled row gets one date-triggered job whose id is stored as the row's
``schedule_id``. When the job fires it claims the row with a conditional
UPDATE (scheduled -> processing) and then records completed | failed. Only one
run can win the claim, so delivery is at most once even when several workers
hold the same job.
"""
import asyncio
import uuid
from datetime import datetime

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config import settings
from app.models.db_models import SCHEDULED_MODELS, PublishedPost, SocialAccount, init_db
from app.services.publishers import PUBLISHERS, PublishError
from app.utils.helpers import as_utc, utcnow
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ScheduleDispatcher:
    """Registers and cancels one-shot publish jobs."""

    def __init__(self, scheduler: BaseScheduler | None = None):
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def schedule(self, platform: str, row_id: int, run_at: datetime, schedule_id: str | None = None) -> str:
        """Add (or replace) the job for a row and return its schedule id."""
        job_id = schedule_id or f"{platform}-{row_id}-{uuid.uuid4().hex[:8]}"
        # Overdue rows (e.g. after a restart) run right away
        run_date = max(as_utc(run_at), utcnow())
        self.scheduler.add_job(
            run_scheduled_dispatch,
            "date",
            run_date=run_date,
            id=job_id,
            args=[platform, row_id],
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.info("dispatch_job_added", platform=platform, row_id=row_id, schedule_id=job_id, run_date=run_date.isoformat())
        return job_id

    def cancel(self, schedule_id: str | None) -> None:
        if not schedule_id:
            return
        try:
            self.scheduler.remove_job(schedule_id)
        except JobLookupError:
            logger.info("dispatch_job_missing", schedule_id=schedule_id)

    async def restore(self, session: AsyncSession) -> int:
        """Re-register jobs for rows still waiting to run. Returns how many were restored."""
        restored = 0
        for platform, model in SCHEDULED_MODELS.items():
            r = await session.execute(select(model).where(model.status == "scheduled"))
            for row in r.scalars().all():
                row.schedule_id = self.schedule(platform, row.id, row.scheduled_for, schedule_id=row.schedule_id)
                restored += 1
        await session.commit()
        if restored:
            logger.info("dispatch_jobs_restored", count=restored)
        return restored


# Set from main on startup
_dispatcher: ScheduleDispatcher | None = None


def set_dispatcher(dispatcher: ScheduleDispatcher | None) -> None:
    global _dispatcher
    _dispatcher = dispatcher


def get_dispatcher() -> ScheduleDispatcher | None:
    return _dispatcher


def run_scheduled_dispatch(platform: str, row_id: int) -> None:
    """Background job (sync): publish one scheduled row on a fresh event loop."""
    asyncio.run(_dispatch_in_job(platform, row_id))


async def _dispatch_in_job(platform: str, row_id: int) -> None:
    # Pooled connections belong to the app's event loop; the job runs on its own
    engine = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        await dispatch_scheduled_post(platform, row_id, session_factory=factory)
    finally:
        await engine.dispose()


async def _active_account(session: AsyncSession, user_id: str, platform: str) -> SocialAccount | None:
    r = await session.execute(
        select(SocialAccount).where(
            SocialAccount.user_id == user_id,
            SocialAccount.platform == platform,
            SocialAccount.is_active.is_(True),
        )
    )
    return r.scalars().first()


async def _claim(session: AsyncSession, model, row_id: int) -> bool:
    """Move scheduled -> processing in one conditional UPDATE; only one caller can win."""
    r = await session.execute(
        update(model)
        .where(model.id == row_id, model.status == "scheduled")
        .values(status="processing", updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return r.rowcount == 1


async def dispatch_scheduled_post(
    platform: str,
    row_id: int,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> str | None:
    """Publish a due row and record the outcome. Returns the final status, or None if skipped."""
    model = SCHEDULED_MODELS[platform]
    factory = session_factory or init_db()
    async with factory() as session:
        if not await _claim(session, model, row_id):
            logger.info("dispatch_skipped", platform=platform, row_id=row_id)
            return None
        row = await session.get(model, row_id, populate_existing=True)
        user_id = row.user_id

        try:
            account = await _active_account(session, user_id, platform)
            if account is None:
                raise PublishError(f"No active {platform} account linked")
            result = await PUBLISHERS[platform](account, row)
            row.transition("completed", post_id=result.post_id, result=result.payload)
            session.add(
                PublishedPost(
                    user_id=user_id,
                    platform=platform,
                    platform_post_id=result.post_id,
                    scheduled_row_id=row.id,
                    text=row.summary_text,
                    url=result.url,
                    result=result.payload,
                )
            )
        except PublishError as e:
            logger.warning("dispatch_failed", platform=platform, row_id=row_id, error=str(e))
            row.transition("failed", result={"error": str(e)})
        except Exception as e:
            logger.exception("dispatch_crashed", platform=platform, row_id=row_id, error=str(e))
            # The row is already processing; reload it from a clean transaction and close it out
            await session.rollback()
            row = await session.get(model, row_id, populate_existing=True)
            row.transition("failed", result={"error": str(e) or e.__class__.__name__})
        await session.commit()
    logger.info("dispatch_done", platform=platform, row_id=row_id, status=row.status, post_id=row.platform_post_id)
    return row.status
