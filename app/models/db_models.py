"""SQLAlchemy models for PostgreSQL. Run migrations to create tables."""
from datetime import datetime
from typing import Any, AsyncGenerator, ClassVar

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, validates
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.utils.helpers import as_utc, utcnow

# Application tables share one database with other projects; auth tables stay unprefixed
TABLE_PREFIX = "bingo_"

CONTENT_STATUSES = ("draft", "scheduled", "published")
SCHEDULE_STATUSES = ("scheduled", "processing", "completed", "failed")
PLATFORMS = ("twitter", "linkedin", "facebook", "instagram")
IMAGE_SIZES = ("square", "portrait", "landscape", "twitter")

# Allowed lifecycle moves for scheduled rows; completed/failed are terminal
SCHEDULE_TRANSITIONS = {
    "scheduled": ("processing", "failed"),
    "processing": ("completed", "failed"),
    "completed": (),
    "failed": (),
}


class Base(DeclarativeBase):
    pass


class InvalidTransitionError(ValueError):
    """Raised when a scheduled row is moved along an edge the lifecycle does not allow."""


def _status_check(name: str) -> CheckConstraint:
    allowed = ", ".join(f"'{s}'" for s in SCHEDULE_STATUSES)
    return CheckConstraint(f"status IN ({allowed})", name=f"{name}_status_check")


# ----- Auth -----
class User(Base):
    """Application user. Ids are opaque strings issued by the auth provider."""

    __tablename__ = "user"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    sessions: Mapped[list["AuthSession"]] = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")
    social_accounts: Mapped[list["SocialAccount"]] = relationship("SocialAccount", back_populates="user", cascade="all, delete-orphan")


class AuthSession(Base):
    """Login session; the token is presented as a bearer token on API calls."""

    __tablename__ = "session"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    ip_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str] = mapped_column(Text, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="sessions")

    def is_expired(self, now: datetime | None = None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())


class Account(Base):
    """Auth-provider account (credential or OAuth login) backing a user."""

    __tablename__ = "account"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    account_id: Mapped[str] = mapped_column(Text, nullable=False)
    provider_id: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(Text, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    access_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    id_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    access_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    refresh_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    password: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Verification(Base):
    __tablename__ = "verification"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    identifier: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=utcnow, onupdate=utcnow)


# ----- Social -----
class SocialAccount(Base):
    """Linked external account (one per user and platform) with its OAuth token bundle."""

    __tablename__ = f"{TABLE_PREFIX}social_account"
    __table_args__ = (Index("social_account_user_platform_idx", "user_id", "platform"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(256), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    platform: Mapped[str] = mapped_column(String(20), nullable=False)  # twitter | linkedin | youtube | facebook | instagram
    platform_account_id: Mapped[str] = mapped_column(String(256), nullable=False)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    profile_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    profile_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="social_accounts")


class SocialContent(Base):
    """Drafted or generated post text for one platform."""

    __tablename__ = f"{TABLE_PREFIX}social_content"
    __table_args__ = (
        Index("social_content_user_id_idx", "user_id"),
        Index("social_content_platform_idx", "platform"),
        Index("social_content_status_idx", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(256), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    platform: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_alt_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")  # draft | scheduled | published
    scheduled_for: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    engagement: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    history: Mapped[list["SocialContentHistory"]] = relationship(
        "SocialContentHistory", back_populates="social_content", cascade="all, delete-orphan", passive_deletes=True
    )

    @validates("status")
    def _validate_status(self, key: str, value: str) -> str:
        if value not in CONTENT_STATUSES:
            raise ValueError(f"Invalid content status: {value}")
        return value


class SocialContentHistory(Base):
    """Append-only revision log for a content row."""

    __tablename__ = f"{TABLE_PREFIX}social_content_history"
    __table_args__ = (Index("social_content_history_content_id_idx", "content_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content_id: Mapped[int] = mapped_column(
        Integer, ForeignKey(f"{TABLE_PREFIX}social_content.id", ondelete="CASCADE"), nullable=False
    )
    previous_content: Mapped[str] = mapped_column(Text, nullable=False)
    updated_content: Mapped[str] = mapped_column(Text, nullable=False)
    update_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    model_used: Mapped[str] = mapped_column(String(64), nullable=False)  # gemini model id, or "manual"
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False)

    social_content: Mapped["SocialContent"] = relationship("SocialContent", back_populates="history")


class SocialImage(Base):
    """Generated image, stored inline as base64 and as a data URL."""

    __tablename__ = f"{TABLE_PREFIX}social_image"
    __table_args__ = (
        Index("social_image_user_id_idx", "user_id"),
        Index("social_image_content_id_idx", "content_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey(f"{TABLE_PREFIX}social_content.id", ondelete="SET NULL"), nullable=True
    )
    user_id: Mapped[str] = mapped_column(String(256), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    image_base64: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(50), nullable=False)
    alt_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    size: Mapped[str] = mapped_column(String(20), nullable=False)  # square | portrait | landscape | twitter
    prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    style: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model_used: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


# ----- Scheduled posts -----
class ScheduledJobMixin:
    """Columns and lifecycle shared by the per-platform scheduled tables.

    Subclasses name the column holding the platform's post id in ``post_id_field``
    and the JSON result column in ``result_field``.
    """

    post_id_field: ClassVar[str] = ""
    result_field: ClassVar[str] = "post_result"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    schedule_id: Mapped[str | None] = mapped_column(String(256), nullable=True)
    scheduled_for: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    @property
    def platform_post_id(self) -> str | None:
        return getattr(self, self.post_id_field)

    @property
    def result(self) -> dict | None:
        return getattr(self, self.result_field)

    @property
    def summary_text(self) -> str | None:
        return getattr(self, "content", None) or getattr(self, "title", None)

    def _check_scheduled_for(self, value: datetime) -> datetime:
        if value is None:
            raise ValueError("scheduled_for is required")
        current = self.__dict__.get("scheduled_for")
        if current is not None and as_utc(current) != as_utc(value):
            raise ValueError("scheduled_for cannot change once set; reschedule instead")
        return value

    def _check_status(self, value: str) -> str:
        if value not in SCHEDULE_STATUSES:
            raise ValueError(f"Invalid schedule status: {value}")
        return value

    def transition(self, status: str, post_id: str | None = None, result: dict[str, Any] | None = None) -> None:
        """Move along the lifecycle, recording the platform id and result when given."""
        current = self.status or "scheduled"
        if status not in SCHEDULE_TRANSITIONS.get(current, ()):
            raise InvalidTransitionError(f"Cannot move from {current} to {status}")
        if post_id:
            setattr(self, self.post_id_field, post_id)
        if status == "completed" and not self.platform_post_id:
            raise InvalidTransitionError("A completed post needs a platform post id")
        if result is not None:
            setattr(self, self.result_field, result)
        self.status = status


class ScheduledLinkedInPost(ScheduledJobMixin, Base):
    __tablename__ = f"{TABLE_PREFIX}scheduled_linkedin_post"
    __table_args__ = (
        Index("scheduled_linkedin_post_user_id_idx", "user_id"),
        Index("scheduled_linkedin_post_status_idx", "status"),
        Index("scheduled_linkedin_post_scheduled_for_idx", "scheduled_for"),
        _status_check("scheduled_linkedin_post"),
        CheckConstraint(
            "status <> 'completed' OR linkedin_post_id IS NOT NULL",
            name="scheduled_linkedin_post_completed_check",
        ),
    )
    post_id_field = "linkedin_post_id"

    user_id: Mapped[str] = mapped_column(String(256), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(String(300), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    linkedin_post_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    post_result: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    @validates("scheduled_for")
    def _validate_scheduled_for(self, key, value):
        return self._check_scheduled_for(value)

    @validates("status")
    def _validate_status(self, key, value):
        return self._check_status(value)


class ScheduledTweet(ScheduledJobMixin, Base):
    __tablename__ = f"{TABLE_PREFIX}scheduled_tweet"
    __table_args__ = (
        Index("scheduled_tweet_user_id_idx", "user_id"),
        Index("scheduled_tweet_status_idx", "status"),
        Index("scheduled_tweet_scheduled_for_idx", "scheduled_for"),
        _status_check("scheduled_tweet"),
        CheckConstraint("status <> 'completed' OR tweet_id IS NOT NULL", name="scheduled_tweet_completed_check"),
    )
    post_id_field = "tweet_id"

    user_id: Mapped[str] = mapped_column(String(256), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tweet_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    post_result: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    @validates("scheduled_for")
    def _validate_scheduled_for(self, key, value):
        return self._check_scheduled_for(value)

    @validates("status")
    def _validate_status(self, key, value):
        return self._check_status(value)


class ScheduledYoutubeVideo(ScheduledJobMixin, Base):
    __tablename__ = f"{TABLE_PREFIX}scheduled_youtube_video"
    __table_args__ = (
        Index("scheduled_youtube_video_user_id_idx", "user_id"),
        Index("scheduled_youtube_video_status_idx", "status"),
        Index("scheduled_youtube_video_scheduled_for_idx", "scheduled_for"),
        _status_check("scheduled_youtube_video"),
        CheckConstraint(
            "status <> 'completed' OR youtube_id IS NOT NULL",
            name="scheduled_youtube_video_completed_check",
        ),
    )
    post_id_field = "youtube_id"
    result_field = "upload_result"

    user_id: Mapped[str] = mapped_column(String(256), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list | None] = mapped_column(JSON, nullable=True)
    privacy_status: Mapped[str] = mapped_column(String(20), nullable=False, default="private")
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str] = mapped_column(Text, nullable=False)
    youtube_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    upload_result: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    @validates("scheduled_for")
    def _validate_scheduled_for(self, key, value):
        return self._check_scheduled_for(value)

    @validates("status")
    def _validate_status(self, key, value):
        return self._check_status(value)


class PublishedPost(Base):
    """A post that reached its platform. Written when a scheduled row completes."""

    __tablename__ = f"{TABLE_PREFIX}published_post"
    __table_args__ = (
        Index("published_post_user_platform_idx", "user_id", "platform"),
        UniqueConstraint("platform", "platform_post_id", name="published_post_platform_post_id_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(256), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    platform: Mapped[str] = mapped_column(String(20), nullable=False)  # linkedin | twitter | youtube
    platform_post_id: Mapped[str] = mapped_column(String(100), nullable=False)
    scheduled_row_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    text: Mapped[str | None] = mapped_column(Text, nullable=True)  # post body, or the video title
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    result: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


SCHEDULED_MODELS: dict[str, type[ScheduledJobMixin]] = {
    "linkedin": ScheduledLinkedInPost,
    "twitter": ScheduledTweet,
    "youtube": ScheduledYoutubeVideo,
}


# Async engine and session factory
_engine = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_db() -> async_sessionmaker[AsyncSession]:
    """Create async engine and session factory. Call once at app startup."""
    global _engine, _session_factory
    if _session_factory is not None:
        return _session_factory
    url = (settings.database_url or "").strip()
    if not url:
        raise ValueError(
            "DATABASE_URL is not set. Add your connection string to .env; use postgresql+asyncpg://..."
        )
    kwargs: dict[str, Any] = {"echo": settings.log_level.upper() == "DEBUG"}
    if url.startswith("sqlite") and (":memory:" in url or url.endswith("://")):
        # One shared connection so every session sees the same in-memory database
        kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    _engine = create_async_engine(url, **kwargs)
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency: yield a DB session for FastAPI. Caller commits/rollbacks."""
    factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_tables() -> None:
    """Create all tables. Use for dev; prefer Alembic for production."""
    init_db()
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
