"""Initial schema: auth tables, social content/images/accounts, per-platform scheduled posts.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TS = sa.DateTime(timezone=True)
STATUS_CHECK = "status IN ('scheduled', 'processing', 'completed', 'failed')"


def _scheduled_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(256), nullable=False),
        sa.Column("schedule_id", sa.String(256), nullable=True),
        sa.Column("scheduled_for", TS, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("created_at", TS, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", TS, nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("email_verified", sa.Boolean(), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "session",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("expires_at", TS, nullable=False),
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.Column("ip_address", sa.Text(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_table(
        "account",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("account_id", sa.Text(), nullable=False),
        sa.Column("provider_id", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=True),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("id_token", sa.Text(), nullable=True),
        sa.Column("access_token_expires_at", TS, nullable=True),
        sa.Column("refresh_token_expires_at", TS, nullable=True),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("password", sa.Text(), nullable=True),
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "verification",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("identifier", sa.Text(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("expires_at", TS, nullable=False),
        sa.Column("created_at", TS, nullable=True),
        sa.Column("updated_at", TS, nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "bingo_social_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(256), nullable=False),
        sa.Column("platform", sa.String(20), nullable=False),
        sa.Column("platform_account_id", sa.String(256), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("token_expires_at", TS, nullable=True),
        sa.Column("profile_name", sa.String(200), nullable=True),
        sa.Column("profile_image", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", TS, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", TS, nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("social_account_user_platform_idx", "bingo_social_account", ["user_id", "platform"])

    op.create_table(
        "bingo_social_content",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(256), nullable=False),
        sa.Column("platform", sa.String(20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("image_alt_text", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("scheduled_for", TS, nullable=True),
        sa.Column("published_at", TS, nullable=True),
        sa.Column("engagement", sa.JSON(), nullable=True),
        sa.Column("created_at", TS, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", TS, nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("social_content_user_id_idx", "bingo_social_content", ["user_id"])
    op.create_index("social_content_platform_idx", "bingo_social_content", ["platform"])
    op.create_index("social_content_status_idx", "bingo_social_content", ["status"])

    op.create_table(
        "bingo_social_content_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("previous_content", sa.Text(), nullable=False),
        sa.Column("updated_content", sa.Text(), nullable=False),
        sa.Column("update_prompt", sa.Text(), nullable=True),
        sa.Column("model_used", sa.String(64), nullable=False),
        sa.Column("created_at", TS, nullable=False, server_default=sa.func.now()),
        sa.Column("created_by", sa.String(256), nullable=False),
        sa.ForeignKeyConstraint(["content_id"], ["bingo_social_content.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("social_content_history_content_id_idx", "bingo_social_content_history", ["content_id"])

    op.create_table(
        "bingo_social_image",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.String(256), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("image_base64", sa.Text(), nullable=False),
        sa.Column("mime_type", sa.String(50), nullable=False),
        sa.Column("alt_text", sa.Text(), nullable=True),
        sa.Column("size", sa.String(20), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=True),
        sa.Column("style", sa.String(100), nullable=True),
        sa.Column("model_used", sa.String(64), nullable=False),
        sa.Column("created_at", TS, nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["content_id"], ["bingo_social_content.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("social_image_user_id_idx", "bingo_social_image", ["user_id"])
    op.create_index("social_image_content_id_idx", "bingo_social_image", ["content_id"])

    op.create_table(
        "bingo_scheduled_linkedin_post",
        *_scheduled_columns(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("title", sa.String(300), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("linkedin_post_id", sa.String(100), nullable=True),
        sa.Column("post_result", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(STATUS_CHECK, name="scheduled_linkedin_post_status_check"),
        sa.CheckConstraint(
            "status <> 'completed' OR linkedin_post_id IS NOT NULL",
            name="scheduled_linkedin_post_completed_check",
        ),
    )
    op.create_table(
        "bingo_scheduled_tweet",
        *_scheduled_columns(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("tweet_id", sa.String(50), nullable=True),
        sa.Column("post_result", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(STATUS_CHECK, name="scheduled_tweet_status_check"),
        sa.CheckConstraint("status <> 'completed' OR tweet_id IS NOT NULL", name="scheduled_tweet_completed_check"),
    )
    op.create_table(
        "bingo_scheduled_youtube_video",
        *_scheduled_columns(),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("privacy_status", sa.String(20), nullable=False, server_default="private"),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=False),
        sa.Column("youtube_id", sa.String(50), nullable=True),
        sa.Column("upload_result", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(STATUS_CHECK, name="scheduled_youtube_video_status_check"),
        sa.CheckConstraint(
            "status <> 'completed' OR youtube_id IS NOT NULL",
            name="scheduled_youtube_video_completed_check",
        ),
    )
    for table in ("scheduled_linkedin_post", "scheduled_tweet", "scheduled_youtube_video"):
        op.create_index(f"{table}_user_id_idx", f"bingo_{table}", ["user_id"])
        op.create_index(f"{table}_status_idx", f"bingo_{table}", ["status"])
        op.create_index(f"{table}_scheduled_for_idx", f"bingo_{table}", ["scheduled_for"])


def downgrade() -> None:
    op.drop_table("bingo_scheduled_youtube_video")
    op.drop_table("bingo_scheduled_tweet")
    op.drop_table("bingo_scheduled_linkedin_post")
    op.drop_table("bingo_social_image")
    op.drop_table("bingo_social_content_history")
    op.drop_table("bingo_social_content")
    op.drop_table("bingo_social_account")
    op.drop_table("verification")
    op.drop_table("account")
    op.drop_table("session")
    op.drop_table("user")
