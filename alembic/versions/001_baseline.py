"""Baseline schema: users, events, blog and academy content.

Creates users, events, blog_categories, blog_posts, blog_post_ratings,
blog_post_comments, academy_categories, academy_videos, video_ratings and
video_comments. The (entity, user) unique constraints on the rating tables
back the atomic rating upsert.

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-16
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())]
    if updated:
        columns.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()))
    return columns


def _category_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name_pt", sa.String(100), nullable=False),
        sa.Column("name_en", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("slug", name=f"uq_{name}_slug"),
    )


def _rating_table(name: str, fk: str, parent: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(fk, sa.Integer, sa.ForeignKey(f"{parent}.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(fk, "user_id", name=f"uq_{name}_{fk.removesuffix('_id')}_user"),
    )
    op.create_index(f"idx_{name}_user_id", name, ["user_id"])


def _comment_table(name: str, fk: str, parent: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(fk, sa.Integer, sa.ForeignKey(f"{parent}.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("comment", sa.Text, nullable=False),
        *_timestamps(),
    )
    op.create_index(f"idx_{name}_{fk}", name, [fk])
    op.create_index(f"idx_{name}_user_id", name, ["user_id"])


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("open_id", sa.String(64), nullable=False),
        sa.Column("name", sa.Text, nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("login_method", sa.String(64), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="user"),
        sa.Column("job_title", sa.String(255), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("linkedin", sa.String(500), nullable=True),
        sa.Column("profile_completed", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.Column("last_signed_in", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("open_id", name="uq_users_open_id"),
    )
    op.create_index("idx_users_role", "users", ["role"])

    # --- Events ---
    op.create_table(
        "events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title_pt", sa.String(255), nullable=False),
        sa.Column("title_en", sa.String(255), nullable=False),
        sa.Column("description_pt", sa.Text, nullable=True),
        sa.Column("description_en", sa.Text, nullable=True),
        sa.Column("event_type", sa.String(16), nullable=False, server_default="other"),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("event_url", sa.String(1000), nullable=True),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("idx_events_event_date", "events", ["event_date"])

    # --- Blog ---
    _category_table("blog_categories")
    op.create_table(
        "blog_posts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title_pt", sa.String(500), nullable=False),
        sa.Column("title_en", sa.String(500), nullable=False),
        sa.Column("content_pt", sa.Text, nullable=False),
        sa.Column("content_en", sa.Text, nullable=False),
        sa.Column("excerpt_pt", sa.Text, nullable=True),
        sa.Column("excerpt_en", sa.Text, nullable=True),
        sa.Column("slug", sa.String(500), nullable=False),
        sa.Column(
            "category_id", sa.Integer, sa.ForeignKey("blog_categories.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("cover_image_url", sa.String(1000), nullable=True),
        sa.Column("author_name", sa.String(255), nullable=True),
        sa.Column("author_linkedin", sa.String(500), nullable=True),
        sa.Column("published", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("slug", name="uq_blog_posts_slug"),
    )
    op.create_index("idx_blog_published_published_at", "blog_posts", ["published", "published_at"])
    op.create_index("idx_blog_category_id", "blog_posts", ["category_id"])
    _rating_table("blog_post_ratings", "post_id", "blog_posts")
    _comment_table("blog_post_comments", "post_id", "blog_posts")

    # --- Academy ---
    _category_table("academy_categories")
    op.create_table(
        "academy_videos",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title_pt", sa.String(500), nullable=False),
        sa.Column("title_en", sa.String(500), nullable=False),
        sa.Column("description_pt", sa.Text, nullable=True),
        sa.Column("description_en", sa.Text, nullable=True),
        sa.Column("video_url", sa.String(1000), nullable=False),
        sa.Column("thumbnail_url", sa.String(1000), nullable=True),
        sa.Column("duration", sa.Integer, nullable=True),
        sa.Column(
            "category_id", sa.Integer, sa.ForeignKey("academy_categories.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("published", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("idx_academy_published_category_id", "academy_videos", ["published", "category_id"])
    _rating_table("video_ratings", "video_id", "academy_videos")
    _comment_table("video_comments", "video_id", "academy_videos")


def downgrade() -> None:
    for table in (
        "video_comments",
        "video_ratings",
        "academy_videos",
        "academy_categories",
        "blog_post_comments",
        "blog_post_ratings",
        "blog_posts",
        "blog_categories",
        "events",
        "users",
    ):
        op.drop_table(table)
