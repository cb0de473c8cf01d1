"""Blog posts in several categories.

Adds blog_post_categories, the link table holding a post's extra
categories next to its primary blog_posts.category_id.

Revision ID: 002_blog_post_categories
Revises: 001_baseline
Create Date: 2026-10-16
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "002_blog_post_categories"
down_revision: str | None = "001_baseline"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "blog_post_categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("post_id", sa.Integer, sa.ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "category_id", sa.Integer, sa.ForeignKey("blog_categories.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("post_id", "category_id", name="uq_blog_post_categories_post_category"),
    )
    op.create_index("idx_blog_post_categories_category_id", "blog_post_categories", ["category_id"])


def downgrade() -> None:
    op.drop_index("idx_blog_post_categories_category_id", table_name="blog_post_categories")
    op.drop_table("blog_post_categories")
