from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20251020_0003"
down_revision = "20251020_0002"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "websites",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("built_with", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("preview_video_url", sa.Text(), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("submitted_by", sa.String(length=200), nullable=True),
        sa.Column("twitter_handle", sa.String(length=64), nullable=True),
        sa.Column("instagram_handle", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
    )
    # upsert key for approvals
    op.create_index("ix_websites_url", "websites", ["url"], unique=True)
    op.create_table(
        "designs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("designer_name", sa.String(length=200), nullable=False),
        sa.Column("designer_email", sa.String(length=320), nullable=False),
        sa.Column("twitter_handle", sa.String(length=64), nullable=False),
        sa.Column("instagram_handle", sa.String(length=64), nullable=False),
        sa.Column("tools_used", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

def downgrade() -> None:
    op.drop_table("designs")
    op.drop_index("ix_websites_url", table_name="websites")
    op.drop_table("websites")
