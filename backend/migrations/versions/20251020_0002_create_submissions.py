from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20251020_0002"
down_revision = "20251020_0001"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("submission_type", sa.String(length=16), nullable=False),
        sa.Column("contact_email", sa.String(length=320), nullable=False),
        sa.Column("twitter_handle", sa.String(length=64), nullable=True),
        sa.Column("instagram_handle", sa.String(length=64), nullable=True),
        sa.Column("additional_notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("submitted_by", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("publish_state", sa.String(length=16), nullable=True),
        sa.Column("publish_error", sa.Text(), nullable=True),
        sa.CheckConstraint("submission_type IN ('website','design')", name="ck_submission_type"),
        sa.CheckConstraint("status IN ('pending','in_review','approved','rejected')", name="ck_submission_status"),
    )
    op.create_index("ix_submissions_status", "submissions", ["status"])
    op.create_table(
        "submission_media",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("submission_id", sa.Uuid(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("media_url", sa.Text(), nullable=False),
        sa.Column("media_type", sa.String(length=64), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
    )
    op.create_index("ix_submission_media_submission_id", "submission_media", ["submission_id"])
    op.create_table(
        "website_submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("submission_id", sa.Uuid(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("tools_used", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("built_with", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_website_submissions_submission_id", "website_submissions", ["submission_id"])
    op.create_table(
        "design_submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("submission_id", sa.Uuid(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("design_type", sa.String(length=64), nullable=False),
        sa.Column("tools_used", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_design_submissions_submission_id", "design_submissions", ["submission_id"])

def downgrade() -> None:
    op.drop_index("ix_design_submissions_submission_id", table_name="design_submissions")
    op.drop_table("design_submissions")
    op.drop_index("ix_website_submissions_submission_id", table_name="website_submissions")
    op.drop_table("website_submissions")
    op.drop_index("ix_submission_media_submission_id", table_name="submission_media")
    op.drop_table("submission_media")
    op.drop_index("ix_submissions_status", table_name="submissions")
    op.drop_table("submissions")
