from __future__ import annotations
import uuid
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Uuid, func
from gridrr_admin.db import Base, JSONList


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    submission_type: Mapped[str] = mapped_column(String(16), nullable=False)  # 'website' | 'design'
    contact_email: Mapped[str] = mapped_column(String(320), nullable=False)
    twitter_handle: Mapped[str | None] = mapped_column(String(64), nullable=True)
    instagram_handle: Mapped[str | None] = mapped_column(String(64), nullable=True)
    additional_notes: Mapped[str | None] = mapped_column(Text(), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # 'pending'|'in_review'|'approved'|'rejected'
    submitted_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    # Approval bookkeeping: None until a website approval starts, then 'pending' -> 'published' | 'failed'
    publish_state: Mapped[str | None] = mapped_column(String(16), nullable=True)
    publish_error: Mapped[str | None] = mapped_column(Text(), nullable=True)

    media: Mapped[list["SubmissionMedia"]] = relationship(
        back_populates="submission", cascade="all, delete-orphan", order_by="SubmissionMedia.id"
    )
    website_submissions: Mapped[list["WebsiteSubmission"]] = relationship(
        back_populates="submission", cascade="all, delete-orphan"
    )
    design_submissions: Mapped[list["DesignSubmission"]] = relationship(
        back_populates="submission", cascade="all, delete-orphan"
    )


class SubmissionMedia(Base):
    __tablename__ = "submission_media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    submission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("submissions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    media_url: Mapped[str] = mapped_column(Text(), nullable=False)
    media_type: Mapped[str] = mapped_column(String(64), nullable=False)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    submission: Mapped[Submission] = relationship(back_populates="media")


class WebsiteSubmission(Base):
    __tablename__ = "website_submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("submissions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    url: Mapped[str] = mapped_column(Text(), nullable=False)
    tools_used: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    built_with: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    submission: Mapped[Submission] = relationship(back_populates="website_submissions")


class DesignSubmission(Base):
    __tablename__ = "design_submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("submissions.id", ondelete="CASCADE"), index=True, nullable=False
    )
    design_type: Mapped[str] = mapped_column(String(64), nullable=False)
    tools_used: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    submission: Mapped[Submission] = relationship(back_populates="design_submissions")
