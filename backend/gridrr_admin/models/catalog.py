from __future__ import annotations
import uuid
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, DateTime, Uuid, func
from gridrr_admin.db import Base, JSONList


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Website(Base):
    __tablename__ = "websites"
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(Text(), unique=True, index=True, nullable=False)  # upsert key
    built_with: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    tags: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    preview_video_url: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    submitted_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    twitter_handle: Mapped[str | None] = mapped_column(String(64), nullable=True)
    instagram_handle: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=_utcnow, nullable=True)


class Design(Base):
    __tablename__ = "designs"
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    designer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    designer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    twitter_handle: Mapped[str] = mapped_column(String(64), nullable=False)
    instagram_handle: Mapped[str] = mapped_column(String(64), nullable=False)
    tools_used: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    tags: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    image_url: Mapped[str] = mapped_column(Text(), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
