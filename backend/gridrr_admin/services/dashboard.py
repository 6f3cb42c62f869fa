from __future__ import annotations
import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from gridrr_admin.errors import StorageError
from gridrr_admin.models.catalog import Design, Website
from gridrr_admin.models.submission import Submission, WebsiteSubmission
from gridrr_admin.schemas.dashboard import ActivityItem, DashboardStats
from gridrr_admin.services.storage import ObjectStorage

log = structlog.get_logger()


async def _count(session: AsyncSession, model) -> int:
    return int(await session.scalar(select(func.count()).select_from(model)) or 0)


async def collect_stats(session: AsyncSession, storage: ObjectStorage) -> DashboardStats:
    used = None
    try:
        used = storage.usage_bytes()
    except (StorageError, OSError) as e:
        log.warning("storage_usage_unavailable", error=str(e))
    return DashboardStats(
        total_designs=await _count(session, Design),
        total_websites=await _count(session, Website),
        active_submissions=await _count(session, Submission),
        storage_used_bytes=used,
    )


async def recent_activity(session: AsyncSession, limit: int = 5) -> list[ActivityItem]:
    q = (
        select(WebsiteSubmission)
        .options(selectinload(WebsiteSubmission.submission))
        .order_by(WebsiteSubmission.created_at.desc())
        .limit(limit)
    )
    rows = (await session.execute(q)).scalars().all()
    return [
        ActivityItem(
            id=w.id,
            name=(w.submission.title if w.submission else None) or "Untitled Submission",
            user=(w.submission.submitted_by if w.submission else None) or "Unknown User",
            time=w.created_at,
            status=(w.submission.status if w.submission else None) or "pending",
        )
        for w in rows
    ]
