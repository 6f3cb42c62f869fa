from __future__ import annotations
from datetime import datetime, timezone
import structlog
from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from gridrr_admin.config import settings
from gridrr_admin.db import get_session

log = structlog.get_logger()

router = APIRouter(tags=["system"])


@router.get("/health")
async def health(request: Request, session: AsyncSession = Depends(get_session)):
    database = "ok"
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        log.warning("health_database_unreachable", error=str(e))
        database = "unreachable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "env": settings.environment,
        "database": database,
        "time": datetime.now(timezone.utc).isoformat(),
        "request_id": request.state.request_id,
    }


@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "display_name": settings.app_display_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
    }
