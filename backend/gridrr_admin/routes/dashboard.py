from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from gridrr_admin.auth.deps import require_user
from gridrr_admin.db import get_session
from gridrr_admin.navigation import NAV_ITEMS
from gridrr_admin.schemas.auth import AuthUser
from gridrr_admin.schemas.dashboard import DashboardPublic, NavItem
from gridrr_admin.services.dashboard import collect_stats, recent_activity
from gridrr_admin.services.storage import ObjectStorage, get_storage

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardPublic)
async def dashboard(
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    storage: ObjectStorage = Depends(get_storage),
):
    return DashboardPublic(
        stats=await collect_stats(session, storage),
        recent_activity=await recent_activity(session),
        navigation=[NavItem(**item) for item in NAV_ITEMS],
    )
