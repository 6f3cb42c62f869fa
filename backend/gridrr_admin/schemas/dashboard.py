from __future__ import annotations
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime


class DashboardStats(BaseModel):
    total_designs: int
    total_websites: int
    active_submissions: int
    storage_used_bytes: int | None = None  # None when storage could not be listed


class ActivityItem(BaseModel):
    id: UUID
    type: str = "submission"
    name: str
    user: str
    time: datetime
    status: str


class NavItem(BaseModel):
    name: str
    href: str


class DashboardPublic(BaseModel):
    stats: DashboardStats
    recent_activity: list[ActivityItem] = Field(default_factory=list)
    navigation: list[NavItem] = Field(default_factory=list)
