from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.db import get_db
from kanban.schemas.dashboard import DashboardStats
from kanban.services.queries import fetch_dashboard_stats


router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)) -> DashboardStats:
    return await fetch_dashboard_stats(db)
