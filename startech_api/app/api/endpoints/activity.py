"""
Activity log endpoints.

Any user may browse the activity log; aggregated statistics are limited
to administrators.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.db import Database, get_db
from ...core.security import get_current_user, require_roles
from ...schemas.common import build_pagination, envelope
from ...services.activity_service import ActivityService

router = APIRouter()


@router.get("/activity-logs")
async def list_activity_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    user_id: Optional[str] = Query(None, alias="userId"),
    module: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    order: str = Query("desc"),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """List activity records newest first (``order=asc`` reverses).

    Date filters are ISO strings compared against the record time.
    """
    logs, total = await ActivityService.list_logs(
        db,
        user_id=user_id,
        module=module,
        action=action,
        start_date=start_date,
        end_date=end_date,
        order=order,
        page=page,
        limit=limit,
    )
    return envelope(logs, pagination=build_pagination(page, limit, total))


@router.get("/activity-stats")
async def activity_stats(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    return envelope(await ActivityService.stats(db, start_date=start_date, end_date=end_date))


@router.get("/activity-logs/{user_id}")
async def user_activity_logs(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    logs, total = await ActivityService.list_logs(db, user_id=user_id, page=page, limit=limit)
    return envelope(logs, pagination=build_pagination(page, limit, total))
