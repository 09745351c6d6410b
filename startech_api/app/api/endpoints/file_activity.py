"""
Endpoints over the daily activity files.

Any user may browse the entries; statistics, export and file details are
limited to administrators.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...core.security import get_current_user, require_roles
from ...schemas.common import build_pagination, envelope
from ...services.file_activity_service import FileActivityService

router = APIRouter()


def get_activity_log_dir(request: Request) -> Optional[str]:
    return request.app.state.activity_log_dir


@router.get("/file-activity-logs")
async def list_file_activity_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    user_id: Optional[str] = Query(None, alias="userId"),
    module: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    directory: Optional[str] = Depends(get_activity_log_dir),
    current_user: dict = Depends(get_current_user),
) -> dict:
    logs, total = await FileActivityService.list_logs(
        directory,
        user_id=user_id,
        module=module,
        action=action,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return envelope(logs, pagination=build_pagination(page, limit, total))


@router.get("/file-activity-logs/{user_id}")
async def user_file_activity_logs(
    user_id: str,
    limit: int = Query(20, ge=1, le=500),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    directory: Optional[str] = Depends(get_activity_log_dir),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return envelope(
        await FileActivityService.user_logs(directory, user_id, limit, start_date, end_date)
    )


@router.get("/file-activity-stats")
async def file_activity_stats(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    directory: Optional[str] = Depends(get_activity_log_dir),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    return envelope(await FileActivityService.stats(directory, start_date, end_date))


@router.get("/export-file-logs")
async def export_file_logs(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    directory: Optional[str] = Depends(get_activity_log_dir),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    """All entries in the date range as JSON, with ``exportInfo``."""
    exported = await FileActivityService.export(directory, start_date, end_date)
    body = envelope(exported["data"])
    body["exportInfo"] = exported["exportInfo"]
    return body


@router.get("/log-files-info")
async def log_files_info(
    directory: Optional[str] = Depends(get_activity_log_dir),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    return envelope(await FileActivityService.files_info(directory))
