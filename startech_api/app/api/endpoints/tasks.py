"""
Task endpoints.

Administrators and managers see every task.  Other users only see the
tasks assigned to them or created by them; any other task answers 404.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...core.db import Database, get_db
from ...core.errors import ServiceError, to_http
from ...core.security import get_current_user, require_roles
from ...schemas.common import build_pagination, envelope
from ...schemas.task import EmbeddedCommentCreate, TaskCreate, TaskUpdate
from ...services.activity_service import ActivityService
from ...services.task_service import TaskService

router = APIRouter()


@router.get("/")
async def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    tasks, total = await TaskService.list_tasks(
        db, current_user, type=type, status=status_filter, priority=priority,
        page=page, limit=limit,
    )
    return envelope(tasks, pagination=build_pagination(page, limit, total))


@router.get("/stats/overview")
async def task_stats(
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return envelope(await TaskService.stats(db, current_user))


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        return envelope(await TaskService.get_task(db, task_id, current_user))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        created = await TaskService.create_task(db, task.to_payload(), current_user)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "CREATE", "tasks", "task", created["id"],
        {"title": created["title"]}, request,
    )
    return envelope(created, "Tasku u krijua me sukses")


async def _update_task(
    task_id: str, updates: TaskUpdate, request: Request, db: Database, current_user: dict
) -> dict:
    try:
        updated = await TaskService.update_task(db, task_id, updates.to_payload(), current_user)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "UPDATE", "tasks", "task", task_id,
        {"status": updated["status"]}, request,
    )
    return envelope(updated, "Tasku u përditësua me sukses")


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    updates: TaskUpdate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return await _update_task(task_id, updates, request, db, current_user)


@router.patch("/{task_id}")
async def patch_task(
    task_id: str,
    updates: TaskUpdate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Same as ``PUT``; the board view uses it to move cards between columns."""
    return await _update_task(task_id, updates, request, db, current_user)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        await TaskService.delete_task(db, task_id)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(db, current_user, "DELETE", "tasks", "task", task_id, request=request)
    return envelope(message="Tasku u fshi me sukses")


@router.post("/{task_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_task_comment(
    task_id: str,
    comment: EmbeddedCommentCreate,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        created = await TaskService.add_comment(
            db, task_id, comment.content or comment.text, current_user
        )
    except ServiceError as e:
        raise to_http(e) from e
    return envelope(created, "Komenti u shtua me sukses")
