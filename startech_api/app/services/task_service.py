"""
Service for internal tasks.

Tasks are identified by ``TSK-<year>-NNN``.  Administrators and managers
see every task; other users only see the tasks assigned to them or
created by them, matched on their display name.  Comments on a task are
kept as a JSON list inside the task row.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from ..core.db import Database, now_iso
from ..core.errors import NotFoundError, ValidationError
from ..core.security import display_name, is_privileged
from . import lifecycle
from .base import (
    add_history,
    append_embedded_comment,
    build_where,
    fetch_row,
    insert_row,
    load_history,
    paged_query,
    update_row,
)
from .sequencer import IdSequencer
from .transform import to_api_shape, to_storage_shape

logger = logging.getLogger(__name__)

TASK_TYPES = ("task", "ticket")


def can_see_task(task: Dict[str, Any], user: Dict[str, Any]) -> bool:
    if is_privileged(user):
        return True
    name = display_name(user)
    return task.get("assigned_to") == name or task.get("created_by") == name


def _check_priority(priority: Optional[str]) -> None:
    if priority is not None and priority not in lifecycle.PRIORITIES:
        raise ValidationError(f"Prioriteti i pavlefshëm: {priority}")


class TaskService:
    """Create, update, list and comment on tasks."""

    @classmethod
    async def list_tasks(
        cls,
        db: Database,
        user: Dict[str, Any],
        type: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Return one page of the tasks visible to ``user``."""
        filters = [("type = ?", type), ("status = ?", status), ("priority = ?", priority)]
        if not is_privileged(user):
            filters.append(("(assigned_to = ? OR created_by = ?)", display_name(user)))
        where, params = build_where(filters)
        with db.cursor() as cursor:
            rows, total = paged_query(cursor, "tasks", where, params, page, limit)
        return [to_api_shape(row, "task") for row in rows], total

    @classmethod
    async def get_task(cls, db: Database, task_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
        """Return a task with its comments and history.

        A task the caller may not see is reported as missing.
        """
        with db.cursor() as cursor:
            task = fetch_row(cursor, "tasks", task_id)
            if not task or not can_see_task(task, user):
                raise NotFoundError("Tasku nuk u gjet")
            task["history"] = load_history(cursor, "task", task_id)
        return to_api_shape(task, "task")

    @classmethod
    async def create_task(
        cls, db: Database, payload: Dict[str, Any], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        payload = dict(payload)
        if not payload.get("title"):
            raise ValidationError("Titulli është i detyrueshëm")
        status = payload.pop("status", None) or lifecycle.default_status(lifecycle.TASK)
        lifecycle.validate_status(lifecycle.TASK, status)
        _check_priority(payload.get("priority"))
        task_type = payload.get("type") or "task"
        if task_type not in TASK_TYPES:
            raise ValidationError(f"Lloji i pavlefshëm: {task_type}")

        task_id = IdSequencer(db).next_id("TSK")
        now = now_iso()
        user_name = display_name(user)
        values = to_storage_shape(payload, "task")
        values.update(
            id=task_id,
            type=task_type,
            priority=values.get("priority") or "medium",
            created_by=user_name,
            assigned_by=values.get("assigned_by") or user_name,
            comments="[]",
            created_at=now,
            updated_at=now,
        )
        values.update(lifecycle.apply_status_change(lifecycle.TASK, {}, status, now))
        with db.cursor() as cursor:
            insert_row(cursor, "tasks", values)
            add_history(cursor, "task", task_id, "Tasku u krijua", user, values["title"], now)
            created = fetch_row(cursor, "tasks", task_id)
        logger.info("Created task %s", task_id)
        return to_api_shape(created, "task")

    @classmethod
    async def update_task(
        cls, db: Database, task_id: str, payload: Dict[str, Any], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        payload = dict(payload)
        new_status = payload.pop("status", None)
        _check_priority(payload.get("priority"))
        now = now_iso()
        values = to_storage_shape(payload, "task")
        for column in ("id", "created_at", "created_by", "comments"):
            values.pop(column, None)
        values["updated_at"] = now
        with db.cursor() as cursor:
            current = fetch_row(cursor, "tasks", task_id)
            if not current or not can_see_task(current, user):
                raise NotFoundError("Tasku nuk u gjet")
            details = None
            if new_status is not None:
                lifecycle.validate_status(lifecycle.TASK, new_status)
                values.update(lifecycle.apply_status_change(lifecycle.TASK, current, new_status, now))
                if new_status != current["status"]:
                    details = f"{current['status']} -> {new_status}"
            update_row(cursor, "tasks", task_id, values)
            add_history(cursor, "task", task_id, "Tasku u përditësua", user, details, now)
            updated = fetch_row(cursor, "tasks", task_id)
        return to_api_shape(updated, "task")

    @classmethod
    async def delete_task(cls, db: Database, task_id: str) -> None:
        with db.cursor() as cursor:
            if not fetch_row(cursor, "tasks", task_id):
                raise NotFoundError("Tasku nuk u gjet")
            cursor.execute("DELETE FROM comments WHERE entity_type = 'task' AND entity_id = ?", (task_id,))
            cursor.execute("DELETE FROM tasks WHERE id = ?", (task_id,))

    @classmethod
    async def add_comment(
        cls, db: Database, task_id: str, content: Optional[str], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Append a comment to the task's embedded comment list."""
        if not content:
            raise ValidationError("content është i detyrueshëm")
        comment = {
            "id": str(uuid.uuid4()),
            "content": content,
            "userId": user.get("id"),
            "userName": display_name(user),
            "createdAt": now_iso(),
        }
        with db.cursor() as cursor:
            task = fetch_row(cursor, "tasks", task_id)
            if not task or not can_see_task(task, user):
                raise NotFoundError("Tasku nuk u gjet")
            append_embedded_comment(cursor, "tasks", task_id, comment)
        return comment

    @classmethod
    async def stats(cls, db: Database, user: Dict[str, Any]) -> Dict[str, int]:
        with db.cursor() as cursor:
            if is_privileged(user):
                rows = cursor.execute("SELECT type, status FROM tasks").fetchall()
            else:
                name = display_name(user)
                rows = cursor.execute(
                    "SELECT type, status FROM tasks WHERE assigned_to = ? OR created_by = ?",
                    (name, name),
                ).fetchall()
        return {
            "total": len(rows),
            "tasks": sum(1 for row in rows if row["type"] == "task"),
            "tickets": sum(1 for row in rows if row["type"] == "ticket"),
            "todo": sum(1 for row in rows if row["status"] == "todo"),
            "inProgress": sum(1 for row in rows if row["status"] == "in-progress"),
            "review": sum(1 for row in rows if row["status"] == "review"),
            "done": sum(1 for row in rows if row["status"] == "done"),
        }
