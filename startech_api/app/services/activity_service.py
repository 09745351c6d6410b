"""
Activity service for recording and querying user actions.

Endpoints call ``ActivityService.log`` after a successful write so that
administrators can see who changed what.  Each entry is stored in the
``activity_logs`` table and appended as a JSON line to the daily activity
file (see ``core.logging_config``).  Recording an activity must
never break the request that triggered it, so ``log`` reports failures
to the application log and returns normally.
"""

import json
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Request

from ..core.db import Database, now_iso
from ..core.logging_config import ACTIVITY_LOGGER_NAME
from ..core.security import display_name
from .base import build_where
from .transform import to_api_shape

logger = logging.getLogger(__name__)
activity_file_log = logging.getLogger(ACTIVITY_LOGGER_NAME)

STATS_ROW_LIMIT = 10000
TOP_N = 10


class ActivityService:
    """Write and read the ``activity_logs`` table."""

    @classmethod
    async def log(
        cls,
        db: Database,
        user: Optional[Dict[str, Any]],
        action: str,
        module: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Any = None,
        request: Optional[Request] = None,
    ) -> None:
        """Insert a new activity record.

        Parameters
        ----------
        db : Database
            Database handle of the application.
        user : Optional[dict]
            The current user row, or ``None`` for system actions.
        action : str
            Short verb such as ``CREATE``, ``UPDATE`` or ``DELETE``.
        module : str
            Area of the application (``orders``, ``tasks`` ...).
        entity_type, entity_id : Optional[str]
            The record the action touched.
        details : Any
            Extra data; dictionaries and lists are stored as JSON.
        request : Optional[Request]
            Incoming request used for ip, user agent, method and url.
        """
        try:
            entry = {
                "timestamp": now_iso(),
                "user_id": user.get("id") if user else None,
                "user_name": display_name(user) if user else "System",
                "user_email": user.get("email") if user else None,
                "action": action,
                "module": module,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "details": details,
                "ip_address": None,
                "method": None,
                "url": None,
                "user_agent": None,
            }
            if request is not None:
                entry.update(
                    ip_address=request.client.host if request.client else None,
                    user_agent=request.headers.get("user-agent"),
                    method=request.method,
                    url=str(request.url.path),
                )
            activity_file_log.info(json.dumps(entry, ensure_ascii=False, default=str))

            if details is not None and not isinstance(details, str):
                details = json.dumps(details, ensure_ascii=False, default=str)
            with db.cursor() as cursor:
                cursor.execute(
                    """
                    INSERT INTO activity_logs (
                        user_id, user_name, user_email, action, module, entity_type,
                        entity_id, details, ip_address, user_agent, method, url, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        entry["user_id"],
                        entry["user_name"],
                        entry["user_email"],
                        action,
                        module,
                        entity_type,
                        entity_id,
                        details,
                        entry["ip_address"],
                        entry["user_agent"],
                        entry["method"],
                        entry["url"],
                        entry["timestamp"],
                    ),
                )
        except Exception:
            logger.exception("Failed to record activity %s on %s", action, module)

    @classmethod
    async def list_logs(
        cls,
        db: Database,
        user_id: Optional[str] = None,
        module: Optional[str] = None,
        action: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        order: str = "desc",
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Return a page of activity records and the total count.

        Date filters accept ISO strings and apply to ``created_at``.
        ``order`` is ``asc`` or ``desc`` (anything else means ``desc``).
        """
        where, params = build_where(
            [
                ("user_id = ?", user_id),
                ("module = ?", module),
                ("action = ?", action),
                ("created_at >= ?", start_date),
                ("created_at <= ?", end_date),
            ]
        )
        direction = "ASC" if str(order).lower() == "asc" else "DESC"
        with db.cursor() as cursor:
            total = cursor.execute(
                f"SELECT COUNT(*) FROM activity_logs{where}", tuple(params)
            ).fetchone()[0]
            rows = cursor.execute(
                f"SELECT * FROM activity_logs{where} ORDER BY created_at {direction}, id {direction} "
                "LIMIT ? OFFSET ?",
                (*params, limit, (page - 1) * limit),
            ).fetchall()
        logs = []
        for row in rows:
            item = to_api_shape(dict(row))
            item["timestamp"] = row["created_at"]
            logs.append(item)
        return logs, total

    @classmethod
    async def stats(
        cls,
        db: Database,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Aggregate actions by module, user, day and hour.

        Counting is done in Python over at most ``STATS_ROW_LIMIT`` rows.
        """
        where, params = build_where(
            [("created_at >= ?", start_date), ("created_at <= ?", end_date)]
        )
        with db.cursor() as cursor:
            rows = cursor.execute(
                f"SELECT module, user_id, created_at FROM activity_logs{where} LIMIT ?",
                (*params, STATS_ROW_LIMIT),
            ).fetchall()

        by_module: Counter = Counter()
        by_user: Counter = Counter()
        by_day: Counter = Counter()
        by_hour: Counter = Counter()
        for row in rows:
            by_module[row["module"]] += 1
            by_user[row["user_id"]] += 1
            try:
                stamp = datetime.fromisoformat(row["created_at"])
            except (TypeError, ValueError):
                continue
            by_day[stamp.date().isoformat()] += 1
            by_hour[stamp.hour] += 1

        return {
            "totalActions": len(rows),
            "actionsByModule": dict(by_module),
            "actionsByUser": dict(by_user),
            "actionsByDay": dict(by_day),
            "actionsByHour": dict(by_hour),
            "topUsers": [
                {"userId": user_id, "count": count}
                for user_id, count in by_user.most_common(TOP_N)
            ],
            "topModules": [
                {"module": module, "count": count}
                for module, count in by_module.most_common(TOP_N)
            ],
        }
