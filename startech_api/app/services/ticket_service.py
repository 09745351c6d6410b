"""
Service for support tickets.

Tickets are identified by ``TIK-<year>-NNN`` and start ``open``.  Moving
a ticket to ``resolved`` or ``closed`` stamps ``resolved_at``; reopening
it clears the stamp.  Comments are kept as a JSON list in the row.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..core.db import Database, now_iso
from ..core.errors import NotFoundError, ValidationError
from ..core.security import display_name
from . import lifecycle
from .base import (
    add_history,
    append_embedded_comment,
    build_where,
    count_by,
    fetch_row,
    insert_row,
    load_history,
    paged_query,
    update_row,
)
from .sequencer import IdSequencer
from .transform import to_api_shape, to_storage_shape

logger = logging.getLogger(__name__)

RECENT_DAYS = 7


class TicketService:
    """Create, update, list and comment on tickets."""

    @classmethod
    async def list_tickets(
        cls,
        db: Database,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where, params = build_where([("status = ?", status), ("priority = ?", priority)])
        with db.cursor() as cursor:
            rows, total = paged_query(cursor, "tickets", where, params, page, limit)
        return [to_api_shape(row, "ticket") for row in rows], total

    @classmethod
    async def get_ticket(cls, db: Database, ticket_id: str) -> Dict[str, Any]:
        with db.cursor() as cursor:
            ticket = fetch_row(cursor, "tickets", ticket_id)
            if not ticket:
                raise NotFoundError("Tiketa nuk u gjet")
            ticket["history"] = load_history(cursor, "ticket", ticket_id)
        return to_api_shape(ticket, "ticket")

    @classmethod
    async def create_ticket(
        cls, db: Database, payload: Dict[str, Any], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Open a new ticket.

        The identifier is taken from the sequencer right before the
        insert.  Two concurrent creates can still pick the same value;
        the second insert then fails on the primary key.
        """
        payload = dict(payload)
        if not payload.get("title"):
            raise ValidationError("Titulli është i detyrueshëm")
        status = payload.pop("status", None) or lifecycle.default_status(lifecycle.TICKET)
        lifecycle.validate_status(lifecycle.TICKET, status)
        priority = payload.get("priority") or "medium"
        if priority not in lifecycle.PRIORITIES:
            raise ValidationError(f"Prioriteti i pavlefshëm: {priority}")

        ticket_id = IdSequencer(db).next_id("TIK")
        now = now_iso()
        values = to_storage_shape(payload, "ticket")
        values.update(
            id=ticket_id,
            priority=priority,
            created_by=display_name(user),
            comments="[]",
            created_at=now,
            updated_at=now,
        )
        values.update(lifecycle.apply_status_change(lifecycle.TICKET, {}, status, now))
        with db.cursor() as cursor:
            insert_row(cursor, "tickets", values)
            add_history(cursor, "ticket", ticket_id, "Tiketa u krijua", user, values["title"], now)
            created = fetch_row(cursor, "tickets", ticket_id)
        logger.info("Created ticket %s", ticket_id)
        return to_api_shape(created, "ticket")

    @classmethod
    async def update_ticket(
        cls, db: Database, ticket_id: str, payload: Dict[str, Any], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        payload = dict(payload)
        new_status = payload.pop("status", None)
        priority = payload.get("priority")
        if priority is not None and priority not in lifecycle.PRIORITIES:
            raise ValidationError(f"Prioriteti i pavlefshëm: {priority}")
        now = now_iso()
        values = to_storage_shape(payload, "ticket")
        for column in ("id", "created_at", "created_by", "comments"):
            values.pop(column, None)
        values["updated_at"] = now
        with db.cursor() as cursor:
            current = fetch_row(cursor, "tickets", ticket_id)
            if not current:
                raise NotFoundError("Tiketa nuk u gjet")
            details = None
            if new_status is not None:
                lifecycle.validate_status(lifecycle.TICKET, new_status)
                values.update(
                    lifecycle.apply_status_change(lifecycle.TICKET, current, new_status, now)
                )
                if new_status != current["status"]:
                    details = f"{current['status']} -> {new_status}"
            update_row(cursor, "tickets", ticket_id, values)
            add_history(cursor, "ticket", ticket_id, "Tiketa u përditësua", user, details, now)
            updated = fetch_row(cursor, "tickets", ticket_id)
        return to_api_shape(updated, "ticket")

    @classmethod
    async def delete_ticket(cls, db: Database, ticket_id: str) -> None:
        with db.cursor() as cursor:
            if not fetch_row(cursor, "tickets", ticket_id):
                raise NotFoundError("Tiketa nuk u gjet")
            cursor.execute("DELETE FROM comments WHERE entity_type = 'ticket' AND entity_id = ?", (ticket_id,))
            cursor.execute("DELETE FROM tickets WHERE id = ?", (ticket_id,))

    @classmethod
    async def add_comment(
        cls, db: Database, ticket_id: str, content: Optional[str], user: Dict[str, Any]
    ) -> Dict[str, Any]:
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
            if not fetch_row(cursor, "tickets", ticket_id):
                raise NotFoundError("Tiketa nuk u gjet")
            append_embedded_comment(cursor, "tickets", ticket_id, comment)
        return comment

    @classmethod
    async def stats(cls, db: Database) -> Dict[str, Any]:
        since = (datetime.now(timezone.utc) - timedelta(days=RECENT_DAYS)).isoformat()
        with db.cursor() as cursor:
            by_status = count_by(cursor, "tickets", "status")
            by_priority = count_by(cursor, "tickets", "priority")
            recent = cursor.execute(
                "SELECT COUNT(*) FROM tickets WHERE created_at > ?", (since,)
            ).fetchone()[0]
        return {
            "total": sum(by_status.values()),
            "byStatus": {
                status: by_status.get(status, 0)
                for status in lifecycle.STATUSES[lifecycle.TICKET]
            },
            "byPriority": {
                priority: by_priority.get(priority, 0)
                for priority in reversed(lifecycle.PRIORITIES)
            },
            "recent": recent,
        }
