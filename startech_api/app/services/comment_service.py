"""
Threaded comments with votes.

Comments attach to a task, a service or a ticket.  Threads are one level
deep: a reply to a reply is stored under the root comment.  Each user
holds at most one vote per comment; voting the same way twice withdraws
the vote and voting the other way switches it.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from ..core.db import Database, now_iso
from ..core.errors import NotFoundError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

ENTITY_TABLES = {"task": "tasks", "service": "services", "ticket": "tickets"}
VOTE_TYPES = ("upvote", "downvote")
VOTE_COLUMNS = {"upvote": "upvotes", "downvote": "downvotes"}

_SELECT_COMMENT = """
    SELECT c.*, u.name AS user_name, u.email AS user_email, u.avatar_url AS user_avatar_url
    FROM comments c LEFT JOIN users u ON u.id = c.user_id
"""


def _shape(row: sqlite3.Row) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "content": row["content"],
        "entityType": row["entity_type"],
        "entityId": row["entity_id"],
        "parentId": row["parent_id"],
        "userId": row["user_id"],
        "user": {
            "id": row["user_id"],
            "name": row["user_name"],
            "email": row["user_email"],
            "avatarUrl": row["user_avatar_url"],
        },
        "upvotes": row["upvotes"],
        "downvotes": row["downvotes"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def _check_entity_type(entity_type: Optional[str]) -> str:
    if entity_type not in ENTITY_TABLES:
        raise ValidationError("entityType duhet të jetë: task, service, ose ticket")
    return ENTITY_TABLES[entity_type]


def _owned_comment(cursor: sqlite3.Cursor, comment_id: int, user: Dict[str, Any], verb: str) -> None:
    row = cursor.execute("SELECT user_id FROM comments WHERE id = ?", (comment_id,)).fetchone()
    if not row:
        raise NotFoundError("Komenti nuk u gjet")
    if row["user_id"] != user["id"]:
        raise PermissionDeniedError(f"Nuk keni leje për të {verb} këtë koment")


class CommentService:
    """Relational comments on tasks, services and tickets."""

    @classmethod
    async def list_comments(
        cls, db: Database, entity_type: Optional[str], entity_id: Optional[str]
    ) -> List[Dict[str, Any]]:
        """Root comments (newest first), each with its ``replies`` (oldest first)."""
        if not entity_type or not entity_id:
            raise ValidationError("entityType dhe entityId janë të detyrueshme")
        _check_entity_type(entity_type)
        with db.cursor() as cursor:
            rows = cursor.execute(
                _SELECT_COMMENT
                + " WHERE c.entity_type = ? AND c.entity_id = ? ORDER BY c.created_at DESC, c.id DESC",
                (entity_type, entity_id),
            ).fetchall()
        roots: List[Dict[str, Any]] = []
        replies: Dict[int, List[Dict[str, Any]]] = {}
        for row in rows:
            comment = _shape(row)
            if comment["parentId"] is None:
                roots.append(comment)
            else:
                replies.setdefault(comment["parentId"], []).insert(0, comment)
        for comment in roots:
            comment["replies"] = replies.get(comment["id"], [])
        return roots

    @classmethod
    async def create_comment(
        cls,
        db: Database,
        user: Dict[str, Any],
        entity_type: Optional[str],
        entity_id: Optional[str],
        content: Optional[str],
        parent_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        if not entity_type or not entity_id or not content or not content.strip():
            raise ValidationError("entityType, entityId dhe content janë të detyrueshme")
        table = _check_entity_type(entity_type)
        now = now_iso()
        with db.cursor() as cursor:
            if not cursor.execute(f"SELECT 1 FROM {table} WHERE id = ?", (entity_id,)).fetchone():
                raise NotFoundError(f"{entity_type} nuk u gjet")
            if parent_id is not None:
                parent = cursor.execute(
                    "SELECT id, parent_id, entity_type, entity_id FROM comments WHERE id = ?",
                    (parent_id,),
                ).fetchone()
                if not parent or (parent["entity_type"], parent["entity_id"]) != (entity_type, entity_id):
                    raise NotFoundError("Komenti nuk u gjet")
                parent_id = parent["parent_id"] or parent["id"]
            cursor.execute(
                """
                INSERT INTO comments (entity_type, entity_id, content, user_id, parent_id,
                                      upvotes, downvotes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 0, 0, ?, ?)
                """,
                (entity_type, entity_id, content.strip(), user["id"], parent_id, now, now),
            )
            row = cursor.execute(_SELECT_COMMENT + " WHERE c.id = ?", (cursor.lastrowid,)).fetchone()
        logger.debug("Comment %s added to %s %s", row["id"], entity_type, entity_id)
        comment = _shape(row)
        comment["replies"] = []
        return comment

    @classmethod
    async def update_comment(
        cls, db: Database, comment_id: int, content: Optional[str], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        if not content or not content.strip():
            raise ValidationError("content është i detyrueshëm")
        with db.cursor() as cursor:
            _owned_comment(cursor, comment_id, user, "modifikuar")
            cursor.execute(
                "UPDATE comments SET content = ?, updated_at = ? WHERE id = ?",
                (content.strip(), now_iso(), comment_id),
            )
            row = cursor.execute(_SELECT_COMMENT + " WHERE c.id = ?", (comment_id,)).fetchone()
        return _shape(row)

    @classmethod
    async def delete_comment(cls, db: Database, comment_id: int, user: Dict[str, Any]) -> None:
        """Delete a comment owned by ``user`` together with its replies."""
        with db.cursor() as cursor:
            _owned_comment(cursor, comment_id, user, "fshirë")
            cursor.execute("DELETE FROM comments WHERE parent_id = ?", (comment_id,))
            cursor.execute("DELETE FROM comments WHERE id = ?", (comment_id,))

    @classmethod
    async def vote(
        cls, db: Database, comment_id: int, vote_type: Optional[str], user: Dict[str, Any]
    ) -> Dict[str, int]:
        """Apply ``vote_type`` for ``user`` and return the new counters."""
        if vote_type not in VOTE_TYPES:
            raise ValidationError("voteType duhet të jetë: upvote ose downvote")
        with db.cursor() as cursor:
            if not cursor.execute("SELECT 1 FROM comments WHERE id = ?", (comment_id,)).fetchone():
                raise NotFoundError("Komenti nuk u gjet")
            existing = cursor.execute(
                "SELECT vote_type FROM comment_votes WHERE comment_id = ? AND user_id = ?",
                (comment_id, user["id"]),
            ).fetchone()
            if existing and existing["vote_type"] == vote_type:
                cursor.execute(
                    "DELETE FROM comment_votes WHERE comment_id = ? AND user_id = ?",
                    (comment_id, user["id"]),
                )
                cls._bump(cursor, comment_id, vote_type, -1)
            elif existing:
                cursor.execute(
                    "UPDATE comment_votes SET vote_type = ? WHERE comment_id = ? AND user_id = ?",
                    (vote_type, comment_id, user["id"]),
                )
                cls._bump(cursor, comment_id, existing["vote_type"], -1)
                cls._bump(cursor, comment_id, vote_type, 1)
            else:
                cursor.execute(
                    "INSERT INTO comment_votes (comment_id, user_id, vote_type) VALUES (?, ?, ?)",
                    (comment_id, user["id"], vote_type),
                )
                cls._bump(cursor, comment_id, vote_type, 1)
            row = cursor.execute(
                "SELECT upvotes, downvotes FROM comments WHERE id = ?", (comment_id,)
            ).fetchone()
        return {"upvotes": row["upvotes"], "downvotes": row["downvotes"]}

    @staticmethod
    def _bump(cursor: sqlite3.Cursor, comment_id: int, vote_type: str, delta: int) -> None:
        column = VOTE_COLUMNS[vote_type]
        cursor.execute(
            f"UPDATE comments SET {column} = MAX(0, {column} + ?) WHERE id = ?",
            (delta, comment_id),
        )
