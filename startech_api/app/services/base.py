"""
Small SQL helpers shared by the domain services.

Column names passed to these helpers always come from a fixed per-table
whitelist (``TABLE_COLUMNS``); values are bound as parameters.
"""

import json
import sqlite3
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..core.db import now_iso
from .transform import decode_embedded_comments

TABLE_COLUMNS: Dict[str, frozenset] = {
    "customers": frozenset(
        {"id", "name", "email", "phone", "address", "city", "neighborhood", "source",
         "created_at", "updated_at"}
    ),
    "products": frozenset(
        {"id", "title", "description", "image", "category", "base_price", "additional_cost",
         "final_price", "supplier", "woo_commerce_status", "woo_commerce_category",
         "woo_commerce_id", "source", "last_sync_date", "created_at", "updated_at"}
    ),
    "orders": frozenset(
        {"id", "customer_id", "status", "source", "shipping_address", "shipping_city",
         "shipping_zip_code", "shipping_method", "total", "notes", "team_notes",
         "is_editable", "completed_at", "created_at", "updated_at"}
    ),
    "services": frozenset(
        {"id", "customer_id", "order_id", "related_products", "problem_description", "status",
         "category", "assigned_to", "assigned_by", "created_by", "warranty_info",
         "reception_point", "under_warranty", "qr_code", "email_notifications_sent",
         "completed_at", "created_at", "updated_at"}
    ),
    "tasks": frozenset(
        {"id", "type", "title", "description", "priority", "assigned_to", "assigned_by",
         "created_by", "visible_to", "category", "department", "status", "attachments",
         "comments", "customer_id", "related_order_id", "source", "due_date", "completed_at",
         "created_at", "updated_at"}
    ),
    "tickets": frozenset(
        {"id", "title", "source", "created_by", "priority", "status", "description",
         "assigned_to", "customer_id", "related_order_id", "comments", "resolved_at",
         "created_at", "updated_at"}
    ),
    "users": frozenset(
        {"id", "name", "email", "phone", "role", "department", "avatar_url", "is_active",
         "credits", "last_login", "created_at", "updated_at"}
    ),
}


def restrict(table: str, values: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only the keys that are real columns of ``table``."""
    columns = TABLE_COLUMNS[table]
    return {key: value for key, value in values.items() if key in columns}


def fetch_row(cursor: sqlite3.Cursor, table: str, row_id: Any) -> Optional[Dict[str, Any]]:
    row = cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (row_id,)).fetchone()
    return dict(row) if row else None


def insert_row(cursor: sqlite3.Cursor, table: str, values: Mapping[str, Any]) -> None:
    values = restrict(table, values)
    columns = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)
    cursor.execute(
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
        tuple(values.values()),
    )


def update_row(cursor: sqlite3.Cursor, table: str, row_id: Any, values: Mapping[str, Any]) -> None:
    values = restrict(table, values)
    values.pop("id", None)
    if not values:
        return
    fields = ", ".join(f"{key} = ?" for key in values)
    cursor.execute(
        f"UPDATE {table} SET {fields} WHERE id = ?",
        (*values.values(), row_id),
    )


def build_where(filters: Iterable[Tuple[str, Any]]) -> Tuple[str, List[Any]]:
    """Turn ``(clause, value)`` pairs into a WHERE fragment, skipping empty values.

    The value is bound once for every ``?`` in its clause.
    """
    clauses: List[str] = []
    params: List[Any] = []
    for clause, value in filters:
        if value is None or value == "":
            continue
        clauses.append(clause)
        params.extend([value] * clause.count("?"))
    where = " WHERE " + " AND ".join(clauses) if clauses else ""
    return where, params


def paged_query(
    cursor: sqlite3.Cursor,
    table: str,
    where: str,
    params: Sequence[Any],
    page: int,
    limit: int,
    order_by: str = "created_at DESC",
) -> Tuple[List[Dict[str, Any]], int]:
    """Return one page of rows plus the total row count for the filter."""
    total = cursor.execute(f"SELECT COUNT(*) FROM {table}{where}", tuple(params)).fetchone()[0]
    offset = (page - 1) * limit
    rows = cursor.execute(
        f"SELECT * FROM {table}{where} ORDER BY {order_by} LIMIT ? OFFSET ?",
        (*params, limit, offset),
    ).fetchall()
    return [dict(row) for row in rows], total


def count_by(cursor: sqlite3.Cursor, table: str, column: str) -> Dict[str, int]:
    rows = cursor.execute(
        f"SELECT {column} AS label, COUNT(*) AS n FROM {table} GROUP BY {column}"
    ).fetchall()
    return {row["label"]: row["n"] for row in rows if row["label"] is not None}


def search_clause(columns: Sequence[str]) -> str:
    """``(a LIKE ? OR b LIKE ? ...)``; bind the same pattern once per column."""
    return "(" + " OR ".join(f"{column} LIKE ?" for column in columns) + ")"


# History tables: (table, foreign key column, free-text column)
HISTORY_TABLES: Dict[str, Tuple[str, str, str]] = {
    "service": ("service_history", "service_id", "notes"),
    "task": ("task_history", "task_id", "details"),
    "ticket": ("ticket_history", "ticket_id", "details"),
}


def add_history(
    cursor: sqlite3.Cursor,
    entity_type: str,
    entity_id: str,
    action: str,
    user: Optional[Mapping[str, Any]],
    text: Optional[str] = None,
    created_at: Optional[str] = None,
) -> int:
    """Append an entry to the history of a service, task or ticket."""
    table, fk_column, text_column = HISTORY_TABLES[entity_type]
    user = user or {}
    cursor.execute(
        f"INSERT INTO {table} ({fk_column}, action, {text_column}, user_id, user_name, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (
            entity_id,
            action,
            text,
            user.get("id"),
            user.get("name") or user.get("email") or "Unknown",
            created_at or now_iso(),
        ),
    )
    return cursor.lastrowid


def load_history(cursor: sqlite3.Cursor, entity_type: str, entity_id: str) -> List[Dict[str, Any]]:
    table, fk_column, _ = HISTORY_TABLES[entity_type]
    rows = cursor.execute(
        f"SELECT * FROM {table} WHERE {fk_column} = ? ORDER BY created_at, id", (entity_id,)
    ).fetchall()
    return [dict(row) for row in rows]


def append_embedded_comment(
    cursor: sqlite3.Cursor, table: str, row_id: str, comment: Dict[str, Any]
) -> List[Any]:
    """Append ``comment`` to the JSON comment list of a task or ticket row."""
    row = cursor.execute(f"SELECT comments FROM {table} WHERE id = ?", (row_id,)).fetchone()
    comments = decode_embedded_comments(row["comments"] if row else None)
    comments.append(comment)
    cursor.execute(
        f"UPDATE {table} SET comments = ?, updated_at = ? WHERE id = ?",
        (json.dumps(comments, ensure_ascii=False), comment.get("createdAt") or now_iso(), row_id),
    )
    return comments
