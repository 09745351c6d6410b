"""
SQLite database integration and simple migration system.

This module provides the ``Database`` handle used by every service.
A single handle is created by ``create_app`` at process start, stored
on ``app.state.db`` and handed to services through the ``get_db``
dependency, so no module keeps its own global connection.  Each call
to ``cursor()`` opens a short‑lived connection, commits on success and
rolls back on error.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.  Human
readable identifiers (``PRS-2024-001`` etc.) are TEXT primary keys, so
the database rejects a duplicate identifier instead of storing it.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from fastapi import Request

logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            phone TEXT,
            role TEXT NOT NULL DEFAULT 'user',
            department TEXT,
            avatar_url TEXT,
            is_active INTEGER NOT NULL DEFAULT 1,
            credits REAL NOT NULL DEFAULT 0,
            last_login TIMESTAMP,
            created_at TIMESTAMP,
            updated_at TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS customers (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT,
            phone TEXT,
            address TEXT,
            city TEXT,
            neighborhood TEXT,
            source TEXT NOT NULL DEFAULT 'Internal',
            created_at TIMESTAMP,
            updated_at TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS products (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            image TEXT,
            category TEXT,
            base_price REAL NOT NULL DEFAULT 0,
            additional_cost REAL NOT NULL DEFAULT 0,
            final_price REAL NOT NULL DEFAULT 0,
            supplier TEXT,
            woo_commerce_status TEXT NOT NULL DEFAULT 'draft',
            woo_commerce_category TEXT,
            woo_commerce_id INTEGER UNIQUE,
            source TEXT NOT NULL DEFAULT 'Manual',
            last_sync_date TIMESTAMP,
            created_at TIMESTAMP,
            updated_at TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS orders (
            id TEXT PRIMARY KEY,
            customer_id TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            source TEXT NOT NULL DEFAULT 'Manual',
            shipping_address TEXT,
            shipping_city TEXT,
            shipping_zip_code TEXT,
            shipping_method TEXT,
            total REAL NOT NULL DEFAULT 0,
            notes TEXT,
            team_notes TEXT,
            is_editable INTEGER NOT NULL DEFAULT 1,
            completed_at TIMESTAMP,
            created_at TIMESTAMP,
            updated_at TIMESTAMP,
            FOREIGN KEY(customer_id) REFERENCES customers(id)
        );

        CREATE TABLE IF NOT EXISTS order_products (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_id TEXT NOT NULL,
            product_id TEXT,
            quantity INTEGER NOT NULL DEFAULT 1,
            unit_price REAL NOT NULL DEFAULT 0,
            subtotal REAL NOT NULL DEFAULT 0,
            FOREIGN KEY(order_id) REFERENCES orders(id) ON DELETE CASCADE,
            FOREIGN KEY(product_id) REFERENCES products(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS services (
            id TEXT PRIMARY KEY,
            customer_id TEXT,
            order_id TEXT,
            related_products TEXT,
            problem_description TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'received',
            category TEXT,
            assigned_to TEXT,
            assigned_by TEXT,
            created_by TEXT,
            warranty_info TEXT,
            reception_point TEXT,
            under_warranty INTEGER NOT NULL DEFAULT 0,
            qr_code TEXT,
            email_notifications_sent INTEGER NOT NULL DEFAULT 0,
            completed_at TIMESTAMP,
            created_at TIMESTAMP,
            updated_at TIMESTAMP,
            FOREIGN KEY(customer_id) REFERENCES customers(id)
        );

        CREATE TABLE IF NOT EXISTS service_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            service_id TEXT NOT NULL,
            action TEXT NOT NULL,
            notes TEXT,
            user_id TEXT,
            user_name TEXT,
            email_sent INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP,
            FOREIGN KEY(service_id) REFERENCES services(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            type TEXT NOT NULL DEFAULT 'task',
            title TEXT NOT NULL,
            description TEXT,
            priority TEXT NOT NULL DEFAULT 'medium',
            assigned_to TEXT,
            assigned_by TEXT,
            created_by TEXT,
            visible_to TEXT,
            category TEXT,
            department TEXT,
            status TEXT NOT NULL DEFAULT 'todo',
            attachments TEXT,
            comments TEXT,
            customer_id TEXT,
            related_order_id TEXT,
            source TEXT,
            due_date TIMESTAMP,
            completed_at TIMESTAMP,
            created_at TIMESTAMP,
            updated_at TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS task_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            task_id TEXT NOT NULL,
            action TEXT NOT NULL,
            details TEXT,
            user_id TEXT,
            user_name TEXT,
            created_at TIMESTAMP,
            FOREIGN KEY(task_id) REFERENCES tasks(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS tickets (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            source TEXT,
            created_by TEXT,
            priority TEXT NOT NULL DEFAULT 'medium',
            status TEXT NOT NULL DEFAULT 'open',
            description TEXT,
            assigned_to TEXT,
            customer_id TEXT,
            related_order_id TEXT,
            comments TEXT,
            resolved_at TIMESTAMP,
            created_at TIMESTAMP,
            updated_at TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS ticket_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            ticket_id TEXT NOT NULL,
            action TEXT NOT NULL,
            details TEXT,
            user_id TEXT,
            user_name TEXT,
            created_at TIMESTAMP,
            FOREIGN KEY(ticket_id) REFERENCES tickets(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: relational comments with one level of replies and votes
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS comments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            entity_type TEXT NOT NULL,
            entity_id TEXT NOT NULL,
            content TEXT NOT NULL,
            user_id TEXT NOT NULL,
            parent_id INTEGER,
            upvotes INTEGER NOT NULL DEFAULT 0,
            downvotes INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP,
            updated_at TIMESTAMP,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE,
            FOREIGN KEY(parent_id) REFERENCES comments(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS comment_votes (
            comment_id INTEGER NOT NULL,
            user_id TEXT NOT NULL,
            vote_type TEXT NOT NULL,
            PRIMARY KEY(comment_id, user_id),
            FOREIGN KEY(comment_id) REFERENCES comments(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_comments_entity ON comments(entity_type, entity_id);
        """,
    ),
    # Migration 3: activity log and lookup indices
    (
        3,
        """
        CREATE TABLE IF NOT EXISTS activity_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT,
            user_name TEXT,
            user_email TEXT,
            action TEXT NOT NULL,
            module TEXT NOT NULL,
            entity_type TEXT,
            entity_id TEXT,
            details TEXT,
            ip_address TEXT,
            user_agent TEXT,
            method TEXT,
            url TEXT,
            created_at TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_activity_logs_user_id ON activity_logs(user_id);
        CREATE INDEX IF NOT EXISTS idx_activity_logs_created_at ON activity_logs(created_at);
        CREATE INDEX IF NOT EXISTS idx_orders_customer_id ON orders(customer_id);
        CREATE INDEX IF NOT EXISTS idx_services_customer_id ON services(customer_id);
        CREATE INDEX IF NOT EXISTS idx_order_products_order_id ON order_products(order_id);
        """,
    ),
]


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string (the format stored in every table)."""
    return datetime.now(timezone.utc).isoformat()


def resolve_project_path(path: str) -> str:
    """Resolve a configured file or directory path.

    Used for the SQLite database file and the activity log directory.
    Absolute paths are used as is; relative paths are resolved against
    the project root.
    """
    if os.path.isabs(path):
        return path
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / path).resolve())


class Database:
    """Handle to the relational store shared by all services."""

    def __init__(self, db_url: str) -> None:
        self.path = resolve_project_path(db_url)

    def connect(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        Rows are returned as ``sqlite3.Row`` so columns can be read by
        name, and foreign key enforcement is switched on for the
        lifetime of the connection.
        """
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor; commit on success, roll back on error, always close."""
        conn = self.connect()
        try:
            yield conn.cursor()
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init(self) -> None:
        """Create the schema and apply pending migrations.

        Creates the ``migrations`` table if it does not exist, checks the
        current schema version, and applies any newer entries from
        ``MIGRATIONS`` in order.
        """
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) as version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    logger.info("Applying database migration %s", version)
                    cursor.executescript(sql)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    current_version = version


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the handle created at startup."""
    return request.app.state.db
