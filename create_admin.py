#!/usr/bin/env python3
"""
Create or promote an administrator in the Startech SQLite database.

Passwords are managed by the external identity provider; this script
only writes the profile row the API uses to authorise requests.  Pass
the identity provider's user id with ``--id`` so that requests carrying
that id in ``X-User-ID`` are recognised as the administrator.

Usage:
    python create_admin.py --email admin@startech.com --name "Admin" --id <provider-user-id>

If a user with the e-mail already exists, it is promoted to ``admin`` and
re-activated instead.
"""

import argparse
import sys
import uuid

from startech_api.app.core.config import settings
from startech_api.app.core.db import Database, now_iso


def main() -> None:
    ap = argparse.ArgumentParser(description="Create or promote a Startech administrator (SQLite).")
    ap.add_argument("--db", default=settings.database_url, help="Path to SQLite DB file (default: DATABASE_URL)")
    ap.add_argument("--email", required=True, help="Administrator e-mail")
    ap.add_argument("--name", default="Administrator", help="Display name")
    ap.add_argument("--id", dest="user_id", help="User id from the identity provider (default: random UUID)")
    args = ap.parse_args()

    db = Database(args.db)
    db.init()
    now = now_iso()
    with db.cursor() as cur:
        row = cur.execute("SELECT id FROM users WHERE email = ?", (args.email,)).fetchone()
        if row:
            cur.execute(
                "UPDATE users SET role = 'admin', is_active = 1, updated_at = ? WHERE id = ?",
                (now, row["id"]),
            )
            print(f"[+] Promoted existing user to admin: {args.email} ({row['id']})")
            return
        if args.user_id and cur.execute("SELECT 1 FROM users WHERE id = ?", (args.user_id,)).fetchone():
            print(f"[!] User id already in use: {args.user_id}", file=sys.stderr)
            sys.exit(2)
        user_id = args.user_id or str(uuid.uuid4())
        cur.execute(
            """
            INSERT INTO users (id, name, email, role, is_active, created_at, updated_at)
            VALUES (?, ?, ?, 'admin', 1, ?, ?)
            """,
            (user_id, args.name, args.email, now, now),
        )
    print(f"[+] Admin user created: {args.email}")
    print(f"    User ID: {user_id}")


if __name__ == "__main__":
    main()
