"""
Human readable identifier generation.

Orders, services, tasks and tickets are identified by codes of the form
``<PREFIX>-<YEAR>-<NNN>`` (``PRS-2024-007``, ``TIK-2024-001``).  The next
code is derived from the highest existing code for the same prefix and
year.

Two known limitations are kept deliberately:

* The lookup sorts identifiers as text.  Once a counter passes 999 the
  suffix grows to four digits and ``PRS-2024-1000`` sorts before
  ``PRS-2024-999``, so the sequence stalls.
* There is no locking.  Two writers that read the same last code will
  both try to insert the same identifier; the primary key rejects the
  second insert and the API reports it as a conflict.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, Optional

from ..core.db import Database

logger = logging.getLogger(__name__)

PREFIX_TABLES: Dict[str, str] = {
    "PRS": "orders",
    "SRV": "services",
    "TSK": "tasks",
    "TIK": "tickets",
}

SUFFIX_WIDTH = 3


def current_year() -> str:
    return str(datetime.now(timezone.utc).year)


def format_id(prefix: str, year: str, counter: int) -> str:
    return f"{prefix}-{year}-{counter:0{SUFFIX_WIDTH}d}"


class IdSequencer:
    """Issue the next identifier for an entity prefix."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def last_id(self, prefix: str, year: str) -> Optional[str]:
        table = PREFIX_TABLES.get(prefix)
        if table is None:
            raise ValueError(f"Unknown identifier prefix: {prefix}")
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT id FROM {table} WHERE id LIKE ? ORDER BY id DESC LIMIT 1",
                (f"{prefix}-{year}-%",),
            ).fetchone()
        return row["id"] if row else None

    def next_id(self, prefix: str, year: Optional[str] = None) -> str:
        """Return ``<prefix>-<year>-<n+1>`` where ``n`` is the last issued counter.

        Parameters
        ----------
        prefix : str
            One of ``PRS``, ``SRV``, ``TSK`` or ``TIK``.
        year : Optional[str]
            Four digit year; defaults to the current UTC year.

        Raises
        ------
        ValueError
            If the prefix is not known.
        """
        year = year or current_year()
        last = self.last_id(prefix, year)
        counter = 1
        if last:
            match = re.match(rf"^{re.escape(prefix)}-{re.escape(year)}-(\d+)$", last)
            if match:
                counter = int(match.group(1)) + 1
        new_id = format_id(prefix, year, counter)
        logger.debug("Issued identifier %s (previous %s)", new_id, last)
        return new_id
