"""
Status sets and completion stamping for orders, services, tasks and tickets.

Statuses are a closed set per entity type but there is no transition
graph: any status of the set may follow any other.  This module is the
single place routes consult to validate a status, pick the initial one
and translate it to the Albanian label shown in the frontend.

Completion timestamps follow one rule for every entity: entering a
terminal status stamps the completion column when it is empty, leaving
the terminal statuses clears it.
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from ..core.errors import ValidationError

ORDER = "order"
SERVICE = "service"
TASK = "task"
TICKET = "ticket"

STATUSES: Dict[str, Tuple[str, ...]] = {
    ORDER: ("pending", "accepted", "processing", "shipped", "delivered", "cancelled"),
    SERVICE: ("received", "in-progress", "waiting-parts", "completed", "delivered"),
    TASK: ("todo", "in-progress", "review", "done"),
    TICKET: ("open", "in-progress", "waiting-customer", "resolved", "closed"),
}

DEFAULT_STATUS: Dict[str, str] = {
    ORDER: "pending",
    SERVICE: "received",
    TASK: "todo",
    TICKET: "open",
}

TERMINAL_STATUSES = frozenset({"completed", "done", "resolved", "closed", "delivered"})

# Column holding the completion time of each entity type.
COMPLETION_COLUMN: Dict[str, str] = {
    ORDER: "completed_at",
    SERVICE: "completed_at",
    TASK: "completed_at",
    TICKET: "resolved_at",
}

PRIORITIES: Tuple[str, ...] = ("low", "medium", "high", "urgent")

STATUS_LABELS: Dict[str, str] = {
    # orders
    "pending": "Në pritje",
    "accepted": "Pranuar",
    "processing": "Në procesim",
    "shipped": "Dërguar",
    "delivered": "Dorëzuar",
    "cancelled": "Anuluar",
    # services
    "received": "Marrë",
    "in-progress": "Në progres",
    "waiting-parts": "Në pritje të pjesëve",
    "completed": "Përfunduar",
    # tasks
    "todo": "Për t'u bërë",
    "review": "Në rishikim",
    "done": "Zgjidhur",
    # tickets
    "open": "Hapur",
    "waiting-customer": "Në pritje të klientit",
    "resolved": "Zgjidhur",
    "closed": "Mbyllur",
}


def is_valid_status(entity_type: str, status: Optional[str]) -> bool:
    return status in STATUSES.get(entity_type, ())


def validate_status(entity_type: str, status: Optional[str]) -> str:
    """Return ``status`` if it belongs to the entity's set, raise otherwise."""
    if not is_valid_status(entity_type, status):
        raise ValidationError(f"Statusi i pavlefshëm: {status}")
    return status


def default_status(entity_type: str) -> str:
    return DEFAULT_STATUS[entity_type]


def translate_status(status: str) -> str:
    """Albanian label for ``status``; unknown values are returned unchanged."""
    return STATUS_LABELS.get(status, status)


def is_terminal(status: Optional[str]) -> bool:
    return status in TERMINAL_STATUSES


def apply_status_change(
    entity_type: str,
    current: Mapping[str, Any],
    new_status: str,
    now: str,
) -> Dict[str, Any]:
    """Column updates needed to move a stored record to ``new_status``.

    ``current`` is the stored row (or an empty mapping for a new record).
    The result always contains ``status`` and, when the completion column
    has to change, that column too.
    """
    column = COMPLETION_COLUMN[entity_type]
    updates: Dict[str, Any] = {"status": new_status}
    if is_terminal(new_status):
        if not current.get(column):
            updates[column] = now
    elif current.get(column):
        updates[column] = None
    return updates
