"""
Request bodies for tasks and for comments embedded in tasks or tickets.
"""

from typing import Any, List, Optional

from .common import CamelModel


class TaskCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_by: Optional[str] = None
    visible_to: Optional[List[str]] = None
    category: Optional[str] = None
    department: Optional[str] = None
    attachments: Optional[List[Any]] = None
    customer_id: Optional[str] = None
    related_order_id: Optional[str] = None
    source: Optional[str] = None
    due_date: Optional[str] = None


class TaskUpdate(TaskCreate):
    """All fields optional; unspecified fields remain unchanged."""


class EmbeddedCommentCreate(CamelModel):
    content: Optional[str] = None
    text: Optional[str] = None
