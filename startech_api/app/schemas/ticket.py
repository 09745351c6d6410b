"""Request bodies for support tickets."""

from typing import Optional

from .common import CamelModel


class TicketCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    source: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    customer_id: Optional[str] = None
    related_order_id: Optional[str] = None


class TicketUpdate(TicketCreate):
    pass
