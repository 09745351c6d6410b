"""Request bodies for repair services and their history entries."""

from typing import List, Optional

from .common import CamelModel


class ServiceCreate(CamelModel):
    """Payload for a new service.

    The frontend sends the fault description as ``problem`` in some
    forms and as ``problemDescription`` in others; both are accepted.
    """

    problem_description: Optional[str] = None
    problem: Optional[str] = None
    customer: Optional[str] = None
    customer_id: Optional[str] = None
    order_id: Optional[str] = None
    related_products: Optional[List[str]] = None
    status: Optional[str] = None
    category: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_by: Optional[str] = None
    warranty_info: Optional[str] = None
    reception_point: Optional[str] = None
    under_warranty: Optional[bool] = None
    qr_code: Optional[str] = None


class ServiceUpdate(ServiceCreate):
    email_notifications_sent: Optional[bool] = None


class ServiceHistoryCreate(CamelModel):
    action: str
    notes: Optional[str] = None
    email_sent: Optional[bool] = None
