"""
Request bodies for orders.

Shipping details can be sent either as flat ``shippingAddress``/
``shippingCity``/... fields or as a nested ``shippingInfo`` object, the
shape orders are returned in.
"""

from typing import List, Optional

from pydantic import Field

from .common import CamelModel


class ShippingInfo(CamelModel):
    address: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    method: Optional[str] = None


class OrderItem(CamelModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class OrderCreate(CamelModel):
    """Payload for a manual order.

    ``customer`` is either a customer id or a name; an unknown name
    creates the customer on the fly.
    """

    customer: Optional[str] = None
    customer_id: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    shipping_info: Optional[ShippingInfo] = None
    shipping_address: Optional[str] = None
    shipping_city: Optional[str] = None
    shipping_zip_code: Optional[str] = None
    shipping_method: Optional[str] = None
    notes: Optional[str] = None
    team_notes: Optional[str] = None


class OrderUpdate(CamelModel):
    customer: Optional[str] = None
    customer_id: Optional[str] = None
    status: Optional[str] = None
    items: Optional[List[OrderItem]] = None
    shipping_info: Optional[ShippingInfo] = None
    shipping_address: Optional[str] = None
    shipping_city: Optional[str] = None
    shipping_zip_code: Optional[str] = None
    shipping_method: Optional[str] = None
    notes: Optional[str] = None
    team_notes: Optional[str] = None
    is_editable: Optional[bool] = None
