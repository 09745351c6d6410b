"""Request bodies for customers."""

from typing import Optional

from .common import CamelModel


class CustomerCreate(CamelModel):
    """Payload for a new customer.

    ``name`` and ``email`` are required; they are declared optional so the
    service can answer with its own message when either is missing.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    neighborhood: Optional[str] = None
    source: Optional[str] = None


class CustomerUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    neighborhood: Optional[str] = None
    source: Optional[str] = None
