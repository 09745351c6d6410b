"""
Customer endpoints.

Any authenticated user may read and edit customers.  A customer that is
still referenced by an order or a service cannot be deleted.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...core.db import Database, get_db
from ...core.errors import ServiceError, to_http
from ...core.security import get_current_user
from ...schemas.common import build_pagination, envelope
from ...schemas.customer import CustomerCreate, CustomerUpdate
from ...services.activity_service import ActivityService
from ...services.customer_service import CustomerService

router = APIRouter()


@router.get("/")
async def list_customers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    source: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """List customers.

    - **search** matches id, name, email, phone, address, city and neighborhood.
    - **source** filters by origin (``Internal``, ``WooCommerce`` ...).
    """
    customers, total = await CustomerService.list_customers(
        db, search=search, source=source, page=page, limit=limit
    )
    return envelope(customers, pagination=build_pagination(page, limit, total))


@router.get("/stats/overview")
async def customer_stats(
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return envelope(await CustomerService.stats(db))


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Return a customer with its orders and services."""
    try:
        return envelope(await CustomerService.get_customer(db, customer_id))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: CustomerCreate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        created = await CustomerService.create_customer(db, customer.to_payload())
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "CREATE", "customers", "customer", created["id"],
        {"name": created["name"]}, request,
    )
    return envelope(created, "Klienti u krijua me sukses")


@router.put("/{customer_id}")
async def update_customer(
    customer_id: str,
    updates: CustomerUpdate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        updated = await CustomerService.update_customer(db, customer_id, updates.to_payload())
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "UPDATE", "customers", "customer", customer_id, request=request
    )
    return envelope(updated, "Klienti u përditësua me sukses")


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        await CustomerService.delete_customer(db, customer_id)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "DELETE", "customers", "customer", customer_id, request=request
    )
    return envelope(message="Klienti u fshi me sukses")
