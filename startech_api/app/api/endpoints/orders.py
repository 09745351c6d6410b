"""
Order endpoints.

Orders are created manually from catalogue products; the total is always
computed on the server.  Deleting an order requires an administrator.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...core.db import Database, get_db
from ...core.errors import ServiceError, to_http
from ...core.security import get_current_user, require_roles
from ...schemas.common import build_pagination, envelope
from ...schemas.order import OrderCreate, OrderUpdate
from ...services.activity_service import ActivityService
from ...services.order_service import OrderService

router = APIRouter()


@router.get("/")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    source: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    orders, total = await OrderService.list_orders(
        db, status=status_filter, source=source, page=page, limit=limit
    )
    return envelope(orders, pagination=build_pagination(page, limit, total))


@router.get("/stats/overview")
async def order_stats(
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return envelope(await OrderService.stats(db))


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        return envelope(await OrderService.get_order(db, order_id))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_order(
    order: OrderCreate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Create an order.

    ``customer`` may be an existing customer id or a name; an unknown
    name creates the customer.  Every item must reference an existing
    product and is priced at that product's final price.
    """
    try:
        created = await OrderService.create_order(db, order.to_payload())
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "CREATE", "orders", "order", created["id"],
        {"total": created["total"]}, request,
    )
    return envelope(created, "Porosia u krijua me sukses")


@router.put("/{order_id}")
async def update_order(
    order_id: str,
    updates: OrderUpdate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        updated = await OrderService.update_order(db, order_id, updates.to_payload())
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "UPDATE", "orders", "order", order_id,
        {"status": updated["status"]}, request,
    )
    return envelope(updated, "Porosia u përditësua me sukses")


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        await OrderService.delete_order(db, order_id)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(db, current_user, "DELETE", "orders", "order", order_id, request=request)
    return envelope(message="Porosia u fshi me sukses")
