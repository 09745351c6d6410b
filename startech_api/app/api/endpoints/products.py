"""
Product endpoints.

Everyone may browse the catalogue; only administrators may change it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ...core.db import Database, get_db
from ...core.errors import ServiceError, to_http
from ...core.security import get_current_user, require_roles
from ...schemas.common import build_pagination, envelope
from ...schemas.product import ProductCreate, ProductUpdate
from ...services.activity_service import ActivityService
from ...services.product_service import MAX_PAGE_SIZE, ProductService

router = APIRouter()


@router.get("/")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1),
    source: str = Query("all", description="all, Manual or WooCommerce"),
    search: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    """List products; ``limit`` above 100 is reduced to 100."""
    limit = min(limit, MAX_PAGE_SIZE)
    products, total = await ProductService.list_products(
        db, source=source, search=search, page=page, limit=limit
    )
    return envelope(products, pagination=build_pagination(page, limit, total))


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    try:
        return envelope(await ProductService.get_product(db, product_id))
    except ServiceError as e:
        raise to_http(e) from e


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        created = await ProductService.create_product(db, product.to_payload())
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "CREATE", "products", "product", created["id"],
        {"title": created["title"]}, request,
    )
    return envelope(created, "Produkti u krijua me sukses")


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    updates: ProductUpdate,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        updated = await ProductService.update_product(db, product_id, updates.to_payload())
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "UPDATE", "products", "product", product_id, request=request
    )
    return envelope(updated, "Produkti u përditësua me sukses")


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    request: Request,
    db: Database = Depends(get_db),
    current_user: dict = Depends(require_roles("admin")),
) -> dict:
    try:
        await ProductService.delete_product(db, product_id)
    except ServiceError as e:
        raise to_http(e) from e
    await ActivityService.log(
        db, current_user, "DELETE", "products", "product", product_id, request=request
    )
    return envelope(message="Produkti u fshi me sukses")
