"""
Service for the product catalogue.

Manual products are entered through the API.  Products mirrored from the
WooCommerce store are rows with ``source = 'WooCommerce'`` and a numeric
``woo_commerce_id``; both kinds are listed together.  ``final_price`` is
always recomputed from ``base_price + additional_cost`` when a product is
written.
"""

import uuid
from typing import Any, Dict, List, Optional, Tuple

from ..core.db import Database, now_iso
from ..core.errors import NotFoundError, ValidationError
from .base import build_where, fetch_row, insert_row, paged_query, search_clause, update_row
from .transform import to_api_shape, to_storage_shape

PRODUCT_SOURCES = ("Manual", "WooCommerce")
MAX_PAGE_SIZE = 100


class ProductService:
    """CRUD for products."""

    @classmethod
    async def list_products(
        cls,
        db: Database,
        source: str = "all",
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 25,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """List products filtered by source and a free-text search.

        ``source`` is ``all``, ``Manual`` or ``WooCommerce``; ``search``
        matches title, id and category.  ``limit`` is capped at 100.
        """
        limit = min(limit, MAX_PAGE_SIZE)
        where, params = build_where(
            [
                ("source = ?", source if source in PRODUCT_SOURCES else None),
                (search_clause(("title", "id", "category")), f"%{search}%" if search else None),
            ]
        )
        with db.cursor() as cursor:
            rows, total = paged_query(cursor, "products", where, params, page, limit)
        return [to_api_shape(row, "product") for row in rows], total

    @classmethod
    async def get_product(cls, db: Database, product_id: str) -> Dict[str, Any]:
        with db.cursor() as cursor:
            product = fetch_row(cursor, "products", product_id)
        if not product:
            raise NotFoundError("Produkti nuk u gjet")
        return to_api_shape(product, "product")

    @classmethod
    async def create_product(cls, db: Database, payload: Dict[str, Any]) -> Dict[str, Any]:
        payload = dict(payload)
        payload.setdefault("basePrice", 0)
        payload.setdefault("additionalCost", 0)
        values = to_storage_shape(payload, "product")
        if not values.get("title"):
            raise ValidationError("Titulli i produktit është i detyrueshëm")
        now = now_iso()
        values.update(
            id=str(uuid.uuid4()),
            source=values.get("source") or "Manual",
            woo_commerce_status=values.get("woo_commerce_status") or "active",
            last_sync_date=now,
            created_at=now,
            updated_at=now,
        )
        with db.cursor() as cursor:
            insert_row(cursor, "products", values)
            created = fetch_row(cursor, "products", values["id"])
        return to_api_shape(created, "product")

    @classmethod
    async def update_product(
        cls, db: Database, product_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Apply a partial update; missing price parts keep their stored value."""
        with db.cursor() as cursor:
            current = fetch_row(cursor, "products", product_id)
            if not current:
                raise NotFoundError("Produkti nuk u gjet")
            payload = dict(payload)
            if "basePrice" in payload or "additionalCost" in payload:
                payload.setdefault("basePrice", current["base_price"])
                payload.setdefault("additionalCost", current["additional_cost"])
            values = to_storage_shape(payload, "product")
            values.pop("created_at", None)
            values["updated_at"] = now_iso()
            update_row(cursor, "products", product_id, values)
            updated = fetch_row(cursor, "products", product_id)
        return to_api_shape(updated, "product")

    @classmethod
    async def delete_product(cls, db: Database, product_id: str) -> None:
        with db.cursor() as cursor:
            if not fetch_row(cursor, "products", product_id):
                raise NotFoundError("Produkti nuk u gjet")
            cursor.execute("DELETE FROM products WHERE id = ?", (product_id,))
