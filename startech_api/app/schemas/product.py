"""Request bodies for products.

Prices may arrive as numbers or as the raw text typed into the product
form; they are coerced when the row is stored.
"""

from typing import Optional, Union

from .common import CamelModel

Price = Union[float, str, None]


class ProductCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    category: Optional[str] = None
    base_price: Price = None
    additional_cost: Price = None
    supplier: Optional[str] = None
    woo_commerce_status: Optional[str] = None
    woo_commerce_category: Optional[str] = None
    woo_commerce_id: Optional[int] = None
    source: Optional[str] = None


class ProductUpdate(ProductCreate):
    """All fields optional; unspecified fields remain unchanged."""
