"""
Shared schema pieces: the camelCase base model and the response envelope.

Every response of the API has the shape
``{success, data, message?, error?, pagination?}``.  Request bodies use
camelCase keys, which ``CamelModel`` maps onto snake_case attributes.
"""

import math
from typing import Any, Dict, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for request bodies sent by the frontend in camelCase."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_payload(self) -> Dict[str, Any]:
        """Fields the client actually sent, keyed in camelCase."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


def build_pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    pages = math.ceil(total / limit) if limit else 0
    return Pagination(page=page, limit=limit, total=total, pages=pages).model_dump()


def envelope(
    data: Any = None,
    message: Optional[str] = None,
    pagination: Optional[Dict[str, int]] = None,
) -> Dict[str, Any]:
    """Successful response body."""
    body: Dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination
    return body
