"""
Conversion between stored rows and the JSON shape used by the frontend.

Rows are stored with snake_case columns; the API speaks camelCase.  On top
of the plain key renaming a few entities carry structural differences:

* orders keep their shipping fields flat in storage but expose them as a
  nested ``shippingInfo`` object, and their product lines are flattened
  into ``products``;
* products always expose ``finalPrice`` as ``basePrice + additionalCost``;
* tasks and tickets keep comments, attachments and visibility lists as
  JSON text columns.

Every function here is pure and never raises on malformed stored data.
"""

import json
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Columns stored as 0/1 integers.
BOOLEAN_COLUMNS = frozenset(
    {
        "is_active",
        "is_editable",
        "under_warranty",
        "email_notifications_sent",
        "email_sent",
    }
)

# Columns holding JSON encoded lists.
JSON_LIST_COLUMNS = frozenset({"visible_to", "attachments", "comments", "related_products"})

SHIPPING_FIELDS = {
    "shipping_address": "address",
    "shipping_city": "city",
    "shipping_zip_code": "zipCode",
    "shipping_method": "method",
}


def snake_to_camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def camel_to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def coerce_float(value: Any) -> float:
    """Parse ``value`` the way ``parseFloat(value || 0)`` does in a browser.

    ``None``, empty strings and anything without a numeric prefix give
    ``0.0``; ``"12.5abc"`` gives ``12.5``.
    """
    if value is None or value == "" or value is False:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_PREFIX.match(str(value).strip())
    if not match:
        return 0.0
    return float(match.group(0))


def decode_json_list(raw: Any) -> List[Any]:
    """Return ``raw`` as a list, decoding JSON text; anything else is ``[]``."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            value = json.loads(raw)
        except ValueError:
            return []
        return value if isinstance(value, list) else []
    return []


def decode_embedded_comments(raw: Any) -> List[Any]:
    """Comments embedded in a task or ticket row, always as a list."""
    return decode_json_list(raw)


def encode_json_list(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return json.dumps(decode_json_list(value))
    return json.dumps(list(value))


def _camelize(record: Mapping[str, Any]) -> Dict[str, Any]:
    shaped: Dict[str, Any] = {}
    for key, value in record.items():
        if key in BOOLEAN_COLUMNS and value is not None:
            value = bool(value)
        elif key in JSON_LIST_COLUMNS:
            value = decode_json_list(value)
        shaped[snake_to_camel(key)] = value
    return shaped


def _order_lines(lines: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    products = []
    for line in lines:
        product = dict(line.get("product") or {})
        item = to_api_shape(product, "product") if product else {"id": line.get("product_id")}
        quantity = int(line.get("quantity") or 0)
        item["quantity"] = quantity
        if "unit_price" in line:
            item["finalPrice"] = coerce_float(line.get("unit_price"))
        item["subtotal"] = coerce_float(line.get("subtotal"))
        products.append(item)
    return products


def to_api_shape(record: Optional[Mapping[str, Any]], entity: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Convert a stored row (plus joined data) into its camelCase API form."""
    if record is None:
        return None
    record = dict(record)

    if entity == "order":
        shipping = {
            api_key: record.pop(column, None) or ""
            for column, api_key in SHIPPING_FIELDS.items()
        }
        lines = record.pop("order_products", None)
        customer = record.pop("customer", None)
        shaped = _camelize(record)
        shaped["shippingInfo"] = shipping
        if "total" in record:
            shaped["total"] = coerce_float(record["total"])
        if lines is not None:
            shaped["products"] = _order_lines(lines)
        if customer is not None:
            shaped["customer"] = to_api_shape(customer)
        return shaped

    if entity == "product":
        shaped = _camelize(record)
        base = coerce_float(record.get("base_price"))
        additional = coerce_float(record.get("additional_cost"))
        shaped["basePrice"] = base
        shaped["additionalCost"] = additional
        shaped["finalPrice"] = base + additional
        return shaped

    shaped = _camelize(record)
    if entity in ("task", "ticket"):
        shaped["comments"] = decode_embedded_comments(record.get("comments"))
    for nested in ("customer", "history"):
        value = record.get(nested)
        if isinstance(value, list):
            shaped[nested] = [to_api_shape(item) for item in value]
        elif isinstance(value, Mapping):
            shaped[nested] = to_api_shape(value)
    return shaped


def to_storage_shape(dto: Mapping[str, Any], entity: Optional[str] = None) -> Dict[str, Any]:
    """Convert a camelCase payload into column/value pairs for storage."""
    dto = dict(dto)
    stored: Dict[str, Any] = {}

    if entity == "order":
        shipping = dto.pop("shippingInfo", None)
        if isinstance(shipping, Mapping):
            for column, api_key in SHIPPING_FIELDS.items():
                if api_key in shipping:
                    stored[column] = shipping[api_key]
        dto.pop("products", None)

    for key, value in dto.items():
        column = camel_to_snake(key)
        if column in BOOLEAN_COLUMNS and value is not None:
            value = 1 if value else 0
        elif column in JSON_LIST_COLUMNS:
            value = encode_json_list(value)
        stored[column] = value

    if entity == "product":
        dto_keys = set(stored)
        if dto_keys & {"base_price", "additional_cost", "final_price"}:
            stored["base_price"] = coerce_float(stored.get("base_price"))
            stored["additional_cost"] = coerce_float(stored.get("additional_cost"))
            stored["final_price"] = stored["base_price"] + stored["additional_cost"]
    if entity == "order" and "total" in stored:
        stored["total"] = coerce_float(stored["total"])
    return stored
