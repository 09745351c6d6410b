import pytest

from startech_api.app.services.transform import (
    camel_to_snake,
    coerce_float,
    decode_embedded_comments,
    snake_to_camel,
    to_api_shape,
    to_storage_shape,
)


@pytest.mark.parametrize(
    "value, expected",
    [(None, 0.0), ("", 0.0), ("abc", 0.0), ("12abc", 12.0), ("  3.5 ", 3.5), (7, 7.0), ("-2.25", -2.25), (".5", 0.5)],
)
def test_coerce_float(value, expected):
    assert coerce_float(value) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('[{"content": "ok"}]', [{"content": "ok"}]),
        ([{"content": "ok"}], [{"content": "ok"}]),
        ("{not json", []),
        ('{"content": "not a list"}', []),
        (None, []),
        (42, []),
    ],
)
def test_decode_embedded_comments(raw, expected):
    assert decode_embedded_comments(raw) == expected


def test_key_renaming():
    assert snake_to_camel("shipping_zip_code") == "shippingZipCode"
    assert camel_to_snake("wooCommerceId") == "woo_commerce_id"


def test_order_shipping_is_nested_and_defaults_to_empty_strings():
    shaped = to_api_shape(
        {"id": "PRS-2024-001", "shipping_city": "Prishtinë", "total": "19.98", "is_editable": 1},
        "order",
    )
    assert shaped["shippingInfo"] == {"address": "", "city": "Prishtinë", "zipCode": "", "method": ""}
    assert shaped["total"] == 19.98
    assert shaped["isEditable"] is True


def test_order_lines_are_flattened():
    shaped = to_api_shape(
        {
            "id": "PRS-2024-001",
            "order_products": [
                {
                    "product_id": "p1",
                    "quantity": 2,
                    "unit_price": 9.99,
                    "subtotal": 19.98,
                    "product": {"id": "p1", "title": "Mouse", "base_price": 9.99, "additional_cost": 0},
                }
            ],
        },
        "order",
    )
    line = shaped["products"][0]
    assert line["title"] == "Mouse"
    assert line["quantity"] == 2
    assert line["subtotal"] == 19.98
    assert line["finalPrice"] == 9.99


def test_product_final_price_is_derived():
    shaped = to_api_shape({"base_price": "7.5", "additional_cost": 2.5, "final_price": 999}, "product")
    assert shaped["finalPrice"] == 10.0


def test_product_storage_recomputes_final_price():
    stored = to_storage_shape({"basePrice": "12abc", "additionalCost": None, "finalPrice": 1}, "product")
    assert stored["base_price"] == 12.0
    assert stored["additional_cost"] == 0.0
    assert stored["final_price"] == 12.0


def test_task_round_trip():
    dto = {
        "title": "Instalo printerin",
        "assignedTo": "Arben Tech",
        "visibleTo": ["Arben Tech", "Drita Manager"],
        "attachments": [],
    }
    stored = to_storage_shape(dto, "task")
    assert stored["visible_to"] == '["Arben Tech", "Drita Manager"]'
    shaped = to_api_shape(stored)
    assert {key: shaped[key] for key in dto} == dto


def test_order_round_trip_of_shipping_info():
    dto = {"shippingInfo": {"address": "Rr. Agim Ramadani", "city": "Prishtinë", "zipCode": "10000", "method": "Postë"}}
    assert to_api_shape(to_storage_shape(dto, "order"), "order")["shippingInfo"] == dto["shippingInfo"]


def test_task_shape_decodes_malformed_comments_to_empty_list():
    assert to_api_shape({"id": "TSK-2024-001", "comments": "oops"}, "task")["comments"] == []
