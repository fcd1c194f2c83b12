import pytest
from fastapi import HTTPException

from storefront.orders import service
from storefront.orders.service import build_order_payload, normalize_line_items, normalize_variant_id


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("gid://shopify/ProductVariant/40001", 40001),
        ("123", 123),
        (456, 456),
        ("abc", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_variant_id(raw, expected):
    assert normalize_variant_id(raw) == expected


def test_normalize_line_items_skips_invalid_lines():
    items = [
        {"variantId": "gid://shopify/ProductVariant/1", "quantity": 2},
        {"variant_id": "2", "quantity": "3"},
        {"variantId": "gid://shopify/ProductVariant/3", "quantity": 0},
        {"variantId": "no-digits", "quantity": 1},
        "not-a-dict",
    ]

    assert normalize_line_items(items) == [
        {"variant_id": 1, "quantity": 2},
        {"variant_id": 2, "quantity": 3},
    ]


@pytest.mark.parametrize(
    "items,detail",
    [
        (None, "lineItems is required"),
        ([], "lineItems is required"),
        ([{"variantId": "x", "quantity": 1}], "No valid line items"),
        ([{"variantId": "1", "quantity": -1}], "No valid line items"),
    ],
)
def test_normalize_line_items_rejects_empty(items, detail):
    with pytest.raises(HTTPException) as exc:
        normalize_line_items(items)
    assert exc.value.status_code == 400
    assert exc.value.detail == detail


@pytest.mark.parametrize("quantity", [0.5, 2.7, "0.5", "1.25"])
def test_normalize_line_items_drops_fractional_quantities(quantity):
    items = [
        {"variantId": "gid://shopify/ProductVariant/1", "quantity": quantity},
        {"variantId": "gid://shopify/ProductVariant/2", "quantity": 1},
    ]

    # Aucune troncature silencieuse: la ligne fractionnaire est ignorée
    assert normalize_line_items(items) == [{"variant_id": 2, "quantity": 1}]


@pytest.mark.parametrize("quantity,expected", [("3", 3), (2.0, 2), ("4.00", 4)])
def test_normalize_line_items_keeps_integral_quantities(quantity, expected):
    items = [{"variantId": "gid://shopify/ProductVariant/1", "quantity": quantity}]

    assert normalize_line_items(items) == [{"variant_id": 1, "quantity": expected}]


def test_normalize_line_items_only_fractional_is_rejected():
    with pytest.raises(HTTPException) as exc:
        normalize_line_items([{"variantId": "1", "quantity": 0.5}])
    assert exc.value.detail == "No valid line items"


def test_build_order_payload_marks_paid_with_stripe_transaction():
    body = {
        "lineItems": [{"variantId": "gid://shopify/ProductVariant/40001", "quantity": 1}],
        "customerEmail": "ada@example.com",
        "currency": "EUR",
        "transactionId": "pi_ABC123",
        "totalAmount": "49.99",
        "shippingLine": {"title": "Standard", "code": "standard", "price": "6.99"},
    }

    order = build_order_payload(body)["order"]

    assert order["financial_status"] == "paid"
    assert order["currency"] == "EUR"
    assert order["email"] == "ada@example.com"
    assert order["transactions"] == [
        {"kind": "sale", "status": "success", "gateway": "stripe", "amount": "49.99", "authorization": "pi_ABC123"}
    ]
    assert order["shipping_lines"] == [{"title": "Standard", "code": "standard", "price": "6.99"}]
    assert "shipping_address" not in order


def test_build_order_payload_defaults_and_explicit_transaction():
    body = {"lineItems": [{"variantId": "7", "quantity": 1}], "transactionId": "pi_client"}

    order = build_order_payload(body, transaction_id="pi_verified")["order"]

    assert order["currency"] == "USD"
    assert order["transactions"][0]["authorization"] == "pi_verified"
    assert "amount" not in order["transactions"][0]
    assert "email" not in order


@pytest.mark.asyncio
async def test_create_order_returns_ids(monkeypatch):
    sent = []

    async def fake_create_order(payload):
        sent.append(payload)
        return {"id": 820982911946154500, "order_number": 1001}

    monkeypatch.setattr("storefront.orders.service.admin_client.create_order", fake_create_order)

    result = await service.create_order({"lineItems": [{"variantId": "1", "quantity": 1}], "transactionId": "pi_1"})

    assert result == {"orderId": 820982911946154500, "orderNumber": 1001}
    assert sent[0]["order"]["line_items"] == [{"variant_id": 1, "quantity": 1}]


@pytest.mark.asyncio
async def test_create_order_invalid_body_never_calls_admin(monkeypatch):
    async def fail(payload):
        raise AssertionError("admin API ne doit pas être appelée")

    monkeypatch.setattr("storefront.orders.service.admin_client.create_order", fail)

    with pytest.raises(HTTPException) as exc:
        await service.create_order({"lineItems": []})
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_fetch_addresses_requires_customer_id():
    with pytest.raises(HTTPException) as exc:
        await service.fetch_addresses("  ")
    assert exc.value.status_code == 400
