import pytest
from fastapi import HTTPException


@pytest.fixture
def fake_admin(monkeypatch):
    """Remplace l'API admin Shopify: enregistre les commandes reçues."""
    orders = []

    async def create_order(payload):
        orders.append(payload)
        return {"id": 820982911946154500 + len(orders), "order_number": 1000 + len(orders)}

    async def get_customer_addresses(customer_id):
        return [{"id": 1, "customer_id": customer_id, "city": "Lyon"}]

    monkeypatch.setattr("storefront.orders.admin_client.create_order", create_order)
    monkeypatch.setattr("storefront.orders.admin_client.get_customer_addresses", get_customer_addresses)
    return orders


ORDER_BODY = {
    "lineItems": [{"variantId": "gid://shopify/ProductVariant/40001", "quantity": 2}],
    "customerEmail": "ada@example.com",
    "currency": "USD",
    "transactionId": "pi_ABC123",
    "totalAmount": "49.99",
}


def test_create_order_returns_order_ids(client, fake_admin):
    r = client.post("/shopify/create-order", json=ORDER_BODY)

    assert r.status_code == 200
    assert r.json() == {"orderId": 820982911946154501, "orderNumber": 1001}
    order = fake_admin[0]["order"]
    assert order["line_items"] == [{"variant_id": 40001, "quantity": 2}]
    assert order["financial_status"] == "paid"
    assert order["transactions"][0]["authorization"] == "pi_ABC123"


def test_create_order_without_valid_lines_is_400(client, fake_admin):
    r = client.post("/shopify/create-order", json={"lineItems": [{"variantId": "abc", "quantity": 1}]})

    assert r.status_code == 400
    assert r.json() == {"error": "No valid line items"}
    assert fake_admin == []


def test_shopify_rejection_is_forwarded(client, monkeypatch):
    async def reject(payload):
        raise HTTPException(status_code=400, detail={"line_items": ["is invalid"]})

    monkeypatch.setattr("storefront.orders.admin_client.create_order", reject)

    r = client.post("/shopify/create-order", json=ORDER_BODY)

    assert r.status_code == 400
    assert r.json() == {"error": {"line_items": ["is invalid"]}}


def test_unexpected_failure_is_500(client, monkeypatch):
    async def boom(payload):
        raise RuntimeError("connection reset")

    monkeypatch.setattr("storefront.orders.admin_client.create_order", boom)

    r = client.post("/shopify/create-order", json=ORDER_BODY)

    assert r.status_code == 500
    assert r.json() == {"error": "connection reset"}


def test_checkout_confirm_uses_verified_intent_id(client, fake_admin, monkeypatch):
    monkeypatch.setattr(
        "storefront.payments.stripe_client.retrieve_payment_intent",
        lambda pid: {"id": pid, "status": "succeeded"},
    )

    r = client.post("/checkout/confirm", json={**ORDER_BODY, "paymentIntentId": "pi_VERIFIED"})

    assert r.status_code == 200
    assert fake_admin[0]["order"]["transactions"][0]["authorization"] == "pi_VERIFIED"


def test_checkout_confirm_refuses_unpaid_intent(client, fake_admin, monkeypatch):
    monkeypatch.setattr(
        "storefront.payments.stripe_client.retrieve_payment_intent",
        lambda pid: {"id": pid, "status": "requires_payment_method"},
    )

    r = client.post("/checkout/confirm", json={**ORDER_BODY, "paymentIntentId": "pi_UNPAID"})

    assert r.status_code == 400
    assert r.json() == {"error": "Payment not completed"}
    assert fake_admin == []


def test_customer_addresses(client, fake_admin):
    r = client.get("/customers/42/addresses")

    assert r.status_code == 200
    assert r.json() == {"addresses": [{"id": 1, "customer_id": "42", "city": "Lyon"}]}
