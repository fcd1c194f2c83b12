import pytest


@pytest.fixture
def fake_stripe(monkeypatch):
    """Remplace les appels Stripe par des fonctions locales et garde la trace des PaymentIntents créés."""
    created = []

    def create_payment_intent(**params):
        created.append(params)
        return {"client_secret": f"pi_{len(created)}_secret_test"}

    monkeypatch.setattr("storefront.payments.stripe_client.create_payment_intent", create_payment_intent)
    monkeypatch.setattr("storefront.payments.stripe_client.find_or_create_customer", lambda email: "cus_test")
    monkeypatch.setattr("storefront.payments.stripe_client.create_ephemeral_key", lambda cid: "ek_test")
    monkeypatch.setattr(
        "storefront.payments.stripe_client.retrieve_payment_intent",
        lambda pid: {"id": pid, "status": "succeeded"},
    )
    return created


def test_create_intent_returns_client_secret(client, fake_stripe):
    r = client.post("/payments/create-intent", json={"amount": 4999, "currency": "usd"})

    assert r.status_code == 200
    assert r.json() == {"clientSecret": "pi_1_secret_test"}
    assert fake_stripe[0]["amount"] == 4999


@pytest.mark.parametrize("amount", [0, -5, "abc", None])
def test_create_intent_rejects_bad_amount_without_stripe_call(client, fake_stripe, amount):
    r = client.post("/payments/create-intent", json={"amount": amount, "currency": "usd"})

    assert r.status_code == 400
    assert r.json() == {"error": "amount must be a positive number"}
    assert fake_stripe == []


def test_invalid_json_is_400(client, fake_stripe):
    r = client.post("/payments/create-intent", content=b"{oops", headers={"Content-Type": "application/json"})

    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON body"}


def test_stripe_failure_is_500_with_error_field(client, monkeypatch):
    def boom(**params):
        raise RuntimeError("Stripe unreachable")

    monkeypatch.setattr("storefront.payments.stripe_client.create_payment_intent", boom)

    r = client.post("/payments/create-intent", json={"amount": 100})

    assert r.status_code == 500
    assert r.json() == {"error": "Stripe unreachable"}


def test_missing_stripe_key_is_500(client, monkeypatch):
    monkeypatch.setattr("storefront.config.STRIPE_SECRET_KEY", "")

    r = client.post("/payments/create-intent", json={"amount": 100})

    assert r.status_code == 500
    assert r.json() == {"error": "STRIPE_SECRET_KEY manquant"}


def test_init_payment_sheet(client, fake_stripe):
    r = client.post("/payments/init-payment-sheet", json={"amount": 2500, "customerEmail": "ada@example.com"})

    assert r.status_code == 200
    assert r.json() == {"clientSecret": "pi_1_secret_test", "customerId": "cus_test", "ephemeralKey": "ek_test"}
    assert fake_stripe[0]["customer_id"] == "cus_test"


def test_confirm_wallet_returns_status(client, fake_stripe):
    r = client.post("/payments/confirm-wallet", json={"paymentIntentId": "pi_1"})

    assert r.status_code == 200
    assert r.json() == {"status": "succeeded"}


def test_confirm_wallet_requires_intent_id(client, fake_stripe):
    r = client.post("/payments/confirm-wallet", json={})

    assert r.status_code == 400
    assert r.json() == {"error": "paymentIntentId is required"}
