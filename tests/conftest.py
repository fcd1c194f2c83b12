import os

# Configuration de test, posée avant l'import de storefront.config
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("SHOPIFY_DOMAIN", "shop.example.test")
os.environ.setdefault("SHOPIFY_ADMIN_TOKEN", "shpat_dummy")

import json
from typing import Any, Dict, Generator, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.app import app as fastapi_app
from storefront.commerce.client import CommerceClient, CommerceConfig
from storefront.commerce.models import Cart


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def _bridge_config(monkeypatch):
    """Identifiants serveur factices: aucun test n'atteint Stripe ni Shopify."""
    monkeypatch.setattr("storefront.config.STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr("storefront.config.SHOPIFY_DOMAIN", "shop.example.test")
    monkeypatch.setattr("storefront.config.SHOPIFY_ADMIN_TOKEN", "shpat_dummy")
    monkeypatch.setattr("storefront.config.SHOPIFY_ADMIN_API_VERSION", "2024-10")
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)


# --- GraphQL Storefront simulé ---

class GraphQLRecorder:
    """
    Transport httpx simulé: `responder(version, payload)` retourne (status, body).
    Garde la trace des versions et des variables reçues.
    """

    def __init__(self, responder):
        self.responder = responder
        self.calls: List[Dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        version = request.url.path.split("/")[2]
        payload = json.loads(request.content)
        self.calls.append({"version": version, "payload": payload, "headers": request.headers})
        status, body = self.responder(version, payload)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def versions(self) -> List[str]:
        return [c["version"] for c in self.calls]


@pytest.fixture
def commerce_config() -> CommerceConfig:
    return CommerceConfig(
        domain="shop.example.test",
        storefront_token="storefront-token-123",
        api_versions=("2025-01", "2024-10", "2024-07", "2024-04", "unstable"),
    )


@pytest.fixture
def make_commerce_client(commerce_config):
    """Fabrique un CommerceClient branché sur un GraphQLRecorder."""
    def _make(responder, cfg: Optional[CommerceConfig] = None):
        recorder = GraphQLRecorder(responder)
        http = httpx.AsyncClient(transport=httpx.MockTransport(recorder.handler))
        return CommerceClient(cfg or commerce_config, http_client=http), recorder
    return _make


# --- Données panier ---

def cart_node(
    cart_id: str = "gid://shopify/Cart/c1",
    subtotal: str = "49.99",
    total: Optional[str] = None,
    tax: Optional[str] = None,
    currency: str = "USD",
    lines: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Nœud Cart tel que renvoyé par l'API Storefront."""
    if lines is None:
        lines = [
            {
                "id": "gid://shopify/CartLine/l1",
                "quantity": 1,
                "cost": {
                    "totalAmount": {"amount": subtotal, "currencyCode": currency},
                    "amountPerQuantity": {"amount": subtotal, "currencyCode": currency},
                },
                "merchandise": {
                    "id": "gid://shopify/ProductVariant/40001",
                    "title": "Hoodie / M",
                    "availableForSale": True,
                    "price": {"amount": subtotal, "currencyCode": currency},
                    "product": {"id": "gid://shopify/Product/9", "title": "Hoodie", "handle": "hoodie"},
                },
            }
        ]
    return {
        "id": cart_id,
        "checkoutUrl": "https://shop.example.test/cart/c1",
        "totalQuantity": sum(line["quantity"] for line in lines),
        "discountCodes": [],
        "cost": {
            "subtotalAmount": {"amount": subtotal, "currencyCode": currency},
            "totalAmount": {"amount": total or subtotal, "currencyCode": currency},
            "totalTaxAmount": {"amount": tax, "currencyCode": currency} if tax else None,
        },
        "lines": {"edges": [{"node": line} for line in lines]},
    }


@pytest.fixture
def cart_49_99() -> Cart:
    return Cart.from_graphql(cart_node())


@pytest.fixture
def make_cart():
    def _make(**kwargs) -> Cart:
        return Cart.from_graphql(cart_node(**kwargs))
    return _make


@pytest.fixture
def make_cart_node():
    return cart_node
