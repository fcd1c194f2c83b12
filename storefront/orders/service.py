"""
Cas d'usage 'orders': normalise le panier reçu, construit la commande Shopify et l'envoie à l'API admin.
Aucun état conservé entre deux requêtes.
"""
from typing import Any, Dict, List, Optional
import logging
import re

from fastapi import HTTPException

from storefront.orders import admin_client
from storefront.utils.payments import safe_number

logger = logging.getLogger(__name__)

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def normalize_variant_id(raw_id: Any) -> Optional[int]:
    """
    Extrait l'id numérique d'un identifiant de variante.
    - "gid://shopify/ProductVariant/123" -> 123, "123" -> 123, "abc" -> None
    """
    if raw_id is None or raw_id == "":
        return None
    match = _TRAILING_DIGITS.search(str(raw_id))
    return int(match.group(1)) if match else None


def normalize_line_items(line_items: Any) -> List[Dict[str, int]]:
    """
    Transforme [{variantId|variant_id, quantity}, ...] en lignes admin {variant_id, quantity}.
    - Ignore les lignes sans id exploitable ou de quantité non entière ou non positive.
    - Soulève HTTPException(400) si la liste est absente/vide ou si aucune ligne n'est valide.
    """
    if not isinstance(line_items, list) or not line_items:
        raise HTTPException(status_code=400, detail="lineItems is required")

    normalized: List[Dict[str, int]] = []
    for item in line_items:
        if not isinstance(item, dict):
            continue
        variant_id = normalize_variant_id(item.get("variantId") or item.get("variant_id"))
        quantity = safe_number(item.get("quantity"))
        if variant_id is None or quantity is None or quantity <= 0:
            continue
        # Pas de troncature: 0.5 ou 2.7 ne deviennent pas 0 ou 2 articles
        if quantity != quantity.to_integral_value():
            continue
        normalized.append({"variant_id": variant_id, "quantity": int(quantity)})

    if not normalized:
        raise HTTPException(status_code=400, detail="No valid line items")
    return normalized


def build_order_payload(body: Dict[str, Any], transaction_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Construit le corps POST /orders.json.
    - financial_status "paid" + une transaction sale/success portant l'id Stripe en authorization
    - Les champs absents sont omis (pas de null envoyé à Shopify)
    """
    line_items = normalize_line_items(body.get("lineItems"))
    transaction_id = transaction_id or body.get("transactionId") or None
    total_amount = body.get("totalAmount")

    transaction: Dict[str, Any] = {"kind": "sale", "status": "success", "gateway": "stripe"}
    if total_amount not in (None, ""):
        transaction["amount"] = str(total_amount)
    if transaction_id:
        transaction["authorization"] = str(transaction_id)

    order: Dict[str, Any] = {
        "line_items": line_items,
        "currency": body.get("currency") or "USD",
        "financial_status": "paid",
        "transactions": [transaction],
    }
    if body.get("customerEmail"):
        order["email"] = body["customerEmail"]
    if body.get("shippingAddress"):
        order["shipping_address"] = body["shippingAddress"]

    shipping_line = body.get("shippingLine")
    if isinstance(shipping_line, dict) and shipping_line.get("title"):
        order["shipping_lines"] = [
            {
                "title": shipping_line.get("title"),
                "code": shipping_line.get("code") or shipping_line.get("title"),
                "price": str(shipping_line.get("price") or "0.00"),
            }
        ]
    return {"order": order}


async def create_order(body: Dict[str, Any], transaction_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Crée la commande Shopify "payée" correspondant à un paiement Stripe.
    Retour: {"orderId": ..., "orderNumber": ...}
    """
    payload = build_order_payload(body, transaction_id=transaction_id)
    order = await admin_client.create_order(payload)
    authorization = payload["order"]["transactions"][0].get("authorization")
    logger.info(
        "orders.created order_id=%s order_number=%s items=%s transaction_id=%s",
        order.get("id"), order.get("order_number"), len(payload["order"]["line_items"]), authorization,
    )
    return {"orderId": order.get("id"), "orderNumber": order.get("order_number")}


async def fetch_addresses(customer_id: str) -> Dict[str, Any]:
    if not (customer_id or "").strip():
        raise HTTPException(status_code=400, detail="customerId is required")
    addresses = await admin_client.get_customer_addresses(customer_id.strip())
    return {"addresses": addresses}
