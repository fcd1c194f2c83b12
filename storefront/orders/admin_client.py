"""
Adaptateur Shopify Admin REST: centralise les appels et la configuration admin (côté serveur uniquement).
"""
from typing import Any, Dict, List, Optional
import logging

import httpx
from fastapi import HTTPException

from storefront import config

logger = logging.getLogger(__name__)

ADMIN_TOKEN_HEADER = "X-Shopify-Access-Token"


def require_admin() -> Dict[str, str]:
    """
    Vérifie la présence du domaine et du token admin.
    - Absents: HTTPException(500) explicite plutôt qu'un 401 opaque renvoyé par Shopify.
    Retour: {"base_url": ..., "token": ...}
    """
    if not config.SHOPIFY_DOMAIN or not config.SHOPIFY_ADMIN_TOKEN:
        raise HTTPException(
            status_code=500,
            detail="Shopify admin non configuré: définir SHOPIFY_DOMAIN et SHOPIFY_ADMIN_TOKEN",
        )
    return {
        "base_url": f"https://{config.SHOPIFY_DOMAIN}/admin/api/{config.SHOPIFY_ADMIN_API_VERSION}",
        "token": config.SHOPIFY_ADMIN_TOKEN,
    }


def _error_detail(resp: httpx.Response) -> Any:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"Shopify admin HTTP {resp.status_code}"
    if isinstance(data, dict) and data.get("errors"):
        return data["errors"]
    return data


async def _send(
    method: str,
    path: str,
    json: Optional[Dict[str, Any]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    admin = require_admin()
    headers = {"Content-Type": "application/json", ADMIN_TOKEN_HEADER: admin["token"]}
    url = admin["base_url"] + path
    if http_client is not None:
        resp = await http_client.request(method, url, json=json, headers=headers)
    else:
        async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SECONDS) as client:
            resp = await client.request(method, url, json=json, headers=headers)

    if not resp.is_success:
        detail = _error_detail(resp)
        logger.warning("shopify_admin.error method=%s path=%s status=%s", method, path, resp.status_code)
        raise HTTPException(status_code=400, detail=detail)
    return resp.json()


async def create_order(payload: Dict[str, Any], http_client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    """
    POST /orders.json
    Retour: l'objet "order" Shopify (id, order_number, ...).
    """
    data = await _send("POST", "/orders.json", json=payload, http_client=http_client)
    order = data.get("order") or {}
    if not order.get("id"):
        raise HTTPException(status_code=502, detail="Réponse Shopify sans commande")
    return order


async def get_customer_addresses(
    customer_id: str, http_client: Optional[httpx.AsyncClient] = None
) -> List[Dict[str, Any]]:
    data = await _send("GET", f"/customers/{customer_id}/addresses.json", http_client=http_client)
    return data.get("addresses") or []
