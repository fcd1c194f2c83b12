"""
Opérations métier Storefront: enveloppes fines au-dessus de CommerceClient.request.
- Catalogue: produits, collections (dont comptage paginé), recherche
- Panier: création, lecture, ajout/mise à jour/suppression de lignes, codes promo
- Clients: login, création, récupération, suppression, mise à jour (avec repli téléphone)
- Adresses: CRUD + adresse par défaut; historique des commandes
Les tableaux userErrors/customerUserErrors sont traduits en une seule CommerceUserError.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import logging

from storefront.commerce import queries
from storefront.commerce.client import CommerceClient
from storefront.commerce.fallback import CUSTOMER_UPDATE_FALLBACKS, OptionalFieldFallback, call_with_fallbacks
from storefront.commerce.models import Cart
from storefront.errors import CommerceUserError, ValidationError

logger = logging.getLogger(__name__)


def raise_for_user_errors(payload: Optional[Dict[str, Any]], key: str = "customerUserErrors") -> None:
    errors = (payload or {}).get(key) or []
    if errors:
        raise CommerceUserError(str(e.get("message") or "") for e in errors)


def _nodes(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [edge["node"] for edge in ((connection or {}).get("edges") or [])]


def _require_quantity(quantity: int) -> None:
    if int(quantity) < 1:
        raise ValidationError("La quantité doit être supérieure ou égale à 1")


# --- Catalogue ---

async def get_products(client: CommerceClient, first: int = 20, after: Optional[str] = None) -> Dict[str, Any]:
    data = await client.request(queries.GET_PRODUCTS, {"first": first, "after": after})
    products = data["products"]
    page = products.get("pageInfo") or {}
    return {
        "products": _nodes(products),
        "has_next_page": bool(page.get("hasNextPage")),
        "end_cursor": page.get("endCursor"),
    }


async def get_product_by_handle(client: CommerceClient, handle: str) -> Optional[Dict[str, Any]]:
    data = await client.request(queries.GET_PRODUCT_BY_HANDLE, {"handle": handle})
    return data.get("productByHandle")


async def get_collections(client: CommerceClient, first: int = 10) -> List[Dict[str, Any]]:
    data = await client.request(queries.GET_COLLECTIONS, {"first": first})
    return _nodes(data.get("collections"))


async def get_collection_by_handle(
    client: CommerceClient, handle: str, first: int = 250, after: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    data = await client.request(queries.GET_COLLECTION_BY_HANDLE, {"handle": handle, "first": first, "after": after})
    return data.get("collectionByHandle")


async def get_collection_product_count(client: CommerceClient, handle: str, first: int = 250) -> int:
    """
    Compte les produits d'une collection en suivant pageInfo.hasNextPage/endCursor.
    S'arrête dès que hasNextPage est faux (ou collection introuvable).
    """
    total = 0
    after: Optional[str] = None
    while True:
        data = await client.request(
            queries.GET_COLLECTION_PRODUCT_COUNT, {"handle": handle, "first": first, "after": after}
        )
        collection = data.get("collectionByHandle")
        if not collection:
            return total
        products = collection.get("products") or {}
        total += len(products.get("edges") or [])
        page = products.get("pageInfo") or {}
        if not page.get("hasNextPage"):
            return total
        after = page.get("endCursor")
        if not after:
            logger.warning("commerce.collection_count handle=%s hasNextPage sans endCursor", handle)
            return total


async def search_products(client: CommerceClient, query: str, first: int = 20) -> List[Dict[str, Any]]:
    data = await client.request(queries.SEARCH_PRODUCTS, {"query": query, "first": first})
    return _nodes(data.get("products"))


# --- Panier ---

def _cart_from_mutation(data: Dict[str, Any], root: str) -> Cart:
    payload = data.get(root) or {}
    raise_for_user_errors(payload, "userErrors")
    if not payload.get("cart"):
        raise CommerceUserError([f"{root}: aucun panier retourné"])
    return Cart.from_graphql(payload["cart"])


async def create_cart(client: CommerceClient) -> Cart:
    data = await client.request(queries.CART_CREATE)
    return _cart_from_mutation(data, "cartCreate")


async def get_cart(client: CommerceClient, cart_id: str) -> Optional[Cart]:
    data = await client.request(queries.GET_CART, {"cartId": cart_id})
    node = data.get("cart")
    return Cart.from_graphql(node) if node else None


async def add_to_cart(client: CommerceClient, cart_id: str, merchandise_id: str, quantity: int = 1) -> Cart:
    _require_quantity(quantity)
    data = await client.request(
        queries.CART_LINES_ADD,
        {"cartId": cart_id, "lines": [{"merchandiseId": merchandise_id, "quantity": int(quantity)}]},
    )
    return _cart_from_mutation(data, "cartLinesAdd")


async def update_cart_line(client: CommerceClient, cart_id: str, line_id: str, quantity: int) -> Cart:
    _require_quantity(quantity)
    data = await client.request(
        queries.CART_LINES_UPDATE, {"cartId": cart_id, "lines": [{"id": line_id, "quantity": int(quantity)}]}
    )
    return _cart_from_mutation(data, "cartLinesUpdate")


async def remove_from_cart(client: CommerceClient, cart_id: str, line_ids: Sequence[str]) -> Cart:
    data = await client.request(queries.CART_LINES_REMOVE, {"cartId": cart_id, "lineIds": list(line_ids)})
    return _cart_from_mutation(data, "cartLinesRemove")


async def update_cart_discount_codes(client: CommerceClient, cart_id: str, discount_codes: Sequence[str]) -> Cart:
    codes = [c.strip().upper() for c in discount_codes if c and c.strip()]
    data = await client.request(queries.CART_DISCOUNT_CODES_UPDATE, {"cartId": cart_id, "discountCodes": codes})
    return _cart_from_mutation(data, "cartDiscountCodesUpdate")


# --- Clients ---

async def customer_login(client: CommerceClient, email: str, password: str) -> Dict[str, Any]:
    data = await client.request(queries.CUSTOMER_LOGIN, {"input": {"email": email, "password": password}})
    payload = data.get("customerAccessTokenCreate") or {}
    raise_for_user_errors(payload)
    token = payload.get("customerAccessToken")
    if not token:
        raise CommerceUserError(["Impossible de créer le jeton d'accès client"])
    return token


async def customer_create(
    client: CommerceClient,
    email: str,
    password: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Crée le compte puis connecte le client (retourne le jeton d'accès)."""
    variables = {"input": {"email": email, "password": password, "firstName": first_name, "lastName": last_name}}
    data = await client.request(queries.CUSTOMER_CREATE, variables)
    raise_for_user_errors(data.get("customerCreate"))
    return await customer_login(client, email, password)


async def customer_recover(client: CommerceClient, email: str) -> None:
    data = await client.request(queries.CUSTOMER_RECOVER, {"email": email})
    raise_for_user_errors(data.get("customerRecover"))


async def customer_delete(client: CommerceClient, access_token: str) -> str:
    data = await client.request(queries.CUSTOMER_DELETE, {"customerAccessToken": access_token})
    payload = data.get("customerDelete") or {}
    raise_for_user_errors(payload, "userErrors")
    if not payload.get("deletedCustomerId"):
        raise CommerceUserError(["Suppression du compte client impossible"])
    return payload["deletedCustomerId"]


@dataclass
class CustomerUpdateResult:
    access_token: str
    skipped_fields: List[str]


async def customer_update(
    client: CommerceClient,
    access_token: str,
    customer: Dict[str, Any],
    fallbacks: Sequence[OptionalFieldFallback] = CUSTOMER_UPDATE_FALLBACKS,
) -> CustomerUpdateResult:
    """
    Met à jour le profil client.
    - Champs optionnels rejetés (ex: phone) retirés puis mutation rejouée (voir fallback.py)
    - Retourne le nouveau jeton si Shopify en émet un, sinon le jeton courant
    """
    async def _send(fields: Dict[str, Any]) -> Dict[str, Any]:
        data = await client.request(
            queries.CUSTOMER_UPDATE, {"customerAccessToken": access_token, "customer": fields}
        )
        payload = data.get("customerUpdate") or {}
        raise_for_user_errors(payload)
        return payload

    payload, skipped = await call_with_fallbacks(_send, customer, fallbacks)
    new_token = (payload.get("customerAccessToken") or {}).get("accessToken")
    return CustomerUpdateResult(access_token=new_token or access_token, skipped_fields=skipped)


async def get_customer(client: CommerceClient, access_token: str) -> Optional[Dict[str, Any]]:
    data = await client.request(queries.GET_CUSTOMER, {"customerAccessToken": access_token})
    return data.get("customer")


async def get_customer_orders(client: CommerceClient, access_token: str, first: int = 10) -> List[Dict[str, Any]]:
    data = await client.request(queries.GET_CUSTOMER_ORDERS, {"customerAccessToken": access_token, "first": first})
    return _nodes((data.get("customer") or {}).get("orders"))


# --- Adresses ---

async def customer_address_create(client: CommerceClient, access_token: str, address: Dict[str, Any]) -> str:
    data = await client.request(
        queries.CUSTOMER_ADDRESS_CREATE, {"customerAccessToken": access_token, "address": address}
    )
    payload = data.get("customerAddressCreate") or {}
    raise_for_user_errors(payload)
    address_id = (payload.get("customerAddress") or {}).get("id")
    if not address_id:
        raise CommerceUserError(["Création de l'adresse impossible"])
    return address_id


async def customer_address_update(
    client: CommerceClient, access_token: str, address_id: str, address: Dict[str, Any]
) -> str:
    data = await client.request(
        queries.CUSTOMER_ADDRESS_UPDATE,
        {"customerAccessToken": access_token, "id": address_id, "address": address},
    )
    payload = data.get("customerAddressUpdate") or {}
    raise_for_user_errors(payload)
    updated_id = (payload.get("customerAddress") or {}).get("id")
    if not updated_id:
        raise CommerceUserError(["Mise à jour de l'adresse impossible"])
    return updated_id


async def customer_address_delete(client: CommerceClient, access_token: str, address_id: str) -> str:
    data = await client.request(
        queries.CUSTOMER_ADDRESS_DELETE, {"customerAccessToken": access_token, "id": address_id}
    )
    payload = data.get("customerAddressDelete") or {}
    raise_for_user_errors(payload)
    deleted_id = payload.get("deletedCustomerAddressId")
    if not deleted_id:
        raise CommerceUserError(["Suppression de l'adresse impossible"])
    return deleted_id


async def customer_default_address_update(client: CommerceClient, access_token: str, address_id: str) -> str:
    data = await client.request(
        queries.CUSTOMER_DEFAULT_ADDRESS_UPDATE, {"customerAccessToken": access_token, "addressId": address_id}
    )
    payload = data.get("customerDefaultAddressUpdate") or {}
    raise_for_user_errors(payload)
    default_id = (((payload.get("customer") or {}).get("defaultAddress")) or {}).get("id")
    if not default_id:
        raise CommerceUserError(["Mise à jour de l'adresse par défaut impossible"])
    return default_id
