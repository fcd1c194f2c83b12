"""
CartStore: seule source de vérité pour "quel panier est actif" (l'identifiant, pas le contenu).
- load(): lecture locale uniquement, aucune dépendance réseau
- initialize_cart(): crée un panier côté Shopify puis persiste son id (aucun retry intégré)
- clear_cart(): oublie l'id local; le panier distant n'est pas supprimé
"""
from typing import Optional
import logging

from storefront import config
from storefront.cart.storage import JsonFileStorage, KeyValueStorage
from storefront.commerce import operations
from storefront.commerce.client import CommerceClient

logger = logging.getLogger(__name__)

CART_ID_KEY = "storefront:cart_id"


class CartStore:
    def __init__(self, client: CommerceClient, storage: KeyValueStorage):
        self.client = client
        self.storage = storage
        self.cart_id: Optional[str] = None

    @classmethod
    def from_env(cls, client: CommerceClient) -> "CartStore":
        return cls(client, JsonFileStorage(config.CART_STORAGE_PATH))

    async def load(self) -> Optional[str]:
        self.cart_id = await self.storage.get_item(CART_ID_KEY)
        return self.cart_id

    async def initialize_cart(self) -> str:
        cart = await operations.create_cart(self.client)
        await self.storage.set_item(CART_ID_KEY, cart.id)
        self.cart_id = cart.id
        logger.info("cart.initialized cart_id=%s", cart.id)
        return cart.id

    async def clear_cart(self) -> None:
        await self.storage.remove_item(CART_ID_KEY)
        logger.info("cart.cleared cart_id=%s", self.cart_id)
        self.cart_id = None
