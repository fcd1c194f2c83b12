"""
Client HTTP du bridge de paiement (côté appareil).
Toute réponse non-2xx ou erreur de transport devient BridgeError portant le champ "error" du serveur.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

import httpx
from pydantic import ValidationError as ModelValidationError

from storefront import config
from storefront.errors import BridgeError, ConfigurationError
from storefront.orders.models import OrderCreationRequest, OrderResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentResponse:
    client_secret: str
    customer_id: Optional[str] = None
    ephemeral_key: Optional[str] = None


class BridgeClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (config.BACKEND_URL if base_url is None else base_url).rstrip("/")
        self.timeout = config.HTTP_TIMEOUT_SECONDS if timeout is None else timeout
        self._http = http_client
        self._owns_http = http_client is None

    @classmethod
    def from_env(cls) -> "BridgeClient":
        return cls(config.BACKEND_URL)

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
        return self._http

    async def _call(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.base_url:
            raise ConfigurationError("URL du bridge absente: définir BACKEND_URL.")
        try:
            resp = await self._client().request(method, f"{self.base_url}{path}", json=json)
        except httpx.HTTPError as e:
            raise BridgeError(0, f"Bridge injoignable ({path}): {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not resp.is_success:
            error = data.get("error") if isinstance(data, dict) else None
            message = error if isinstance(error, str) else (str(error) if error else f"HTTP {resp.status_code}")
            raise BridgeError(resp.status_code, message)
        return data if isinstance(data, dict) else {}

    async def create_intent(
        self,
        amount_minor: int,
        currency: str,
        customer_email: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        with_customer: bool = False,
    ) -> IntentResponse:
        body: Dict[str, Any] = {"amount": amount_minor, "currency": currency}
        if customer_email:
            body["customerEmail"] = customer_email
        if metadata:
            body["metadata"] = metadata
        path = "/payments/init-payment-sheet" if with_customer else "/payments/create-intent"
        data = await self._call("POST", path, json=body)
        if not data.get("clientSecret"):
            raise BridgeError(502, "Réponse du bridge sans clientSecret")
        return IntentResponse(data["clientSecret"], data.get("customerId"), data.get("ephemeralKey"))

    async def create_order(self, request: OrderCreationRequest) -> OrderResult:
        data = await self._call("POST", "/shopify/create-order", json=request.to_payload())
        try:
            return OrderResult.model_validate(data)
        except ModelValidationError as e:
            raise BridgeError(502, f"Réponse de commande invalide: {e}") from e

    async def confirm_wallet(self, payment_intent_id: str) -> str:
        data = await self._call("POST", "/payments/confirm-wallet", json={"paymentIntentId": payment_intent_id})
        return str(data.get("status") or "")

    async def health(self) -> bool:
        try:
            data = await self._call("GET", "/health")
        except ConfigurationError as e:
            logger.warning("bridge.health not configured error=%s", e)
            return False
        except BridgeError as e:
            logger.warning("bridge.health unreachable status=%s error=%s", e.status_code, e)
            return False
        return bool(data.get("ok"))
