"""
Client GraphQL Storefront Shopify, tolérant aux écarts de version d'API.

- Une requête est rejouée sur chaque version connue (de la plus récente à "unstable")
  jusqu'à obtenir: HTTP 2xx, aucune entrée `errors`, un `data` non nul.
- La première version valide gagne, les suivantes ne sont pas essayées.
- Si toutes échouent: UpstreamUnavailable avec la dernière cause et la piste la plus probable
  (API Storefront non activée sur la boutique).
- La configuration est vérifiée avant tout appel réseau (ConfigurationError).
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import logging

import httpx

from storefront import config
from storefront.errors import ConfigurationError, UpstreamUnavailable

logger = logging.getLogger(__name__)

STOREFRONT_TOKEN_HEADER = "X-Shopify-Storefront-Access-Token"

# Marqueurs de valeurs d'exemple (.env.example non modifié)
DOMAIN_PLACEHOLDERS = ("YOUR_", "DOMAIN")
TOKEN_PLACEHOLDERS = ("YOUR_", "TOKEN")


@dataclass(frozen=True)
class CommerceConfig:
    domain: str
    storefront_token: str
    api_versions: Tuple[str, ...] = tuple(config.DEFAULT_API_VERSIONS)
    timeout: float = 15.0

    @classmethod
    def from_env(cls) -> "CommerceConfig":
        return cls(
            domain=config.SHOPIFY_DOMAIN,
            storefront_token=config.SHOPIFY_STOREFRONT_ACCESS_TOKEN,
            api_versions=tuple(config.SHOPIFY_API_VERSIONS),
            timeout=config.HTTP_TIMEOUT_SECONDS,
        )

    def check(self) -> None:
        """Échoue tôt et lisiblement si les identifiants sont absents ou encore des exemples."""
        if not self.domain or not self.storefront_token:
            raise ConfigurationError(
                "Identifiants Shopify non configurés: définir SHOPIFY_DOMAIN et "
                "SHOPIFY_STOREFRONT_ACCESS_TOKEN dans l'environnement."
            )
        if any(p in self.domain for p in DOMAIN_PLACEHOLDERS) or any(
            p in self.storefront_token for p in TOKEN_PLACEHOLDERS
        ):
            raise ConfigurationError(
                "Identifiants Shopify encore en valeur d'exemple: renseigner le domaine "
                "*.myshopify.com et le vrai token Storefront API."
            )
        if not self.api_versions:
            raise ConfigurationError("Aucune version d'API Shopify configurée (SHOPIFY_API_VERSIONS).")


@dataclass
class VersionAttempt:
    """Résultat d'un essai sur une version: soit data, soit error (jamais les deux)."""
    version: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


class CommerceClient:
    """
    Client unique par process, passé par référence aux appelants.
    - http_client: httpx.AsyncClient injectable (tests: httpx.MockTransport)
    """

    def __init__(self, commerce_config: CommerceConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = commerce_config
        self._http = http_client
        self._owns_http = http_client is None

    async def __aenter__(self) -> "CommerceClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.config.timeout)
        return self._http

    def endpoint(self, version: str) -> str:
        return f"https://{self.config.domain}/api/{version}/graphql.json"

    async def request(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Exécute une opération GraphQL et retourne `data`.
        Lève ConfigurationError (avant réseau) ou UpstreamUnavailable (toutes versions en échec).
        """
        self.config.check()
        payload = {"query": query, "variables": variables or {}}

        last_error: Optional[str] = None
        for version in self.config.api_versions:
            attempt = await self._attempt(version, payload)
            if attempt.ok:
                logger.debug("commerce.request ok version=%s", version)
                return attempt.data
            last_error = attempt.error
            logger.warning("commerce.request failed version=%s error=%s", version, last_error)

        raise UpstreamUnavailable(
            f"Toutes les versions de l'API Shopify ont échoué. Dernière erreur: {last_error or 'inconnue'}. "
            "L'API Storefront n'est probablement pas activée sur la boutique: l'activer dans l'admin Shopify.",
            last_error=last_error,
        )

    async def _attempt(self, version: str, payload: Dict[str, Any]) -> VersionAttempt:
        headers = {
            "Content-Type": "application/json",
            STOREFRONT_TOKEN_HEADER: self.config.storefront_token,
        }
        try:
            resp = await self._client().post(self.endpoint(version), json=payload, headers=headers)
        except httpx.HTTPError as e:
            return VersionAttempt(version, error=f"API {version} injoignable: {e}")

        if not resp.is_success:
            return VersionAttempt(
                version, error=f"API {version} failed ({resp.status_code}): {resp.reason_phrase}. {resp.text}"
            )

        try:
            body = resp.json()
        except ValueError:
            return VersionAttempt(version, error=f"API {version}: réponse non JSON")

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            messages = ", ".join(str(e.get("message") if isinstance(e, dict) else e) for e in errors)
            return VersionAttempt(version, error=f"GraphQL errors: {messages}")

        data = body.get("data") if isinstance(body, dict) else None
        if not data:
            return VersionAttempt(version, error="No data returned from API")

        return VersionAttempt(version, data=data)
