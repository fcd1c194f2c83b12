# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale (client storefront + bridge de paiement).

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Shopify storefront/admin, Stripe, backend)
- Les secrets serveur (STRIPE_SECRET_KEY, SHOPIFY_ADMIN_TOKEN) ne sont lus que par le bridge
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _clean_domain(v: str) -> str:
    """Retire le schéma et le slash final d'un domaine Shopify (ex: https://shop.myshopify.com/)."""
    v = _clean_env(v)
    for prefix in ("https://", "http://"):
        if v.startswith(prefix):
            v = v[len(prefix):]
    return v.rstrip("/")

def _split_list(v: str) -> list:
    return [x.strip() for x in (v or "").split(",") if x.strip()]

# Shopify Storefront (côté client): domaine + token public
# - Accepte aussi les noms EXPO_PUBLIC_* hérités de l'app mobile
SHOPIFY_DOMAIN = _clean_domain(os.getenv("SHOPIFY_DOMAIN") or os.getenv("EXPO_PUBLIC_SHOPIFY_DOMAIN") or "")
SHOPIFY_STOREFRONT_ACCESS_TOKEN = _clean_env(
    os.getenv("SHOPIFY_STOREFRONT_ACCESS_TOKEN") or os.getenv("EXPO_PUBLIC_SHOPIFY_STOREFRONT_ACCESS_TOKEN") or ""
)

# Versions de l'API Storefront, de la plus récente connue jusqu'au repli "unstable"
DEFAULT_API_VERSIONS = ["2025-01", "2024-10", "2024-07", "2024-04", "2024-01", "unstable"]
SHOPIFY_API_VERSIONS = _split_list(os.getenv("SHOPIFY_API_VERSIONS", "")) or list(DEFAULT_API_VERSIONS)

# Shopify Admin (côté serveur uniquement)
SHOPIFY_ADMIN_TOKEN = _clean_env(os.getenv("SHOPIFY_ADMIN_TOKEN") or "")
SHOPIFY_ADMIN_API_VERSION = _clean_env(os.getenv("SHOPIFY_ADMIN_API_VERSION") or "2024-10")

# Stripe: clé publique (client) et secrète (serveur)
STRIPE_PUBLISHABLE_KEY = _clean_env(
    os.getenv("STRIPE_PUBLISHABLE_KEY") or os.getenv("EXPO_PUBLIC_STRIPE_PUBLISHABLE_KEY") or ""
)
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_API_VERSION = _clean_env(os.getenv("STRIPE_API_VERSION") or "2024-06-20")

# URL du bridge de paiement (côté client)
BACKEND_URL = _clean_env(os.getenv("BACKEND_URL") or os.getenv("EXPO_PUBLIC_BACKEND_URL") or "").rstrip("/")

# Stockage local de l'identifiant de panier
CART_STORAGE_PATH = Path(
    _clean_env(os.getenv("CART_STORAGE_PATH") or "") or (Path.home() / ".storefront" / "storage.json")
).expanduser()

# Réseau / checkout
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
ORDER_RETRY_LIMIT = int(os.getenv("ORDER_RETRY_LIMIT", "3"))

# CORS (le bridge est appelé depuis l'app mobile/web)
CORS_ORIGINS = _split_list(os.getenv("CORS_ORIGINS", "*"))
