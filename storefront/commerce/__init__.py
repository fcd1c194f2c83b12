"""
Module 'commerce' (feature-first): point d'entrée public.
Réunit le client GraphQL Storefront, les modèles panier et les opérations métier.
"""

from .client import CommerceClient, CommerceConfig, VersionAttempt
from .models import Cart, CartLine, Money
from .fallback import OptionalFieldFallback, CUSTOMER_UPDATE_FALLBACKS, call_with_fallbacks
from . import operations

__all__ = [
    # client
    "CommerceClient",
    "CommerceConfig",
    "VersionAttempt",
    # models
    "Cart",
    "CartLine",
    "Money",
    # fallback
    "OptionalFieldFallback",
    "CUSTOMER_UPDATE_FALLBACKS",
    "call_with_fallbacks",
    # operations
    "operations",
]
