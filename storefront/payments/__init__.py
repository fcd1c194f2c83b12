"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le client Stripe et les cas d'usage PaymentIntent du bridge.
"""

from .stripe_client import (
    require_stripe,
    create_payment_intent,
    retrieve_payment_intent,
    find_or_create_customer,
    create_ephemeral_key,
)
from .service import parse_amount, create_intent, init_payment_sheet, intent_status, require_succeeded

__all__ = [
    # stripe
    "require_stripe",
    "create_payment_intent",
    "retrieve_payment_intent",
    "find_or_create_customer",
    "create_ephemeral_key",
    # services
    "parse_amount",
    "create_intent",
    "init_payment_sheet",
    "intent_status",
    "require_succeeded",
]
