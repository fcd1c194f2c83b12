"""
Adaptateur Stripe: centralise les appels et la configuration Stripe (PaymentIntent, Customer, EphemeralKey).
"""
from typing import Any, Dict, Optional

import stripe
from fastapi import HTTPException

from storefront import config


# module storefront.payments.stripe_client
def require_stripe() -> stripe:
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key (STRIPE_SECRET_KEY) et stripe.api_version (STRIPE_API_VERSION).
    - Clé absente: HTTPException(500) explicite au lieu de l'erreur SDK "No API key provided".
    """
    if not config.STRIPE_SECRET_KEY:
        raise HTTPException(status_code=500, detail="STRIPE_SECRET_KEY manquant")
    stripe.api_key = config.STRIPE_SECRET_KEY
    stripe.api_version = config.STRIPE_API_VERSION
    return stripe


def create_payment_intent(
    *,
    amount: int,
    currency: str,
    customer_email: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    customer_id: Optional[str] = None,
) -> Any:
    """
    Crée un PaymentIntent (montant en unités mineures, moyens de paiement automatiques).
    Retour: objet Stripe (accès par clé: intent["client_secret"]).
    """
    require_stripe()
    params: Dict[str, Any] = {
        "amount": amount,
        "currency": currency,
        "automatic_payment_methods": {"enabled": True},
    }
    if customer_email:
        params["receipt_email"] = customer_email
    if metadata:
        params["metadata"] = metadata
    if customer_id:
        params["customer"] = customer_id
    return stripe.PaymentIntent.create(**params)


def retrieve_payment_intent(payment_intent_id: str) -> Any:
    require_stripe()
    return stripe.PaymentIntent.retrieve(payment_intent_id)


def find_or_create_customer(email: str) -> str:
    """Retourne l'id du client Stripe portant cet email, en le créant au besoin."""
    require_stripe()
    existing = stripe.Customer.list(email=email, limit=1)["data"]
    if existing:
        return existing[0]["id"]
    return stripe.Customer.create(email=email)["id"]


def create_ephemeral_key(customer_id: str) -> str:
    require_stripe()
    key = stripe.EphemeralKey.create(customer=customer_id, stripe_version=config.STRIPE_API_VERSION)
    return key["secret"]
