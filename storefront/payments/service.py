"""
Cas d'usage 'payments': valide les montants puis orchestre les appels stripe_client.
"""
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException

from . import stripe_client
from storefront.utils.payments import round_half_up, safe_number

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "usd"


def parse_amount(value: Any) -> int:
    """
    Valide un montant déjà exprimé en unités mineures et le ramène à un entier.
    - Non numérique, infini, nul ou négatif: HTTPException(400) avant tout appel Stripe.
    """
    amount = safe_number(value)
    if amount is None or amount <= 0:
        raise HTTPException(status_code=400, detail="amount must be a positive number")
    minor = round_half_up(amount)
    if minor < 1:
        raise HTTPException(status_code=400, detail="amount must be a positive number")
    return minor


def _intent_params(body: Dict[str, Any]) -> Dict[str, Any]:
    metadata = body.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise HTTPException(status_code=400, detail="metadata must be an object")
    return {
        "amount": parse_amount(body.get("amount")),
        "currency": str(body.get("currency") or DEFAULT_CURRENCY).lower(),
        "customer_email": body.get("customerEmail") or None,
        # Stripe n'accepte que des valeurs de métadonnées chaînes
        "metadata": {str(k): str(v) for k, v in metadata.items() if v is not None} if metadata else None,
    }


def create_intent(body: Dict[str, Any]) -> Dict[str, Any]:
    params = _intent_params(body)
    intent = stripe_client.create_payment_intent(**params)
    logger.info("payments.create_intent amount=%s currency=%s", params["amount"], params["currency"])
    return {"clientSecret": intent["client_secret"]}


def init_payment_sheet(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Variante de create_intent rattachée à un client Stripe (moyens de paiement enregistrés).
    - Sans customerEmail: identique à create_intent (customerId/ephemeralKey à None)
    """
    params = _intent_params(body)
    email: Optional[str] = params["customer_email"]
    if not email:
        return {**create_intent(body), "customerId": None, "ephemeralKey": None}

    customer_id = stripe_client.find_or_create_customer(email)
    ephemeral_key = stripe_client.create_ephemeral_key(customer_id)
    intent = stripe_client.create_payment_intent(**params, customer_id=customer_id)
    logger.info(
        "payments.init_payment_sheet amount=%s currency=%s customer_id=%s",
        params["amount"], params["currency"], customer_id,
    )
    return {"clientSecret": intent["client_secret"], "customerId": customer_id, "ephemeralKey": ephemeral_key}


def _require_intent_id(body: Dict[str, Any]) -> str:
    payment_intent_id = str(body.get("paymentIntentId") or "").strip()
    if not payment_intent_id:
        raise HTTPException(status_code=400, detail="paymentIntentId is required")
    return payment_intent_id


def intent_status(body: Dict[str, Any]) -> Dict[str, Any]:
    intent = stripe_client.retrieve_payment_intent(_require_intent_id(body))
    return {"status": intent["status"]}


def require_succeeded(body: Dict[str, Any]) -> str:
    """
    Vérifie côté serveur qu'un PaymentIntent est bien encaissé avant de créer une commande.
    Retour: l'id du PaymentIntent (utilisé comme transactionId).
    """
    payment_intent_id = _require_intent_id(body)
    intent = stripe_client.retrieve_payment_intent(payment_intent_id)
    if intent["status"] != "succeeded":
        logger.warning("payments.not_completed payment_intent=%s status=%s", payment_intent_id, intent["status"])
        raise HTTPException(status_code=400, detail="Payment not completed")
    return payment_intent_id
