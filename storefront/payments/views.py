import logging

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse

from storefront.utils.body import read_json_object
from storefront.utils.rate_limit import optional_rate_limit
from storefront.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["Payments"])


# module storefront.payments.views
@router.post("/create-intent", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def create_intent(request: Request):
    """
    Crée un PaymentIntent Stripe pour le montant du panier.
    - Entrée JSON: { "amount": <int unités mineures>, "currency": "usd", "customerEmail"?, "metadata"? }
    - Sortie: { "clientSecret": "pi_..._secret_..." }
    - Erreurs: 400 si amount absent/non positif, 500 si Stripe échoue
    """
    body = await read_json_object(request)
    try:
        return JSONResponse(payments_service.create_intent(body))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Erreur create_intent")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to create payment intent")


@router.post("/init-payment-sheet", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def init_payment_sheet(request: Request):
    """
    Comme create-intent, avec client Stripe + clé éphémère pour la feuille de paiement.
    - Sortie: { "clientSecret", "customerId", "ephemeralKey" }
    """
    body = await read_json_object(request)
    try:
        return JSONResponse(payments_service.init_payment_sheet(body))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Erreur init_payment_sheet")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to init payment sheet")


@router.post("/confirm-wallet")
async def confirm_wallet(request: Request):
    """Retourne le statut Stripe d'un PaymentIntent: { "status": "succeeded" | ... }."""
    body = await read_json_object(request)
    try:
        return JSONResponse(payments_service.intent_status(body))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Erreur confirm_wallet")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to confirm payment")
