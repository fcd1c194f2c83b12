import logging

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse

from storefront.utils.body import read_json_object
from storefront.utils.rate_limit import optional_rate_limit
from storefront.orders import service as orders_service
from storefront.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Orders"])


# module storefront.orders.views
@router.post("/shopify/create-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_order(request: Request):
    """
    Crée la commande Shopify après un paiement confirmé côté client.
    - Entrée JSON: { lineItems: [{variantId, quantity}], customerEmail?, shippingAddress?, shippingLine?,
      currency?, transactionId?, totalAmount? }
    - Sortie: { orderId, orderNumber }
    - Erreurs: 400 si aucune ligne valide ou refus Shopify ({error: errors}), 500 sinon
    """
    body = await read_json_object(request)
    try:
        return JSONResponse(await orders_service.create_order(body))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Erreur create_order")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to create order")


@router.post("/checkout/confirm", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def confirm_checkout(request: Request):
    """
    Variante vérifiée côté serveur: le PaymentIntent doit être "succeeded" avant la création de commande.
    - Entrée JSON: { paymentIntentId, lineItems, customerEmail?, shippingAddress?, currency?, totalAmount? }
    - Erreurs: 400 "Payment not completed" si le paiement n'est pas encaissé
    """
    body = await read_json_object(request)
    try:
        payment_intent_id = payments_service.require_succeeded(body)
        return JSONResponse(await orders_service.create_order(body, transaction_id=payment_intent_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Erreur confirm_checkout")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to confirm checkout")


@router.get("/customers/{customer_id}/addresses")
async def customer_addresses(customer_id: str):
    try:
        return JSONResponse(await orders_service.fetch_addresses(customer_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Erreur customer_addresses")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch addresses")
