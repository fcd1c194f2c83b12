"""
Orchestrateur de checkout (côté appareil), machine à états explicite.

- prefetch_intent(): crée le PaymentIntent en avance dès que le panier ou la livraison change;
  une réponse dont la clé (montant, devise, livraison) n'est plus la clé courante est ignorée.
- pay_with_card() / pay_with_wallet(): un seul paiement à la fois (drapeau busy partagé);
  un second clic pendant un paiement est un no-op.
- Ordre garanti par await séquentiels: paiement confirmé -> création de commande -> vidage du panier.
- Commande en échec après paiement: état distinct (ORDER_CREATION) avec la référence de paiement,
  relance bornée avec la même requête (même transactionId), jamais de nouveau paiement.
"""
from typing import Any, Dict, List, Optional
import asyncio
import logging

from storefront import config
from storefront.cart.store import CartStore
from storefront.checkout.amounts import (
    ShippingOption,
    SummaryItem,
    build_wallet_summary,
    checkout_total,
    extract_payment_intent_id,
    format_amount,
    to_minor_units,
)
from storefront.checkout.bridge_client import BridgeClient
from storefront.checkout.processor import CANCELED_CODE, PaymentProcessor, ProcessorError, ProcessorResult
from storefront.checkout.state import (
    CheckoutFailed,
    CheckoutState,
    ConfirmingPayment,
    CreatingOrder,
    FailureKind,
    IllegalTransition,
    Idle,
    IntentKey,
    OrderSucceeded,
    PaymentMethod,
    PrefetchingIntent,
    Ready,
    Settled,
    check_transition,
)
from storefront.commerce.models import Cart
from storefront.errors import (
    BridgeError,
    ConfigurationError,
    PaymentCanceled,
    PaymentDeclined,
    StorefrontError,
    ValidationError,
)
from storefront.orders.models import LineItem, OrderCreationRequest, ShippingLine

logger = logging.getLogger(__name__)

WALLET_SUCCEEDED = "succeeded"


def failure_kind(error: StorefrontError) -> FailureKind:
    if isinstance(error, ConfigurationError):
        return FailureKind.CONFIGURATION
    if isinstance(error, ValidationError):
        return FailureKind.VALIDATION
    if isinstance(error, BridgeError) and 400 <= error.status_code < 500:
        return FailureKind.VALIDATION
    return FailureKind.UPSTREAM


class CheckoutOrchestrator:
    def __init__(
        self,
        bridge: BridgeClient,
        processor: PaymentProcessor,
        cart_store: CartStore,
        *,
        customer_email: Optional[str] = None,
        shipping_address: Optional[Dict[str, Any]] = None,
        use_saved_payment_methods: bool = False,
        merchant_label: str = "Total",
        retry_limit: int = config.ORDER_RETRY_LIMIT,
    ):
        self.bridge = bridge
        self.processor = processor
        self.cart_store = cart_store
        self.customer_email = customer_email
        self.shipping_address = shipping_address
        self.use_saved_payment_methods = use_saved_payment_methods
        self.merchant_label = merchant_label
        self.retry_limit = max(1, retry_limit)

        self.state: CheckoutState = Idle()
        self._cart: Optional[Cart] = None
        self._shipping: Optional[ShippingOption] = None
        self._prefetch_task: Optional[asyncio.Task] = None
        self._busy = False
        self._pending_order: Optional[OrderCreationRequest] = None
        self._order_attempts = 0

    # --- transitions ---

    def _transition(self, target: CheckoutState) -> CheckoutState:
        check_transition(self.state, target)
        logger.info("checkout.transition %s -> %s", type(self.state).__name__, type(target).__name__)
        self.state = target
        return target

    def _settle(self, outcome) -> Settled:
        return self._transition(Settled(outcome))

    @property
    def busy(self) -> bool:
        return self._busy

    # --- prefetch ---

    def intent_key(self, cart: Cart, shipping: Optional[ShippingOption] = None) -> IntentKey:
        return IntentKey(
            amount_minor=to_minor_units(checkout_total(cart, shipping)),
            currency=(cart.currency_code or "usd").lower(),
            shipping_id=shipping.id if shipping else None,
        )

    def prefetch_intent(self, cart: Cart, shipping: Optional[ShippingOption] = None) -> Optional[asyncio.Task]:
        """
        Lance (sans l'attendre) la création du PaymentIntent pour ce panier et cette livraison.
        À appeler depuis la boucle asyncio. Retourne la tâche en cours, ou None si rien à faire
        (paiement en cours, ou intent déjà prêt pour la même clé).
        """
        if self._busy or isinstance(self.state, (ConfirmingPayment, CreatingOrder)):
            logger.info("checkout.prefetch ignored: payment in flight")
            return None
        return self._start_prefetch(cart, shipping)

    def _start_prefetch(self, cart: Cart, shipping: Optional[ShippingOption]) -> Optional[asyncio.Task]:
        if cart.is_empty:
            raise ValidationError("Panier vide: aucun paiement à préparer")

        key = self.intent_key(cart, shipping)
        if isinstance(self.state, Ready) and self.state.key == key:
            return None
        if isinstance(self.state, PrefetchingIntent) and self.state.key == key and self._prefetch_task:
            return self._prefetch_task
        if isinstance(self.state, Settled):
            self.reset()

        self._cart, self._shipping = cart, shipping
        self._transition(PrefetchingIntent(key))
        self._prefetch_task = asyncio.ensure_future(self._run_prefetch(key, cart, shipping))
        return self._prefetch_task

    def _is_current(self, key: IntentKey) -> bool:
        return isinstance(self.state, PrefetchingIntent) and self.state.key == key

    def _intent_metadata(self, cart: Cart, shipping: Optional[ShippingOption]) -> Dict[str, str]:
        metadata = {"cartId": self.cart_store.cart_id or cart.id}
        if shipping:
            metadata["shippingMethod"] = shipping.label
            metadata["shippingAmount"] = format_amount(shipping.amount)
        if cart.discount_codes:
            metadata["discountCode"] = ",".join(d.code for d in cart.discount_codes)
        return metadata

    async def _run_prefetch(self, key: IntentKey, cart: Cart, shipping: Optional[ShippingOption]) -> None:
        try:
            intent = await self.bridge.create_intent(
                key.amount_minor,
                key.currency,
                customer_email=self.customer_email,
                metadata=self._intent_metadata(cart, shipping),
                with_customer=self.use_saved_payment_methods and bool(self.customer_email),
            )
        except StorefrontError as e:
            if not self._is_current(key):
                logger.info("checkout.prefetch stale failure discarded amount=%s", key.amount_minor)
                return
            logger.warning("checkout.prefetch failed amount=%s error=%s", key.amount_minor, e)
            self._settle(CheckoutFailed(failure_kind(e), str(e)))
            return

        if not self._is_current(key):
            logger.info("checkout.prefetch stale response discarded amount=%s", key.amount_minor)
            return
        self._transition(Ready(key, intent.client_secret, intent.customer_id, intent.ephemeral_key))

    async def _await_ready(self) -> CheckoutState:
        if isinstance(self.state, Idle):
            if self._cart is None:
                raise ValidationError("Aucun panier à payer: appeler prefetch_intent d'abord")
            self._start_prefetch(self._cart, self._shipping)
        # Un prefetch plus récent peut remplacer la tâche attendue
        while isinstance(self.state, PrefetchingIntent) and self._prefetch_task is not None:
            await asyncio.shield(self._prefetch_task)
        return self.state

    # --- paiement ---

    async def pay_with_card(self) -> Optional[CheckoutState]:
        return await self._pay(PaymentMethod.CARD)

    async def pay_with_wallet(self, summary: Optional[List[SummaryItem]] = None) -> Optional[CheckoutState]:
        return await self._pay(PaymentMethod.WALLET, summary)

    async def _pay(self, method: PaymentMethod, summary: Optional[List[SummaryItem]] = None):
        if self._busy:
            logger.info("checkout.pay ignored: another payment is in flight method=%s", method.value)
            return None
        self._busy = True
        try:
            ready = await self._await_ready()
            if not isinstance(ready, Ready):
                return ready

            self._transition(ConfirmingPayment(ready.key, ready.client_secret, method))
            result = await self._confirm(ready, method, summary)
            if result.canceled:
                logger.info("checkout.payment canceled by user method=%s", method.value)
                return self._transition(ready)
            if result.error is not None:
                logger.warning("checkout.payment failed code=%s message=%s", result.error.code, result.error.message)
                return self._settle(CheckoutFailed(FailureKind.PAYMENT, result.error.message or "Payment failed"))
            if method is PaymentMethod.WALLET:
                status = await self._wallet_status(ready.client_secret)
                if status and status != WALLET_SUCCEEDED:
                    logger.warning("checkout.wallet not completed status=%s", status)
                    return self._settle(
                        CheckoutFailed(FailureKind.PAYMENT, f"Paiement non confirmé par le processeur (statut: {status})")
                    )

            self._pending_order = self._build_order_request(ready.client_secret)
            self._order_attempts = 0
            return await self._create_order()
        finally:
            self._busy = False

    async def _confirm(self, ready: Ready, method: PaymentMethod, summary) -> ProcessorResult:
        try:
            if method is PaymentMethod.CARD:
                return await self.processor.present_payment_sheet(
                    ready.client_secret, customer_id=ready.customer_id, ephemeral_key=ready.ephemeral_key
                )
            if summary is None:
                summary = build_wallet_summary(self._cart, self._shipping, self.merchant_label)
            return await self.processor.confirm_platform_pay(ready.client_secret, summary)
        # Adaptateurs SDK qui signalent par exception plutôt que par ProcessorResult
        except PaymentCanceled as e:
            return ProcessorResult(error=ProcessorError(code=CANCELED_CODE, message=str(e)))
        except PaymentDeclined as e:
            return ProcessorResult(error=ProcessorError(code=e.code or "Failed", message=str(e) or "Payment failed"))
        except Exception as e:
            logger.exception("checkout.payment processor raised method=%s", method.value)
            return ProcessorResult(error=ProcessorError(code="Failed", message=str(e) or "Payment failed"))

    async def _wallet_status(self, client_secret: str) -> Optional[str]:
        """
        Statut Stripe du PaymentIntent après confirmation wallet.
        None si le bridge ne répond pas: le processeur n'a signalé aucune erreur, la commande est créée.
        """
        payment_intent_id = extract_payment_intent_id(client_secret)
        try:
            return await self.bridge.confirm_wallet(payment_intent_id)
        except StorefrontError as e:
            logger.warning("checkout.wallet status unavailable payment_intent=%s error=%s", payment_intent_id, e)
            return None

    def _build_order_request(self, client_secret: str) -> OrderCreationRequest:
        cart, shipping = self._cart, self._shipping
        shipping_line = None
        if shipping:
            shipping_line = ShippingLine(title=shipping.label, code=shipping.id, price=format_amount(shipping.amount))
        return OrderCreationRequest(
            line_items=[LineItem(variant_id=line.merchandise.id, quantity=line.quantity) for line in cart.lines],
            customer_email=self.customer_email,
            shipping_address=self.shipping_address,
            shipping_line=shipping_line,
            currency=cart.currency_code or "USD",
            transaction_id=extract_payment_intent_id(client_secret),
            total_amount=format_amount(checkout_total(cart, shipping)),
        )

    # --- commande ---

    async def _create_order(self) -> Settled:
        request = self._pending_order
        self._order_attempts += 1
        self._transition(CreatingOrder(request.transaction_id, self._order_attempts))
        try:
            result = await self.bridge.create_order(request)
        except StorefrontError as e:
            logger.critical(
                "checkout.order_creation_failed transaction_id=%s attempt=%s error=%s",
                request.transaction_id, self._order_attempts, e,
            )
            return self._settle(
                CheckoutFailed(
                    FailureKind.ORDER_CREATION,
                    f"Paiement reçu mais la commande n'a pas pu être créée ({e}). "
                    f"Contactez le support avec la référence de paiement {request.transaction_id}.",
                    transaction_id=request.transaction_id,
                )
            )

        try:
            await self.cart_store.clear_cart()
        except Exception:
            # Commande créée: l'échec du stockage local ne doit pas masquer le succès
            logger.exception("checkout.cart_clear_failed order_id=%s", result.order_id)
        logger.info("checkout.order_created order_id=%s order_number=%s", result.order_id, result.order_number)
        self._pending_order = None
        return self._settle(OrderSucceeded(result.order_id, result.order_number))

    @property
    def retries_left(self) -> int:
        return max(self.retry_limit - self._order_attempts, 0)

    async def retry_order_creation(self) -> Optional[CheckoutState]:
        """
        Relance explicite de la création de commande avec la même requête (même transactionId).
        Bornée à retry_limit tentatives au total; au-delà, l'état reste inchangé.
        """
        if self._busy:
            return None
        if not (isinstance(self.state, Settled) and self.state.order_creation_failed):
            raise IllegalTransition(self.state, CreatingOrder("", self._order_attempts + 1))
        if self.retries_left <= 0:
            logger.warning(
                "checkout.order_retry limit reached transaction_id=%s attempts=%s",
                self._pending_order.transaction_id, self._order_attempts,
            )
            return self.state
        self._busy = True
        try:
            return await self._create_order()
        finally:
            self._busy = False

    def reset(self) -> CheckoutState:
        """Retour à Idle; interdit après une commande en échec (paiement déjà encaissé)."""
        if isinstance(self.state, Idle):
            return self.state
        self._transition(Idle())
        self._prefetch_task = None
        self._pending_order = None
        self._order_attempts = 0
        return self.state

    async def check_backend(self) -> bool:
        ok = await self.bridge.health()
        if not ok:
            logger.warning("checkout.backend unavailable, payments disabled")
        return ok
