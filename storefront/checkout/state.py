"""
États du checkout sous forme d'union étiquetée (dataclasses figées) + table des transitions autorisées.

    Idle -> PrefetchingIntent -> Ready -> ConfirmingPayment -> CreatingOrder -> Settled

Settled porte soit OrderSucceeded, soit CheckoutFailed(kind). Toute transition hors table lève
IllegalTransition: confirmer un paiement déjà en cours n'est pas représentable.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Type, Union

from storefront.errors import (
    ConfigurationError,
    OrderCreationFailed,
    PaymentDeclined,
    StorefrontError,
    UpstreamUnavailable,
    ValidationError,
)


class PaymentMethod(str, Enum):
    CARD = "card"
    WALLET = "wallet"


class FailureKind(str, Enum):
    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"
    VALIDATION = "validation"
    PAYMENT = "payment"
    ORDER_CREATION = "order_creation"


@dataclass(frozen=True)
class IntentKey:
    """Ce qui a déclenché un prefetch: une réponse pour une autre clé est périmée."""
    amount_minor: int
    currency: str
    shipping_id: Optional[str] = None


@dataclass(frozen=True)
class OrderSucceeded:
    order_id: Union[int, str]
    order_number: Optional[Union[int, str]]


@dataclass(frozen=True)
class CheckoutFailed:
    kind: FailureKind
    message: str
    transaction_id: Optional[str] = None


Outcome = Union[OrderSucceeded, CheckoutFailed]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class PrefetchingIntent:
    key: IntentKey


@dataclass(frozen=True)
class Ready:
    key: IntentKey
    client_secret: str
    customer_id: Optional[str] = None
    ephemeral_key: Optional[str] = None


@dataclass(frozen=True)
class ConfirmingPayment:
    key: IntentKey
    client_secret: str
    method: PaymentMethod


@dataclass(frozen=True)
class CreatingOrder:
    transaction_id: str
    attempt: int


@dataclass(frozen=True)
class Settled:
    outcome: Outcome

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, OrderSucceeded)

    @property
    def order_creation_failed(self) -> bool:
        return isinstance(self.outcome, CheckoutFailed) and self.outcome.kind is FailureKind.ORDER_CREATION

    def raise_for_failure(self) -> None:
        """Relève l'erreur de la taxonomie correspondant à un échec (no-op en cas de succès)."""
        outcome = self.outcome
        if not isinstance(outcome, CheckoutFailed):
            return
        if outcome.kind is FailureKind.ORDER_CREATION:
            raise OrderCreationFailed(outcome.transaction_id or "", outcome.message)
        if outcome.kind is FailureKind.PAYMENT:
            raise PaymentDeclined(outcome.message)
        if outcome.kind is FailureKind.CONFIGURATION:
            raise ConfigurationError(outcome.message)
        if outcome.kind is FailureKind.VALIDATION:
            raise ValidationError(outcome.message)
        raise UpstreamUnavailable(outcome.message)


CheckoutState = Union[Idle, PrefetchingIntent, Ready, ConfirmingPayment, CreatingOrder, Settled]

ALLOWED_TRANSITIONS: Dict[Type, Tuple[Type, ...]] = {
    Idle: (PrefetchingIntent,),
    PrefetchingIntent: (PrefetchingIntent, Ready, Settled, Idle),
    Ready: (PrefetchingIntent, ConfirmingPayment, Idle),
    ConfirmingPayment: (Ready, CreatingOrder, Settled),
    CreatingOrder: (Settled,),
    Settled: (Idle, CreatingOrder),
}


class IllegalTransition(StorefrontError):
    def __init__(self, current: CheckoutState, target: CheckoutState):
        super().__init__(f"Transition interdite: {type(current).__name__} -> {type(target).__name__}")
        self.current = current
        self.target = target


def check_transition(current: CheckoutState, target: CheckoutState) -> None:
    if type(target) not in ALLOWED_TRANSITIONS[type(current)]:
        raise IllegalTransition(current, target)
    # Seule une commande en échec peut être relancée depuis Settled
    if isinstance(current, Settled) and isinstance(target, CreatingOrder) and not current.order_creation_failed:
        raise IllegalTransition(current, target)
    # Paiement encaissé sans commande: pas de retour à Idle (pas de nouveau paiement pour ce panier)
    if isinstance(current, Settled) and isinstance(target, Idle) and current.order_creation_failed:
        raise IllegalTransition(current, target)
