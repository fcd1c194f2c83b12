"""
Module 'checkout' (feature-first): point d'entrée public de l'orchestrateur côté appareil.
"""

from .amounts import ShippingOption, SummaryItem, checkout_total, extract_payment_intent_id, format_amount, to_minor_units
from .bridge_client import BridgeClient, IntentResponse
from .orchestrator import CheckoutOrchestrator
from .processor import CANCELED_CODE, PaymentProcessor, ProcessorError, ProcessorResult
from .state import CheckoutFailed, FailureKind, IllegalTransition, OrderSucceeded, Settled

__all__ = [
    "ShippingOption",
    "SummaryItem",
    "checkout_total",
    "extract_payment_intent_id",
    "format_amount",
    "to_minor_units",
    "BridgeClient",
    "IntentResponse",
    "CheckoutOrchestrator",
    "CANCELED_CODE",
    "PaymentProcessor",
    "ProcessorError",
    "ProcessorResult",
    "CheckoutFailed",
    "FailureKind",
    "IllegalTransition",
    "OrderSucceeded",
    "Settled",
]
