"""
Interface du processeur de paiement côté appareil (feuille de paiement Stripe, Apple/Google Pay).
L'orchestrateur ne dépend que de ce protocole; le SDK natif est branché par l'application.
"""
from dataclasses import dataclass
from typing import List, Optional, Protocol

from storefront.checkout.amounts import SummaryItem

CANCELED_CODE = "Canceled"


@dataclass(frozen=True)
class ProcessorError:
    code: str
    message: str


@dataclass(frozen=True)
class ProcessorResult:
    error: Optional[ProcessorError] = None

    @property
    def canceled(self) -> bool:
        return self.error is not None and self.error.code == CANCELED_CODE


class PaymentProcessor(Protocol):
    async def present_payment_sheet(
        self,
        client_secret: str,
        customer_id: Optional[str] = None,
        ephemeral_key: Optional[str] = None,
    ) -> ProcessorResult: ...

    async def confirm_platform_pay(self, client_secret: str, summary: List[SummaryItem]) -> ProcessorResult: ...
