"""
Calculs de montants du checkout côté client.
- checkout_total: sous-total + taxes + livraison - remise appliquée par Shopify au panier
- to_minor_units: seul point de conversion en unités mineures (arrondi demi vers le haut)
- extract_payment_intent_id: "pi_X_secret_Y" -> "pi_X"
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from storefront.commerce.models import Cart

CENTS = Decimal("0.01")
SECRET_SEPARATOR = "_secret_"


@dataclass(frozen=True)
class ShippingOption:
    id: str
    label: str
    amount: Decimal


@dataclass(frozen=True)
class SummaryItem:
    """Ligne du récapitulatif présenté par le wallet (Apple Pay / Google Pay)."""
    label: str
    amount: str


def to_minor_units(total: Decimal) -> int:
    return int((Decimal(total) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_amount(total: Decimal) -> str:
    return str(Decimal(total).quantize(CENTS, rounding=ROUND_HALF_UP))


def extract_payment_intent_id(client_secret: str) -> str:
    return client_secret.split(SECRET_SEPARATOR, 1)[0]


def _tax(cart: Cart) -> Decimal:
    return cart.cost.total_tax.amount if cart.cost.total_tax else Decimal(0)


def discount_amount(cart: Cart) -> Decimal:
    """Remise déjà déduite par Shopify: (sous-total + taxes) - total du panier, jamais négative."""
    return max(cart.cost.subtotal.amount + _tax(cart) - cart.cost.total.amount, Decimal(0))


def checkout_total(cart: Cart, shipping: Optional[ShippingOption] = None) -> Decimal:
    shipping_amount = shipping.amount if shipping else Decimal(0)
    before_discount = cart.cost.subtotal.amount + _tax(cart) + shipping_amount
    discount = min(discount_amount(cart), before_discount)
    return max(before_discount - discount, Decimal(0))


def build_wallet_summary(
    cart: Cart, shipping: Optional[ShippingOption] = None, merchant_label: str = "Total"
) -> List[SummaryItem]:
    """Lignes du panier, taxes, livraison, remise, puis la ligne de total (dernière)."""
    items = [
        SummaryItem(
            label=line.merchandise.title or "Item",
            amount=format_amount(line.cost.total_amount.amount if line.cost and line.cost.total_amount else 0),
        )
        for line in cart.lines
    ]
    if cart.cost.total_tax:
        items.append(SummaryItem("Tax", format_amount(cart.cost.total_tax.amount)))
    if shipping:
        items.append(SummaryItem(f"{shipping.label} Shipping", format_amount(shipping.amount)))
    discount = discount_amount(cart)
    if discount > 0:
        items.append(SummaryItem("Discount", format_amount(-discount)))
    items.append(SummaryItem(merchant_label, format_amount(checkout_total(cart, shipping))))
    return items
