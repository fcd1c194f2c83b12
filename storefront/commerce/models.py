"""
Modèles Pydantic des objets Storefront utilisés par le checkout (Money, Cart, CartLine).
- Les montants restent des Decimal (jamais de float persisté).
- Cart.from_graphql aplatit les connexions `lines.edges[].node`.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Money(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal
    currency_code: str = Field(alias="currencyCode")


class ProductRef(BaseModel):
    id: str
    title: Optional[str] = None
    handle: Optional[str] = None


class Variant(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    title: Optional[str] = None
    available_for_sale: Optional[bool] = Field(default=None, alias="availableForSale")
    price: Optional[Money] = None
    product: Optional[ProductRef] = None


class CartLineCost(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_amount: Optional[Money] = Field(default=None, alias="totalAmount")
    amount_per_quantity: Optional[Money] = Field(default=None, alias="amountPerQuantity")


class CartLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    quantity: int = Field(ge=1)
    cost: Optional[CartLineCost] = None
    merchandise: Variant


class CartCost(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subtotal: Money = Field(alias="subtotalAmount")
    total_tax: Optional[Money] = Field(default=None, alias="totalTaxAmount")
    total: Money = Field(alias="totalAmount")


class DiscountCode(BaseModel):
    code: str
    applicable: bool = True


class Cart(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    checkout_url: Optional[str] = Field(default=None, alias="checkoutUrl")
    total_quantity: int = Field(default=0, alias="totalQuantity")
    cost: CartCost
    lines: List[CartLine] = Field(default_factory=list)
    discount_codes: List[DiscountCode] = Field(default_factory=list, alias="discountCodes")

    @classmethod
    def from_graphql(cls, node: Dict[str, Any]) -> "Cart":
        data = dict(node)
        edges = (node.get("lines") or {}).get("edges") or []
        data["lines"] = [edge["node"] for edge in edges]
        return cls.model_validate(data)

    @property
    def currency_code(self) -> str:
        return self.cost.total.currency_code

    @property
    def is_empty(self) -> bool:
        return not self.lines
