"""
Modèles d'échange avec le bridge pour la création de commande.
Le client construit OrderCreationRequest (sérialisé en camelCase), le bridge répond OrderResult.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class LineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    variant_id: str = Field(alias="variantId")
    quantity: int


class ShippingLine(BaseModel):
    title: str
    code: str
    price: str


class OrderCreationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    line_items: List[LineItem] = Field(alias="lineItems")
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")
    shipping_address: Optional[Dict[str, Any]] = Field(default=None, alias="shippingAddress")
    shipping_line: Optional[ShippingLine] = Field(default=None, alias="shippingLine")
    currency: str
    transaction_id: str = Field(alias="transactionId")
    total_amount: str = Field(alias="totalAmount")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class OrderResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: Union[int, str] = Field(alias="orderId")
    order_number: Optional[Union[int, str]] = Field(default=None, alias="orderNumber")
