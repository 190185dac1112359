"""
Payloads d'entrée du checkout (panier, client) validés à la frontière HTTP.
Les champs optionnels ont des valeurs par défaut explicites: aucun None ne doit
atteindre l'arithmétique monétaire ni le ledger.
"""
import math
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

# module dropship.checkout.models
class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Union[str, int] = ""
    title: str = ""
    # StrictInt d'abord: un entier JSON reste int pour l'heuristique "déjà en unités mineures"
    price: Union[StrictInt, float]
    supplier_cost: Union[StrictInt, float] = Field(default=0, alias="supplierCost")
    quantity: int = Field(default=1, ge=1)
    supplier_sku: str = ""

    @field_validator("supplier_cost", "quantity", mode="before")
    @classmethod
    def _null_to_default(cls, v: Any, info) -> Any:
        if v is None:
            return 0 if info.field_name == "supplier_cost" else 1
        return v

    @field_validator("price", "supplier_cost")
    @classmethod
    def _non_negative_amount(cls, v: Union[int, float]) -> Union[int, float]:
        # les montants négatifs fausseraient le total et la commission avant tout appel passerelle
        if not math.isfinite(v) or v < 0:
            raise ValueError("must be a non-negative amount")
        return v

    @field_validator("title", "supplier_sku", mode="before")
    @classmethod
    def _null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Customer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    state: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _never_null(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()


class CheckoutRequest(BaseModel):
    """
    Corps commun des endpoints create-<gateway>-order.
    - currency: devise des prix du panier (NGN par défaut pour Paystack, USD pour OPay/Stripe).
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    cart_items: List[CartItem] = Field(default_factory=list, alias="cartItems")
    customer: Customer = Field(default_factory=Customer)
    currency: Optional[str] = None

    @field_validator("customer", mode="before")
    @classmethod
    def _customer_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("cart_items", mode="before")
    @classmethod
    def _items_default(cls, v: Any) -> Any:
        return [] if v is None else v


class PlaceOrderRequest(CheckoutRequest):
    payment_intent_id: str = Field(default="", alias="paymentIntentId")
