# module dropship.orders.models
"""Modèle des commandes du ledger.
- OrderStatus: pending -> paid | failed, états terminaux, jamais de retour à pending.
- DraftOrder: ce que l'orchestration checkout fournit pour créer un brouillon.
- Order: ligne persistée, reconstruite depuis la table 'orders' (to_row / from_row).
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
import json
import secrets
import time

from pydantic import BaseModel, Field

from dropship.checkout.models import Customer
from dropship.pricing.money import to_major_units


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


def _items_from_row(raw: Any) -> List[Dict[str, Any]]:
    # Colonne jsonb (liste) ou texte JSON selon la migration appliquée
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    return raw if isinstance(raw, list) else []


def new_local_order_id() -> str:
    """Identifiant local dérivé du temps ("o" + epoch ms), suffixe aléatoire contre les collisions."""
    return f"o{int(time.time() * 1000)}{secrets.token_hex(2)}"


class DraftOrder(BaseModel):
    payment_reference: str
    gateway: str
    customer: Customer = Field(default_factory=Customer)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    total_minor_usd: int = 0
    total_minor_ngn: int = 0
    supplier_share_minor: int = 0
    profit_minor: int = 0
    gateway_response: Optional[Any] = None

    def to_row(self, local_order_id: str) -> Dict[str, Any]:
        return {
            "local_order_id": local_order_id,
            "payment_reference": self.payment_reference,
            "gateway": self.gateway,
            "status": OrderStatus.PENDING.value,
            "customer_name": self.customer.name,
            "customer_email": self.customer.email,
            "customer_phone": self.customer.phone,
            "customer_address": self.customer.address,
            "customer_state": self.customer.state,
            "items_json": self.items,
            "total_minor_usd": self.total_minor_usd,
            "total_minor_ngn": self.total_minor_ngn,
            "supplier_share_minor": self.supplier_share_minor,
            "profit_minor": self.profit_minor,
            "gateway_response": self.gateway_response,
        }


class Order(DraftOrder):
    local_order_id: str
    status: OrderStatus = OrderStatus.PENDING
    supplier_response: Optional[Any] = None
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Order":
        return cls(
            local_order_id=row.get("local_order_id") or "",
            payment_reference=row.get("payment_reference") or "",
            gateway=row.get("gateway") or "",
            status=row.get("status") or OrderStatus.PENDING.value,
            customer=Customer(
                name=row.get("customer_name"),
                email=row.get("customer_email"),
                phone=row.get("customer_phone"),
                address=row.get("customer_address"),
                state=row.get("customer_state"),
            ),
            items=_items_from_row(row.get("items_json")),
            total_minor_usd=row.get("total_minor_usd") or 0,
            total_minor_ngn=row.get("total_minor_ngn") or 0,
            supplier_share_minor=row.get("supplier_share_minor") or 0,
            profit_minor=row.get("profit_minor") or 0,
            gateway_response=row.get("gateway_response"),
            supplier_response=row.get("supplier_response"),
            created_at=row.get("created_at"),
            processed_at=row.get("processed_at"),
        )

    def to_public(self) -> Dict[str, Any]:
        """Forme renvoyée au front: montants mineurs + équivalents en unités majeures."""
        data = self.model_dump(mode="json")
        data.update({
            "total_usd": to_major_units(self.total_minor_usd),
            "total_ngn": to_major_units(self.total_minor_ngn),
            "supplier_share": to_major_units(self.supplier_share_minor),
            "profit": to_major_units(self.profit_minor),
        })
        return data
