"""
Ledger des commandes (table 'orders').

- create_draft: insertion idempotente par payment_reference. L'unicité est garantie par le
  stockage (contrainte UNIQUE + upsert ignore-duplicates), jamais par un "select puis insert"
  applicatif qui ferait la course avec un webhook concurrent. Premier écrivain gagnant.
- mark_paid / mark_failed: mise à jour conditionnelle (status = 'pending'), processed_at posé
  une seule fois. Référence inconnue ou commande déjà terminée: no-op, retourne None.
- list_orders: plus récentes d'abord.
- Les erreurs de stockage remontent en PersistenceError (jamais avalées).
"""
from datetime import datetime, timezone
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol

from dropship.errors import CheckoutError, PersistenceError
from dropship.infra.supabase_client import get_service_supabase
from dropship.orders.models import DraftOrder, Order, OrderStatus, new_local_order_id

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"

# module dropship.orders.repository
class OrderLedger(Protocol):
    def create_draft(self, draft: DraftOrder) -> str: ...
    def mark_paid(self, reference: str) -> Optional[Order]: ...
    def mark_failed(self, reference: str) -> Optional[Order]: ...
    def get_by_reference(self, reference: str) -> Optional[Order]: ...
    def list_orders(self) -> List[Order]: ...
    def record_supplier_response(self, reference: str, payload: Any) -> None: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SupabaseOrderLedger:
    """Ledger persistant via PostgREST (client service-role, écritures côté serveur)."""

    def __init__(self, client_factory: Callable[[], Any] = get_service_supabase):
        self._client_factory = client_factory

    def _table(self):
        return self._client_factory().table(ORDERS_TABLE)

    def _execute(self, action: str, reference: Optional[str], build):
        try:
            return build(self._table()).execute()
        except CheckoutError:
            raise
        except Exception as e:
            logger.exception("orders.repository.%s failed reference=%s", action, reference)
            raise PersistenceError(f"Order ledger {action} failed") from e

    def create_draft(self, draft: DraftOrder) -> str:
        local_order_id = new_local_order_id()
        res = self._execute(
            "create_draft",
            draft.payment_reference,
            lambda t: t.upsert(
                draft.to_row(local_order_id),
                on_conflict="payment_reference",
                ignore_duplicates=True,
            ),
        )
        rows = getattr(res, "data", None) or []
        if rows:
            return rows[0].get("local_order_id") or local_order_id
        # Doublon ignoré par le stockage: on renvoie l'identifiant de la ligne existante
        existing = self.get_by_reference(draft.payment_reference)
        logger.info("orders.repository.create_draft duplicate reference=%s", draft.payment_reference)
        return existing.local_order_id if existing else local_order_id

    def _set_terminal(self, reference: str, status: OrderStatus) -> Optional[Order]:
        res = self._execute(
            f"mark_{status.value}",
            reference,
            lambda t: t.update({"status": status.value, "processed_at": _now().isoformat()})
            .eq("payment_reference", reference)
            .eq("status", OrderStatus.PENDING.value),
        )
        rows = getattr(res, "data", None) or []
        return Order.from_row(rows[0]) if rows else None

    def mark_paid(self, reference: str) -> Optional[Order]:
        return self._set_terminal(reference, OrderStatus.PAID)

    def mark_failed(self, reference: str) -> Optional[Order]:
        return self._set_terminal(reference, OrderStatus.FAILED)

    def get_by_reference(self, reference: str) -> Optional[Order]:
        res = self._execute(
            "get_by_reference",
            reference,
            lambda t: t.select("*").eq("payment_reference", reference).limit(1),
        )
        rows = getattr(res, "data", None) or []
        return Order.from_row(rows[0]) if rows else None

    def list_orders(self) -> List[Order]:
        res = self._execute(
            "list_orders",
            None,
            lambda t: t.select("*").order("created_at", desc=True),
        )
        return [Order.from_row(r) for r in (getattr(res, "data", None) or [])]

    def record_supplier_response(self, reference: str, payload: Any) -> None:
        self._execute(
            "record_supplier_response",
            reference,
            lambda t: t.update({"supplier_response": payload}).eq("payment_reference", reference),
        )


class InMemoryOrderLedger:
    """
    Ledger volatile (tests, dev local). Le verrou joue le rôle de la contrainte UNIQUE:
    deux create_draft concurrents pour la même référence produisent une seule ligne.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._orders: Dict[str, Order] = {}
        self._sequence: List[str] = []

    def create_draft(self, draft: DraftOrder) -> str:
        with self._lock:
            existing = self._orders.get(draft.payment_reference)
            if existing is not None:
                return existing.local_order_id
            order = Order.from_row({**draft.to_row(new_local_order_id()), "created_at": _now()})
            self._orders[draft.payment_reference] = order
            self._sequence.append(draft.payment_reference)
            return order.local_order_id

    def _set_terminal(self, reference: str, status: OrderStatus) -> Optional[Order]:
        with self._lock:
            order = self._orders.get(reference)
            if order is None or order.status is not OrderStatus.PENDING:
                return None
            updated = order.model_copy(update={"status": status, "processed_at": _now()})
            self._orders[reference] = updated
            return updated

    def mark_paid(self, reference: str) -> Optional[Order]:
        return self._set_terminal(reference, OrderStatus.PAID)

    def mark_failed(self, reference: str) -> Optional[Order]:
        return self._set_terminal(reference, OrderStatus.FAILED)

    def get_by_reference(self, reference: str) -> Optional[Order]:
        with self._lock:
            return self._orders.get(reference)

    def list_orders(self) -> List[Order]:
        with self._lock:
            return [self._orders[ref] for ref in reversed(self._sequence)]

    def record_supplier_response(self, reference: str, payload: Any) -> None:
        with self._lock:
            order = self._orders.get(reference)
            if order is not None:
                self._orders[reference] = order.model_copy(update={"supplier_response": payload})
