"""
Réconciliation du statut des commandes.

Trois canaux de confirmation hétérogènes alimentent une seule machine à états:
- PollResult: vérification synchrone auprès de la passerelle (callback Paystack, place-order Stripe).
- WebhookEvent: événement poussé et signé par la passerelle (Stripe).
- NoConfirmation: la passerelle ne rappelle jamais (OPay). Les commandes restent 'pending'
  jusqu'à un traitement manuel hors application; c'est une lacune connue, pas un oubli.

Invariant: pending -> paid | failed, puis plus aucune transition. La garde est appliquée ici
(transition) ET par le stockage (mise à jour conditionnelle sur status = 'pending').
"""
from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional, Union

from dropship.orders.models import Order, OrderStatus
from dropship.orders.repository import OrderLedger

logger = logging.getLogger(__name__)

# module dropship.orders.reconciliation
@dataclass(frozen=True)
class PollResult:
    reference: str
    succeeded: bool
    payload: Any = None


@dataclass(frozen=True)
class WebhookEvent:
    event_type: str
    reference: Optional[str]
    payload: Any = None


@dataclass(frozen=True)
class NoConfirmation:
    reference: str


Outcome = Union[PollResult, WebhookEvent, NoConfirmation]

WEBHOOK_EVENT_STATUS: Dict[str, OrderStatus] = {
    "payment_intent.succeeded": OrderStatus.PAID,
    "payment_intent.payment_failed": OrderStatus.FAILED,
}


def target_status(outcome: Outcome) -> Optional[OrderStatus]:
    """Statut visé par un signal de confirmation; None = aucun changement demandé."""
    if isinstance(outcome, PollResult):
        # Un poll non concluant laisse la commande en attente (pas de 'failed' sur poll)
        return OrderStatus.PAID if outcome.succeeded else None
    if isinstance(outcome, WebhookEvent):
        return WEBHOOK_EVENT_STATUS.get(outcome.event_type)
    return None


def transition(current: Union[OrderStatus, str], outcome: Outcome) -> OrderStatus:
    """Fonction pure de la machine à états: les états terminaux sont absorbants."""
    current = OrderStatus(current)
    if current.is_terminal:
        return current
    return target_status(outcome) or current


def reconcile(ledger: OrderLedger, outcome: Outcome) -> Optional[Order]:
    """
    Applique un signal de confirmation au ledger.
    - Retourne la commande (transitionnée ou inchangée), ou None si la référence est inconnue.
    - Idempotent: rejouer le même signal (livraison at-least-once) ne change rien.
    """
    reference = outcome.reference
    if not reference:
        logger.info("orders.reconcile ignored outcome=%s reason=no_reference", type(outcome).__name__)
        return None

    order = ledger.get_by_reference(reference)
    if order is None:
        logger.info("orders.reconcile unknown reference=%s outcome=%s", reference, type(outcome).__name__)
        return None

    new_status = transition(order.status, outcome)
    if new_status == order.status:
        return order

    if new_status is OrderStatus.PAID:
        updated = ledger.mark_paid(reference)
    else:
        updated = ledger.mark_failed(reference)
    if updated is None:
        # Un autre canal a terminé la commande entre la lecture et l'écriture
        return ledger.get_by_reference(reference)
    logger.info("orders.reconcile reference=%s status=%s", reference, updated.status.value)
    return updated
