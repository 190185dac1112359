# module dropship.orders.views

"""Endpoints de lecture et de réconciliation des commandes.
- GET /api/orders: liste, plus récentes d'abord.
- GET /api/paystack-callback: poll-and-verify Paystack, passe la commande en 'paid' si succès.
- POST /webhook: événements Stripe signés (payment_intent.succeeded / payment_failed).
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from dropship.deps import get_ledger, get_paystack, get_stripe_gateway
from dropship.errors import ValidationError
from dropship.gateways import PaystackGateway, StripeGateway
from dropship.orders.reconciliation import WEBHOOK_EVENT_STATUS, reconcile
from dropship.orders.repository import OrderLedger

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Orders API"])


@router.get("/api/orders")
def list_orders(ledger: OrderLedger = Depends(get_ledger)):
    return {"success": True, "orders": [o.to_public() for o in ledger.list_orders()]}


@router.get("/api/paystack-callback")
def paystack_callback(
    reference: Optional[str] = None,
    gateway: PaystackGateway = Depends(get_paystack),
    ledger: OrderLedger = Depends(get_ledger),
):
    """
    Vérifie la transaction auprès de Paystack.
    - 400 si reference absente ou paiement non réussi (la commande reste 'pending').
    - Succès: réconciliation en 'paid', renvoie la commande et le bloc transaction Paystack.
    """
    if not reference:
        raise ValidationError("Reference required")
    poll = gateway.verify(reference)
    if not poll.succeeded:
        logger.warning("orders.paystack_callback payment not successful reference=%s", reference)
        raise ValidationError("Payment failed")
    order = reconcile(ledger, poll)
    return {
        "success": True,
        "message": "Payment verified",
        "order": order.to_public() if order else None,
        "transaction": poll.payload,
    }


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    gateway: StripeGateway = Depends(get_stripe_gateway),
    ledger: OrderLedger = Depends(get_ledger),
):
    """
    Webhook Stripe (corps brut + en-tête Stripe-Signature).
    - Signature invalide / corps illisible: 400, aucun changement d'état.
    - Type d'événement non géré ou commande inconnue: loggé puis acquitté.
    """
    payload = await request.body()
    event = gateway.parse_webhook(payload, request.headers.get("stripe-signature"))
    if event.event_type not in WEBHOOK_EVENT_STATUS:
        logger.info("orders.webhook unhandled type=%s", event.event_type)
        return {"received": True}
    order = await run_in_threadpool(reconcile, ledger, event)
    if order is None:
        logger.info("orders.webhook no matching order type=%s reference=%s", event.event_type, event.reference)
    return {"received": True}
