"""
Orchestration du checkout (une fonction par passerelle).

Ordre commun:
  1) valider le panier et calculer le partage (ensure_payable) AVANT tout appel externe;
  2) appeler la passerelle;
  3) écrire le brouillon 'pending' dans le ledger, clé = référence émise par la passerelle.
Si l'appel passerelle échoue, aucun brouillon n'est écrit. Si la passerelle accepte puis que
l'écriture échoue, la PersistenceError remonte (pas de transaction distribuée).
"""
import logging
from typing import Any, Dict

from dropship.checkout.cart import (
    ProfitSplit,
    compute_split,
    ensure_payable,
    items_snapshot,
    price_cart,
    split_from_application_fee,
)
from dropship.checkout.models import CheckoutRequest, PlaceOrderRequest
from dropship.errors import ValidationError
from dropship.fulfillment.supplier_client import SupplierClient, build_supplier_order
from dropship.gateways import OpayGateway, PaystackGateway, StripeGateway, new_opay_reference
from dropship.orders.models import OrderStatus
from dropship.orders.reconciliation import reconcile
from dropship.orders.repository import OrderLedger
from dropship.pricing.money import convert_minor, to_major_units
from dropship.pricing.rates import ExchangeRateProvider

logger = logging.getLogger(__name__)

# module dropship.checkout.service
def _require_items(req: CheckoutRequest, message: str = "cartItems required") -> None:
    if not req.cart_items:
        raise ValidationError(message)


def get_rates(rates: ExchangeRateProvider) -> Dict[str, Any]:
    return {"success": True, "rates": {"USD": 1, "NGN": rates.get_usd_to_ngn_rate()}}


def create_paystack_order(
    req: CheckoutRequest,
    *,
    gateway: PaystackGateway,
    ledger: OrderLedger,
    rates: ExchangeRateProvider,
) -> Dict[str, Any]:
    """
    Checkout Paystack (redirection).
    - Prix du panier en NGN par défaut; currency="USD" => conversion au taux du moment.
    - Forfait livraison ajouté après conversion, en kobo.
    - supplier_share / profit stockés dans l'unité mineure de la devise du panier.
    """
    _require_items(req)
    currency = (req.currency or "NGN").upper()
    if currency not in ("NGN", "USD"):
        raise ValidationError(f"Unsupported currency: {currency}")

    totals = price_cart(req.cart_items, req.customer.state)
    split = ensure_payable(ProfitSplit(totals.subtotal, totals.supplier_share, totals.profit))

    total_minor_usd = 0
    subtotal_kobo = totals.subtotal
    if currency == "USD":
        subtotal_kobo = convert_minor(totals.subtotal, rates.get_usd_to_ngn_rate())
        total_minor_usd = totals.subtotal
    amount_kobo = subtotal_kobo + totals.shipping_fee

    items = items_snapshot(req.cart_items)
    init = gateway.initialize(
        amount_kobo=amount_kobo,
        customer=req.customer,
        items=items,
        shipping_fee=totals.shipping_fee,
    )
    ledger.create_draft(gateway.to_draft(
        init.reference,
        customer=req.customer,
        items=items,
        split=split,
        total_minor_usd=total_minor_usd,
        total_minor_ngn=amount_kobo,
    ))
    return {
        "success": True,
        "authorizationUrl": init.authorization_url,
        "reference": init.reference,
        "totalNgn": to_major_units(amount_kobo),
        "totalKobo": amount_kobo,
    }


def create_opay_order(
    req: CheckoutRequest,
    *,
    gateway: OpayGateway,
    ledger: OrderLedger,
    rates: ExchangeRateProvider,
) -> Dict[str, Any]:
    """Checkout OPay: panier en USD, montant converti en kobo, réponse OPay stockée telle quelle."""
    _require_items(req)
    split = ensure_payable(compute_split(req.cart_items))
    rate = rates.get_usd_to_ngn_rate()
    amount_kobo = convert_minor(split.total, rate)
    reference = new_opay_reference()

    raw = gateway.create_invoice(reference=reference, amount_kobo=amount_kobo, customer=req.customer)
    ledger.create_draft(gateway.to_draft(
        reference,
        customer=req.customer,
        items=items_snapshot(req.cart_items),
        split=split,
        total_minor_usd=split.total,
        total_minor_ngn=amount_kobo,
        gateway_response=raw,
    ))
    return {
        "success": True,
        "data": raw,
        "reference": reference,
        "totalKobo": amount_kobo,
        "totalNgn": to_major_units(amount_kobo),
        "rate": rate,
    }


def create_stripe_intent(req: CheckoutRequest, *, gateway: StripeGateway) -> Dict[str, Any]:
    """PaymentIntent marketplace: commission = profit, reste transféré au compte fournisseur. Pas de brouillon ici."""
    _require_items(req, "No cart items provided")
    split = ensure_payable(compute_split(req.cart_items))
    intent = gateway.create_intent(split, currency=req.currency or "usd")
    return {
        "success": True,
        "clientSecret": intent.client_secret,
        "reference": intent.id,
        "totalUsd": to_major_units(split.total),
        "amount": split.total,
        "application_fee_amount": intent.application_fee_amount or 0,
        "supplier_share": split.supplier_share,
    }


def place_order(
    req: PlaceOrderRequest,
    *,
    gateway: StripeGateway,
    ledger: OrderLedger,
    supplier: SupplierClient,
) -> Dict[str, Any]:
    """
    Finalise une commande Stripe après paiement côté front.
    Étapes:
      1) relire le PaymentIntent (status == "succeeded" exigé, sinon 400);
      2) écrire le brouillon (référence = id de l'intent), totaux issus de l'intent;
      3) réconcilier en 'paid' via le résultat du poll;
      4) transmettre au fournisseur une seule fois, seulement si la commande est 'paid', et stocker supplier_response.
    Rejouer la même requête ne retransmet pas la commande au fournisseur.
    """
    _require_items(req, "Invalid order payload")
    if not req.payment_intent_id:
        raise ValidationError("Missing paymentIntentId")

    poll = gateway.retrieve_intent(req.payment_intent_id)
    if not poll.succeeded:
        logger.info("checkout.place_order intent not succeeded id=%s", req.payment_intent_id)
        raise ValidationError("Payment not completed")
    intent = poll.payload

    if intent.application_fee_amount is not None:
        split = split_from_application_fee(intent.amount, intent.application_fee_amount)
    else:
        split = compute_split(req.cart_items)
        split = ProfitSplit(intent.amount, split.supplier_share, intent.amount - split.supplier_share)
    ensure_payable(split)

    is_ngn = (intent.currency or "").lower() == "ngn"
    items = items_snapshot(req.cart_items)
    ledger.create_draft(gateway.to_draft(
        poll.reference,
        customer=req.customer,
        items=items,
        split=split,
        total_minor_usd=0 if is_ngn else intent.amount,
        total_minor_ngn=intent.amount if is_ngn else 0,
    ))
    order = reconcile(ledger, poll)

    if order is not None and order.status is OrderStatus.PAID and order.supplier_response is None:
        response = supplier.forward(build_supplier_order(items, req.customer, poll.reference))
        ledger.record_supplier_response(poll.reference, response)
        order = ledger.get_by_reference(poll.reference) or order

    logger.info("checkout.place_order reference=%s status=%s", poll.reference, order.status.value if order else None)
    return {"success": True, "order": order.to_public() if order else None}
