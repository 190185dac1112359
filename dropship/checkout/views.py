"""Endpoints du checkout.
- /api/rates: taux USD -> NGN du moment.
- /api/create-paystack-order, /api/create-opay-order (alias /api/create-opay-session),
  /api/create-stripe-order (alias /api/create-payment-intent): rate-limités (10 req / 60s).
- /api/place-order: finalisation d'une commande Stripe payée.
Les erreurs métier remontent (CheckoutError) et sont traduites par app_setup.exceptions.
"""
from fastapi import APIRouter, Depends

from dropship.checkout import service as checkout_service
from dropship.checkout.models import CheckoutRequest, PlaceOrderRequest
from dropship.deps import (
    get_ledger,
    get_opay,
    get_paystack,
    get_rate_provider,
    get_stripe_gateway,
    get_supplier,
)
from dropship.fulfillment.supplier_client import SupplierClient
from dropship.gateways import OpayGateway, PaystackGateway, StripeGateway
from dropship.orders.repository import OrderLedger
from dropship.pricing.rates import ExchangeRateProvider
from dropship.utils.rate_limit import optional_rate_limit

router = APIRouter(prefix="/api", tags=["Checkout API"])

ORDER_RATE_LIMIT = [Depends(optional_rate_limit(times=10, seconds=60))]

# module dropship.checkout.views
@router.get("/rates")
def get_rates(rates: ExchangeRateProvider = Depends(get_rate_provider)):
    return checkout_service.get_rates(rates)


@router.post("/create-paystack-order", dependencies=ORDER_RATE_LIMIT)
def create_paystack_order(
    body: CheckoutRequest,
    gateway: PaystackGateway = Depends(get_paystack),
    ledger: OrderLedger = Depends(get_ledger),
    rates: ExchangeRateProvider = Depends(get_rate_provider),
):
    return checkout_service.create_paystack_order(body, gateway=gateway, ledger=ledger, rates=rates)


@router.post("/create-opay-order", dependencies=ORDER_RATE_LIMIT)
@router.post("/create-opay-session", dependencies=ORDER_RATE_LIMIT, include_in_schema=False)
def create_opay_order(
    body: CheckoutRequest,
    gateway: OpayGateway = Depends(get_opay),
    ledger: OrderLedger = Depends(get_ledger),
    rates: ExchangeRateProvider = Depends(get_rate_provider),
):
    return checkout_service.create_opay_order(body, gateway=gateway, ledger=ledger, rates=rates)


@router.post("/create-stripe-order", dependencies=ORDER_RATE_LIMIT)
@router.post("/create-payment-intent", dependencies=ORDER_RATE_LIMIT, include_in_schema=False)
def create_stripe_order(body: CheckoutRequest, gateway: StripeGateway = Depends(get_stripe_gateway)):
    return checkout_service.create_stripe_intent(body, gateway=gateway)


@router.post("/place-order")
def place_order(
    body: PlaceOrderRequest,
    gateway: StripeGateway = Depends(get_stripe_gateway),
    ledger: OrderLedger = Depends(get_ledger),
    supplier: SupplierClient = Depends(get_supplier),
):
    return checkout_service.place_order(body, gateway=gateway, ledger=ledger, supplier=supplier)
