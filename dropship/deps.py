"""
Fournisseurs de dépendances FastAPI (Depends).
Les ressources process (ledger, client httpx) sont créées dans le lifespan et lues sur app.state;
les tests les remplacent via app.dependency_overrides ou en posant app.state.* directement.
"""
import httpx
from fastapi import Depends, Request

from dropship.fulfillment.supplier_client import SupplierClient
from dropship.gateways import OpayGateway, PaystackGateway, StripeGateway
from dropship.orders.repository import OrderLedger
from dropship.pricing.rates import ExchangeRateProvider

# module dropship.deps
def get_ledger(request: Request) -> OrderLedger:
    return request.app.state.ledger


def get_http(request: Request) -> httpx.Client:
    return request.app.state.http


def get_rate_provider(http: httpx.Client = Depends(get_http)) -> ExchangeRateProvider:
    return ExchangeRateProvider(http)


def get_paystack(http: httpx.Client = Depends(get_http)) -> PaystackGateway:
    return PaystackGateway(http)


def get_opay(http: httpx.Client = Depends(get_http)) -> OpayGateway:
    return OpayGateway(http)


def get_stripe_gateway() -> StripeGateway:
    return StripeGateway()


def get_supplier(http: httpx.Client = Depends(get_http)) -> SupplierClient:
    return SupplierClient(http)
