"""
Registre central des routers.
- Checkout: rates, create-<gateway>-order, place-order
- Orders: liste, callback Paystack, webhook Stripe
- Catalog: produits à prix live
- Health
"""
from fastapi import FastAPI

from dropship.catalog.views import router as catalog_router
from dropship.checkout.views import router as checkout_router
from dropship.health.router import router as health_router
from dropship.orders.views import router as orders_router

def register_routers(app: FastAPI) -> None:
    app.include_router(checkout_router)
    app.include_router(orders_router)
    app.include_router(catalog_router)
    # Health & monitoring
    app.include_router(health_router)
