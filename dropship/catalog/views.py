from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from dropship.catalog.service import get_products_with_live_pricing
from dropship.deps import get_rate_provider
from dropship.pricing.rates import ExchangeRateProvider

router = APIRouter(prefix="/api", tags=["Catalog API"])

# module dropship.catalog.views
@router.get("/products")
async def list_products(rates: ExchangeRateProvider = Depends(get_rate_provider)):
    products = await run_in_threadpool(get_products_with_live_pricing, rates)
    return {"success": True, "products": products}
