from typing import Any, Callable, Dict, List, Optional

from dropship.catalog.repository import list_products
from dropship.pricing.money import to_major_units
from dropship.pricing.rates import ExchangeRateProvider

# module dropship.catalog.service
def get_products_with_live_pricing(
    rates: ExchangeRateProvider,
    fetch: Optional[Callable[[], List[Dict[str, Any]]]] = None,
) -> List[Dict[str, Any]]:
    """
    Produits du catalogue avec prix NGN calculé au taux du moment.
    - priceMinorUsd / supplierCostMinorUsd: cents tels que stockés.
    - priceMajorNgn: (cents / 100) * taux, arrondi à 2 décimales.
    """
    rate = rates.get_usd_to_ngn_rate()
    products = []
    for p in (fetch or list_products)():
        cents = int(p.get("price_usd_cents") or 0)
        products.append({
            "id": p.get("id"),
            "title": p.get("title") or "",
            "priceMinorUsd": cents,
            "priceMajorNgn": round(to_major_units(cents) * rate, 2),
            "supplierCostMinorUsd": int(p.get("supplier_cost_usd_cents") or 0),
            "sku": p.get("supplier_sku") or "",
            "image": p.get("img") or "",
        })
    return products
