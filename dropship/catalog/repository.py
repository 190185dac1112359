"""
Lecture seule du catalogue (table 'products'). Le CRUD produit est hors périmètre.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from dropship.errors import CheckoutError, PersistenceError
from dropship.infra.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)

PRODUCTS_TABLE = "products"

# module dropship.catalog.repository
def list_products(client_factory: Optional[Callable[[], Any]] = None) -> List[Dict[str, Any]]:
    try:
        res = (
            (client_factory or get_service_supabase)()
            .table(PRODUCTS_TABLE)
            .select("id,title,price_usd_cents,supplier_cost_usd_cents,supplier_sku,img")
            .order("created_at", desc=True)
            .execute()
        )
    except CheckoutError:
        raise
    except Exception as e:
        logger.exception("catalog.list_products failed")
        raise PersistenceError("Product catalog read failed") from e
    return getattr(res, "data", None) or []
