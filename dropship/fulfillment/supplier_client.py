"""
Transfert d'une commande payée à l'API fournisseur.

- Sans SUPPLIER_API_URL / SUPPLIER_API_KEY: réponse simulée (dev), marquée "simulated".
- Un échec fournisseur ne fait jamais échouer la commande (le paiement est déjà capturé):
  il est retourné comme {"success": False, "error": ...} et stocké dans supplier_response.
"""
import logging
import secrets
import time
from typing import Any, Dict, List, Optional

import httpx

from dropship import config
from dropship.checkout.models import Customer

logger = logging.getLogger(__name__)

# module dropship.fulfillment.supplier_client
def build_supplier_order(
    items: List[Dict[str, Any]],
    customer: Customer,
    payment_reference: str,
) -> Dict[str, Any]:
    return {
        "merchant_order_id": f"ds-{int(time.time() * 1000)}",
        "customer": customer.model_dump(),
        "items": [
            {
                "sku": it.get("supplier_sku") or it.get("id") or "",
                "qty": it.get("quantity") or 1,
                "title": it.get("title") or "",
                "price": it.get("price"),
            }
            for it in items
        ],
        "payment": {"stripe_payment_intent": payment_reference},
    }


class SupplierClient:
    def __init__(self, http: httpx.Client, api_url: Optional[str] = None, api_key: Optional[str] = None):
        self.http = http
        self.api_url = config.SUPPLIER_API_URL if api_url is None else api_url
        self.api_key = config.SUPPLIER_API_KEY if api_key is None else api_key

    @property
    def configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    def forward(self, order: Dict[str, Any]) -> Dict[str, Any]:
        if not self.configured:
            return {
                "success": True,
                "simulated": True,
                "supplier_order_id": f"SIM-{secrets.randbelow(10**6)}",
            }
        try:
            resp = self.http.post(
                self.api_url,
                json=order,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            logger.error(
                "fulfillment.forward failed merchant_order_id=%s error=%s",
                order.get("merchant_order_id"), type(e).__name__,
            )
            return {"success": False, "error": f"Supplier call failed: {type(e).__name__}"}
        except ValueError:
            return {"success": False, "error": "Supplier response is not JSON"}
        logger.info("fulfillment.forward ok merchant_order_id=%s", order.get("merchant_order_id"))
        return data if isinstance(data, dict) else {"success": True, "data": data}
