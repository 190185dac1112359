"""
Adaptateur Paystack (checkout hébergé, montants en kobo).
- initialize: POST /transaction/initialize, retourne l'URL de paiement et la référence Paystack.
- verify: GET /transaction/verify/{reference}, traduit en PollResult pour la réconciliation.
"""
from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from dropship import config
from dropship.checkout.models import Customer
from dropship.errors import ConfigurationError, UpstreamError
from dropship.gateways.base import GatewayRequest, HttpGateway
from dropship.orders.reconciliation import PollResult

logger = logging.getLogger(__name__)

DEFAULT_EMAIL = "guest@example.com"

# module dropship.gateways.paystack_client
@dataclass(frozen=True)
class PaystackInitialization:
    authorization_url: str
    reference: str
    raw: Dict[str, Any]


class PaystackGateway(HttpGateway):
    name = "paystack"

    def __init__(
        self,
        http: httpx.Client,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        callback_url: Optional[str] = None,
    ):
        super().__init__(http)
        self.secret_key = config.PAYSTACK_SECRET_KEY if secret_key is None else secret_key
        self.base_url = (base_url or config.PAYSTACK_BASE_URL).rstrip("/")
        self.callback_url = config.PAYSTACK_CALLBACK_URL if callback_url is None else callback_url

    def build_request(
        self,
        *,
        amount_kobo: int,
        customer: Customer,
        items: List[Dict[str, Any]],
        shipping_fee: int,
    ) -> GatewayRequest:
        payload: Dict[str, Any] = {
            "email": customer.email or DEFAULT_EMAIL,
            "amount": int(amount_kobo),
            "currency": "NGN",
            "metadata": {
                "cartItems": items,
                "customer": customer.model_dump(),
                "shippingFee": shipping_fee,
            },
        }
        if self.callback_url:
            payload["callback_url"] = self.callback_url
        return GatewayRequest("POST", f"{self.base_url}/transaction/initialize", payload)

    def auth_headers(self, request: GatewayRequest) -> Dict[str, str]:
        if not self.secret_key:
            raise ConfigurationError("PAYSTACK_SECRET_KEY not configured")
        return {"Authorization": f"Bearer {self.secret_key}"}

    def parse_response(self, raw: Any) -> PaystackInitialization:
        raw = raw if isinstance(raw, dict) else {}
        data = raw.get("data") or {}
        url = data.get("authorization_url")
        reference = data.get("reference")
        if not raw.get("status") or not url or not reference:
            logger.error("gateways.paystack.initialize unexpected response message=%s", raw.get("message"))
            raise UpstreamError(raw.get("message") or "Paystack initialize failed")
        return PaystackInitialization(authorization_url=url, reference=reference, raw=raw)

    def initialize(
        self,
        *,
        amount_kobo: int,
        customer: Customer,
        items: List[Dict[str, Any]],
        shipping_fee: int,
    ) -> PaystackInitialization:
        request = self.build_request(
            amount_kobo=amount_kobo, customer=customer, items=items, shipping_fee=shipping_fee
        )
        result = self.parse_response(self.send(request))
        logger.info("gateways.paystack.initialize reference=%s amount=%s", result.reference, amount_kobo)
        return result

    def verify(self, reference: str) -> PollResult:
        """
        Vérifie une transaction auprès de Paystack.
        succeeded=True uniquement si data.status == "success"; payload = bloc data brut.
        """
        request = GatewayRequest("GET", f"{self.base_url}/transaction/verify/{quote(reference, safe='')}")
        raw = self.send(request)
        raw = raw if isinstance(raw, dict) else {}
        data = raw.get("data") or {}
        succeeded = bool(raw.get("status")) and data.get("status") == "success"
        logger.info("gateways.paystack.verify reference=%s status=%s", reference, data.get("status"))
        return PollResult(reference=reference, succeeded=succeeded, payload=data)
