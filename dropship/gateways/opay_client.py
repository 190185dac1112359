"""
Adaptateur OPay (mobile money).

La requête est signée: SIGNATURE = HMAC-SHA512(secret, octets exacts du corps envoyé), en hex.
Le corps est sérialisé une seule fois (GatewayRequest.body_bytes) puis signé et envoyé tel quel:
une re-sérialisation entre signature et envoi invaliderait la signature.

OPay ne rappelle jamais l'application: la réponse est stockée telle quelle dans
gateway_response et la commande reste 'pending' (voir orders.reconciliation.NoConfirmation).
"""
import hashlib
import hmac
import logging
import secrets
import time
from typing import Any, Dict, Optional

import httpx

from dropship import config
from dropship.checkout.models import Customer
from dropship.errors import ConfigurationError
from dropship.gateways.base import GatewayRequest, HttpGateway

logger = logging.getLogger(__name__)

# module dropship.gateways.opay_client
def new_reference() -> str:
    # suffixe aléatoire: deux checkouts dans la même milliseconde ne partagent pas la clé du ledger
    return f"opay_ref_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class OpayGateway(HttpGateway):
    name = "opay"

    def __init__(
        self,
        http: httpx.Client,
        base_url: Optional[str] = None,
        public_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        callback_url: Optional[str] = None,
        return_url: Optional[str] = None,
    ):
        super().__init__(http)
        self.base_url = (config.OPAY_BASE_URL if base_url is None else base_url).rstrip("/")
        self.public_key = config.OPAY_PUBLIC_KEY if public_key is None else public_key
        self.secret_key = config.OPAY_SECRET_KEY if secret_key is None else secret_key
        self.callback_url = config.OPAY_CALLBACK_URL if callback_url is None else callback_url
        self.return_url = config.OPAY_RETURN_URL if return_url is None else return_url

    def _require_config(self) -> None:
        if not self.base_url or not self.public_key or not self.secret_key:
            raise ConfigurationError("OPay not configured (OPAY_BASE_URL / OPAY_PUBLIC_KEY / OPAY_SECRET_KEY)")

    def build_request(self, *, reference: str, amount_kobo: int, customer: Customer) -> GatewayRequest:
        self._require_config()
        body = {
            "reference": reference,
            "amount": int(amount_kobo),
            "currency": "NGN",
            "country": "NG",
            "payType": "WEB",
            "userInfo": {
                "userId": customer.email or customer.phone or reference,
                "name": customer.name,
            },
            "callbackUrl": self.callback_url,
            "returnUrl": self.return_url,
        }
        return GatewayRequest("POST", f"{self.base_url}/invoices/create", body)

    def sign(self, body: bytes) -> str:
        return hmac.new(self.secret_key.encode("utf-8"), body, hashlib.sha512).hexdigest()

    def auth_headers(self, request: GatewayRequest) -> Dict[str, str]:
        self._require_config()
        return {
            "Authorization": f"Bearer {self.public_key}",
            "SIGNATURE": self.sign(request.body_bytes()),
        }

    def parse_response(self, raw: Any) -> Any:
        # Stocké tel quel, pas d'interprétation du succès
        return raw

    def create_invoice(self, *, reference: str, amount_kobo: int, customer: Customer) -> Any:
        request = self.build_request(reference=reference, amount_kobo=amount_kobo, customer=customer)
        raw = self.parse_response(self.send(request))
        logger.info("gateways.opay.create_invoice reference=%s amount=%s", reference, amount_kobo)
        return raw
