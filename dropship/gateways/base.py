"""
Contrat commun des adaptateurs de passerelle de paiement.

Chaque adaptateur implémente le même jeu de capacités:
  build_request -> auth_headers (authentifier/signer) -> submit -> parse_response -> to_draft
`send` enchaîne authentification et soumission; `to_draft` produit le brouillon canonique
stocké dans le ledger. Toute erreur réseau ou réponse non-succès devient UpstreamError.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from dropship.checkout.cart import ProfitSplit
from dropship.checkout.models import Customer
from dropship.errors import UpstreamError
from dropship.orders.models import DraftOrder

logger = logging.getLogger(__name__)

# module dropship.gateways.base
@dataclass
class GatewayRequest:
    method: str
    url: str
    body: Optional[Dict[str, Any]] = None

    def body_bytes(self) -> bytes:
        """Octets exacts envoyés sur le réseau (et donc signés, le cas échéant)."""
        if self.body is None:
            return b""
        return json.dumps(self.body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class PaymentGateway(ABC):
    name: str = ""

    @abstractmethod
    def build_request(self, **kwargs: Any) -> GatewayRequest:
        ...

    @abstractmethod
    def auth_headers(self, request: GatewayRequest) -> Dict[str, str]:
        ...

    @abstractmethod
    def submit(self, request: GatewayRequest, headers: Dict[str, str]) -> Any:
        ...

    @abstractmethod
    def parse_response(self, raw: Any) -> Any:
        ...

    def send(self, request: GatewayRequest) -> Any:
        headers = self.auth_headers(request)
        return self.submit(request, headers)

    def to_draft(
        self,
        reference: str,
        *,
        customer: Customer,
        items: List[Dict[str, Any]],
        split: Optional[ProfitSplit] = None,
        total_minor_usd: int = 0,
        total_minor_ngn: int = 0,
        gateway_response: Any = None,
    ) -> DraftOrder:
        return DraftOrder(
            payment_reference=reference,
            gateway=self.name,
            customer=customer,
            items=items,
            total_minor_usd=total_minor_usd,
            total_minor_ngn=total_minor_ngn,
            supplier_share_minor=split.supplier_share if split else 0,
            profit_minor=split.profit if split else 0,
            gateway_response=gateway_response,
        )


class HttpGateway(PaymentGateway):
    """Passerelle REST/JSON appelée via le client httpx partagé (timeout borné, sans retry)."""

    def __init__(self, http: httpx.Client):
        self.http = http

    def submit(self, request: GatewayRequest, headers: Dict[str, str]) -> Any:
        try:
            resp = self.http.request(
                request.method,
                request.url,
                content=request.body_bytes() if request.body is not None else None,
                headers={**headers, "Content-Type": "application/json"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "gateways.%s.submit rejected status=%s body=%s",
                self.name, e.response.status_code, e.response.text[:500],
            )
            raise UpstreamError(f"{self.name} request failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("gateways.%s.submit transport error=%s", self.name, type(e).__name__)
            raise UpstreamError(f"{self.name} request failed: {type(e).__name__}") from e
        try:
            return resp.json()
        except ValueError:
            return {"raw": resp.text}
