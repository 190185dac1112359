"""
Adaptateur Stripe: centralise les appels et la configuration Stripe (Connect, split marketplace).
"""
from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, Optional

import stripe

from dropship import config
from dropship.checkout.cart import ProfitSplit
from dropship.errors import ConfigurationError, UpstreamError, ValidationError
from dropship.gateways.base import GatewayRequest, PaymentGateway
from dropship.orders.reconciliation import PollResult, WebhookEvent

logger = logging.getLogger(__name__)

# module dropship.gateways.stripe_client
def _field(obj: Any, key: str, default: Any = None) -> Any:
    """Lecture tolérante d'un champ sur un StripeObject ou un dict."""
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError, IndexError):
        return default
    return default if value is None else value


@dataclass(frozen=True)
class IntentResult:
    id: str
    client_secret: Optional[str]
    status: str
    amount: int
    application_fee_amount: Optional[int]
    currency: str


class StripeGateway(PaymentGateway):
    name = "stripe"

    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        destination_account: Optional[str] = None,
    ):
        self.secret_key = config.STRIPE_SECRET_KEY if secret_key is None else secret_key
        self.webhook_secret = config.STRIPE_WEBHOOK_SECRET if webhook_secret is None else webhook_secret
        self.destination_account = (
            config.SUPPLIER_STRIPE_ACCOUNT if destination_account is None else destination_account
        )

    def require_stripe(self):
        """
        Prépare et retourne le module stripe prêt à l'emploi.
        - ConfigurationError si STRIPE_SECRET_KEY est absent (aucun appel SDK sans clé).
        - Client HTTP du SDK borné par HTTP_TIMEOUT_SECONDS (le défaut du SDK est de 80 s).
        """
        if not self.secret_key:
            raise ConfigurationError("STRIPE_SECRET_KEY not configured")
        stripe.api_key = self.secret_key
        if stripe.default_http_client is None:
            stripe.default_http_client = stripe.new_default_http_client(timeout=config.HTTP_TIMEOUT_SECONDS)
        return stripe

    def build_request(self, *, split: ProfitSplit, currency: str = "usd") -> GatewayRequest:
        params: Dict[str, Any] = {
            "amount": split.total,
            "currency": (currency or "usd").lower(),
            "automatic_payment_methods": {"enabled": True},
        }
        if self.destination_account:
            params["application_fee_amount"] = split.profit
            params["transfer_data"] = {"destination": self.destination_account}
        else:
            logger.warning("gateways.stripe.build_request no SUPPLIER_STRIPE_ACCOUNT, split omitted")
        return GatewayRequest("POST", "payment_intents", params)

    def auth_headers(self, request: GatewayRequest) -> Dict[str, str]:
        # Le SDK porte l'authentification (stripe.api_key)
        self.require_stripe()
        return {}

    def submit(self, request: GatewayRequest, headers: Dict[str, str]) -> Any:
        try:
            return stripe.PaymentIntent.create(**(request.body or {}))
        except stripe.StripeError as e:
            logger.error("gateways.stripe.create_intent failed error=%s", type(e).__name__)
            raise UpstreamError(getattr(e, "user_message", None) or str(e)) from e

    def parse_response(self, raw: Any) -> IntentResult:
        fee = _field(raw, "application_fee_amount")
        return IntentResult(
            id=_field(raw, "id", ""),
            client_secret=_field(raw, "client_secret"),
            status=_field(raw, "status", ""),
            amount=int(_field(raw, "amount", 0)),
            application_fee_amount=int(fee) if fee is not None else None,
            currency=_field(raw, "currency", ""),
        )

    def create_intent(self, split: ProfitSplit, currency: str = "usd") -> IntentResult:
        intent = self.parse_response(self.send(self.build_request(split=split, currency=currency)))
        logger.info(
            "gateways.stripe.create_intent id=%s amount=%s fee=%s",
            intent.id, intent.amount, intent.application_fee_amount,
        )
        return intent

    def retrieve_intent(self, intent_id: str) -> PollResult:
        """
        Relit un PaymentIntent; succeeded=True uniquement si status == "succeeded".
        payload = IntentResult (montant et commission servent au brouillon de commande).
        """
        self.require_stripe()
        try:
            raw = stripe.PaymentIntent.retrieve(intent_id)
        except stripe.StripeError as e:
            logger.error("gateways.stripe.retrieve_intent failed id=%s error=%s", intent_id, type(e).__name__)
            raise UpstreamError(getattr(e, "user_message", None) or str(e)) from e
        intent = self.parse_response(raw)
        return PollResult(reference=intent.id or intent_id, succeeded=intent.status == "succeeded", payload=intent)

    def parse_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookEvent:
        """
        Parse un événement webhook.
        - Avec STRIPE_WEBHOOK_SECRET: signature vérifiée via Webhook.construct_event.
        - Sans secret: simple parsing JSON, AUCUNE vérification (repli non sécurisé, loggé en WARNING).
        - ValidationError ("Webhook Error: ...") si signature invalide ou corps illisible.
        """
        if self.webhook_secret:
            try:
                event = stripe.Webhook.construct_event(payload, signature or "", self.webhook_secret)
            except stripe.SignatureVerificationError as e:
                logger.warning("gateways.stripe.parse_webhook bad signature")
                raise ValidationError(f"Webhook Error: {e}") from e
            except ValueError as e:
                raise ValidationError(f"Webhook Error: {e}") from e
        else:
            logger.warning(
                "gateways.stripe.parse_webhook STRIPE_WEBHOOK_SECRET not set, signature NOT verified (insecure)"
            )
            try:
                event = json.loads(payload.decode("utf-8"))
            except (UnicodeDecodeError, ValueError) as e:
                raise ValidationError(f"Webhook Error: {e}") from e

        obj = _field(_field(event, "data"), "object")
        return WebhookEvent(
            event_type=str(_field(event, "type", "")),
            reference=_field(obj, "id"),
            payload=obj,
        )
