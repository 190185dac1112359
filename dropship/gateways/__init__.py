"""
Module 'gateways': point d'entrée public des adaptateurs de paiement.
Réunit le contrat commun et les adaptateurs Paystack, OPay et Stripe.
"""

from .base import GatewayRequest, PaymentGateway, HttpGateway
from .paystack_client import PaystackGateway, PaystackInitialization
from .opay_client import OpayGateway, new_reference as new_opay_reference
from .stripe_client import StripeGateway, IntentResult

__all__ = [
    # base
    "GatewayRequest",
    "PaymentGateway",
    "HttpGateway",
    # paystack
    "PaystackGateway",
    "PaystackInitialization",
    # opay
    "OpayGateway",
    "new_opay_reference",
    # stripe
    "StripeGateway",
    "IntentResult",
]
