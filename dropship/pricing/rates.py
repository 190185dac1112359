"""
Fournisseur du taux de change USD -> NGN (exchangerate-api.com v6).

Chaque appel fait un aller-retour réseau complet: pas de cache, pas de retry.
Tous les appelants voient donc la même latence et le même mode d'échec.
"""
import logging
import math
from typing import Optional

import httpx

from dropship import config
from dropship.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

# module dropship.pricing.rates
class ExchangeRateProvider:
    def __init__(self, http: httpx.Client, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.http = http
        self.api_key = config.EXCHANGE_RATE_API_KEY if api_key is None else api_key
        self.base_url = (base_url or config.EXCHANGE_RATE_BASE_URL).rstrip("/")

    def get_usd_to_ngn_rate(self) -> float:
        """
        Récupère le taux spot USD -> NGN.
        - ConfigurationError si EXCHANGE_RATE_API_KEY est absent.
        - UpstreamError si l'appel échoue ou si conversion_rates.NGN est absent/invalide.
        """
        if not self.api_key:
            raise ConfigurationError("Missing EXCHANGE_RATE_API_KEY")

        url = f"{self.base_url}/{self.api_key}/latest/USD"
        try:
            resp = self.http.get(url)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as e:
            logger.error("pricing.rates.get_usd_to_ngn_rate failed error=%s", type(e).__name__)
            raise UpstreamError(f"Exchange rate request failed: {type(e).__name__}") from e
        except ValueError as e:
            raise UpstreamError("Exchange rate response is not JSON") from e

        rate = ((payload or {}).get("conversion_rates") or {}).get("NGN")
        try:
            rate = float(rate) if rate is not None else None
        except (TypeError, ValueError):
            rate = None
        if not rate or not math.isfinite(rate) or rate <= 0:
            raise UpstreamError("Could not get NGN rate")
        return rate
