"""
Frais de livraison forfaitaires par État nigérian (unités mineures).
Aucune erreur possible: une région inconnue ou absente retombe sur DEFAULT_SHIPPING_FEE.
"""
from typing import Dict, Optional

# module dropship.pricing.shipping
DEFAULT_SHIPPING_FEE = 3500

SHIPPING_FEES: Dict[str, int] = {
    "Lagos": 2000,
    "Abuja": 2500,
    "Rivers": 3000,
    "Kano": 2800,
    "Kaduna": 2500,
    "Oyo": 2200,
    "Ogun": 2000,
    "Enugu": 2700,
    "Anambra": 2700,
}


def resolve_fee(region: Optional[str]) -> int:
    return SHIPPING_FEES.get((region or "").strip(), DEFAULT_SHIPPING_FEE)
