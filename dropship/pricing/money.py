"""
Conversion des montants entre unités majeures (dollar, naira) et unités mineures (cent, kobo).

Attention: to_minor_units et to_major_units ne sont PAS des inverses exacts.
- to_minor_units devine l'unité: un int strictement supérieur à 1000 est supposé déjà en
  unités mineures. Ainsi 1000 -> 100000 (traité comme 1000.00) mais 1001 -> 1001.
- to_major_units renvoie toujours un float, donc to_minor_units(to_major_units(x)) == x
  pour tout int x divisible par 100; l'inverse to_major_units(to_minor_units(v)) ne l'est pas
  (to_major_units(to_minor_units(1500)) == 15.0).
"""
import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

# module dropship.pricing.money
MINOR_UNIT_THRESHOLD = 1000
_INT_TEXT = re.compile(r"^[+-]?\d+$")


def _is_already_minor(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > MINOR_UNIT_THRESHOLD
    if isinstance(value, str) and _INT_TEXT.match(value.strip()):
        return int(value.strip()) > MINOR_UNIT_THRESHOLD
    return False


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        # repr court du float (0.145 -> "0.145") pour éviter 14.4999... après *100
        return Decimal(repr(value))
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


def to_minor_units(value: Any) -> int:
    """
    Convertit une valeur ambiguë en unités mineures (int).
    - int > 1000 (ou texte entier > 1000): déjà en unités mineures, retourné tel quel.
    - sinon: unités majeures * 100, arrondi au plus proche (demi vers le haut).
    - None, texte non numérique, NaN, ±inf, bool: 0 (écrêtage silencieux, ce n'est pas une validation).
    """
    if _is_already_minor(value):
        return int(str(value).strip()) if isinstance(value, str) else int(value)
    d = _to_decimal(value)
    if d is None:
        return 0
    return int((d * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(minor: Optional[int]) -> float:
    """Divise par 100; None est traité comme 0."""
    return (minor or 0) / 100


def convert_minor(minor: int, rate: float) -> int:
    """Change d'unités mineures d'une devise à l'autre (cents USD -> kobo), arrondi demi vers le haut."""
    d = _to_decimal(rate)
    if d is None:
        return 0
    return int((Decimal(int(minor or 0)) * d).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
