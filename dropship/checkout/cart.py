"""
Logique panier pure (pas de passerelle, pas de DB): totaux, partage fournisseur/profit, livraison.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from dropship.checkout.models import CartItem
from dropship.errors import ValidationError
from dropship.pricing.money import to_minor_units
from dropship.pricing.shipping import resolve_fee

# module dropship.checkout.cart
@dataclass(frozen=True)
class ProfitSplit:
    total: int
    supplier_share: int
    profit: int


@dataclass(frozen=True)
class CartTotals:
    subtotal: int
    shipping_fee: int
    total: int
    supplier_share: int
    profit: int


def compute_split(items: Iterable[CartItem]) -> ProfitSplit:
    """
    Somme price*quantity et supplierCost*quantity (unités mineures) sur tout le panier.
    - profit = total - supplier_share, éventuellement négatif: ce calcul ne rejette rien.
    - Panier vide -> total 0 (à rejeter par l'appelant via ensure_payable).
    """
    total = 0
    supplier_share = 0
    for it in items or []:
        total += to_minor_units(it.price) * it.quantity
        supplier_share += to_minor_units(it.supplier_cost) * it.quantity
    return ProfitSplit(total=total, supplier_share=supplier_share, profit=total - supplier_share)


def split_from_application_fee(total: int, application_fee: int) -> ProfitSplit:
    """Modèle marketplace: la commission plateforme est le profit, le reste part au fournisseur."""
    fee = max(int(application_fee or 0), 0)
    return ProfitSplit(total=int(total), supplier_share=int(total) - fee, profit=fee)


def ensure_payable(split: ProfitSplit) -> ProfitSplit:
    """
    Garde-fou à appeler AVANT tout appel passerelle.
    - ValidationError si le total est nul (panier vide ou prix nuls).
    - ValidationError si le coût fournisseur dépasse le prix client (profit négatif).
    """
    if split.total <= 0:
        raise ValidationError("cartItems required")
    if split.profit < 0:
        raise ValidationError("Supplier cost exceeds customer price for items")
    return split


def price_cart(items: List[CartItem], region: str) -> CartTotals:
    """Totaux du checkout redirect: le forfait livraison s'ajoute après le calcul du profit."""
    split = compute_split(items)
    fee = resolve_fee(region)
    return CartTotals(
        subtotal=split.total,
        shipping_fee=fee,
        total=split.total + fee,
        supplier_share=split.supplier_share,
        profit=split.profit,
    )


def items_snapshot(items: Iterable[CartItem]) -> List[Dict[str, Any]]:
    """Copie opaque du panier stockée avec la commande (clés telles que reçues du front)."""
    return [it.model_dump(by_alias=True) for it in items or []]
