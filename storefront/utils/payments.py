"""
Helpers numériques partagés par les endpoints du bridge (montants, quantités).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional


def safe_number(value: Any) -> Optional[Decimal]:
    """
    Convertit une valeur JSON (int, float, str) en Decimal fini.
    - Retourne None si la conversion échoue, si la valeur est infinie/NaN, ou pour un booléen
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        num = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not num.is_finite():
        return None
    return num


def round_half_up(value: Decimal) -> int:
    """Arrondi à l'entier le plus proche, demi vers le haut (0.5 -> 1)."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
