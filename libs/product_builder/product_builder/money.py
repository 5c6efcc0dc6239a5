"""
Montants en won entiers — arrondi demi-supérieur à chaque étape.
"""
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, Decimal]

_ROUNDINGS = {"floor": ROUND_FLOOR, "ceil": ROUND_CEILING, "round": ROUND_HALF_UP}


def _dec(value: Number) -> Decimal:
    # str() évite d'embarquer l'erreur binaire des floats (0.45 → 0.450000000000000011…)
    return value if isinstance(value, Decimal) else Decimal(str(value))


def won(value: Number) -> int:
    """Arrondi au won, demi-supérieur (1234.5 → 1235)."""
    return int(_dec(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def mul(value: Number, *factors: Number) -> int:
    """Produit exact puis un seul arrondi au won."""
    result = _dec(value)
    for f in factors:
        result *= _dec(f)
    return won(result)


def div(value: Number, divisor: int) -> int:
    if not divisor:
        return 0
    return won(_dec(value) / Decimal(divisor))


def apply_percent(value: int, percent: Number) -> int:
    """value × (1 + percent/100), arrondi au won."""
    return won(_dec(value) * (Decimal(100) + _dec(percent)) / Decimal(100))


def with_vat(value: int, rate: Number = 10) -> int:
    return apply_percent(value, rate)


def round_to_unit(value: int, unit: int = 100, method: str = "floor") -> int:
    """Arrondi d'affichage (절삭) : floor | ceil | round au multiple de `unit`."""
    if not value or unit <= 0:
        return value
    q = (Decimal(value) / Decimal(unit)).quantize(Decimal(1), rounding=_ROUNDINGS.get(method, ROUND_FLOOR))
    return int(q) * unit
