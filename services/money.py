"""Aritmética monetária em Decimal.

Valores em reais/dólares circulam como ``Decimal`` e são arredondados para
centavos (ROUND_HALF_UP). Nunca usamos float para acumular taxas.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal | None:
    """Converte int/float/str/Decimal para Decimal; ``None`` se inválido."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        # str() evita carregar a representação binária do float
        result = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    if not result.is_finite():
        return None
    return result


def quantize_money(value) -> Decimal:
    amount = value if isinstance(value, Decimal) else to_decimal(value)
    if amount is None:
        raise ValueError(f"Valor monetário inválido: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    return amount * percentage / HUNDRED


def apply_percentage(amount: Decimal, percentage: Decimal) -> Decimal:
    """amount * (1 + percentage/100)."""
    return amount * (Decimal(1) + percentage / HUNDRED)


def money_to_float(value: Decimal | None, places: int = 2) -> float | None:
    if value is None:
        return None
    exp = Decimal(1).scaleb(-places)
    return float(value.quantize(exp, rounding=ROUND_HALF_UP))
