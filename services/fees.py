"""Taxas de pagamento do checkout (PIX, cartão, boleto).

Tudo aqui é puro: a mesma entrada (valor, método, config) sempre gera a mesma
cotação. O cálculo trabalha em centavos para que ``total == amount + fee``
valha exatamente, mesmo após cálculos repetidos.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from services.money import percent_of, quantize_money, to_decimal


class FeeCalculationError(ValueError):
    pass


class PaymentMethod(str, Enum):
    PIX = "pix"
    CREDIT_CARD = "credit_card"
    BOLETO = "boleto"

    @classmethod
    def parse(cls, value) -> "PaymentMethod":
        if isinstance(value, cls):
            return value
        text = (str(value or "")).strip().lower()
        for method in cls:
            if method.value == text:
                return method
        raise FeeCalculationError(f"Método de pagamento inválido: {value!r}")


@dataclass(frozen=True)
class CheckoutConfig:
    pix_enabled: bool = True
    credit_card_enabled: bool = True
    boleto_enabled: bool = True
    pix_fee: Decimal = Decimal("1.99")
    credit_card_fee: Decimal = Decimal("2.99")
    boleto_fee: Decimal = Decimal("1.99")
    fixed_fee: Decimal = Decimal("0.49")
    usd_to_brl_rate: Decimal = Decimal("5.53")
    checkout_spread: Decimal = Decimal("2.0")
    webhook_secret: str = ""

    def fee_percentage(self, method: PaymentMethod) -> Decimal:
        if method is PaymentMethod.PIX:
            return self.pix_fee
        if method is PaymentMethod.CREDIT_CARD:
            return self.credit_card_fee
        return self.boleto_fee

    def is_enabled(self, method: PaymentMethod) -> bool:
        if method is PaymentMethod.PIX:
            return self.pix_enabled
        if method is PaymentMethod.CREDIT_CARD:
            return self.credit_card_enabled
        return self.boleto_enabled

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_app_config(cls, config) -> "CheckoutConfig":
        return cls(
            pix_fee=to_decimal(config.get("PIX_FEE", "1.99")),
            credit_card_fee=to_decimal(config.get("CREDIT_CARD_FEE", "2.99")),
            boleto_fee=to_decimal(config.get("BOLETO_FEE", "1.99")),
            fixed_fee=to_decimal(config.get("FIXED_FEE", "0.49")),
            usd_to_brl_rate=to_decimal(config.get("USD_TO_BRL_RATE", "5.53")),
            checkout_spread=to_decimal(config.get("CHECKOUT_SPREAD_DEFAULT", "2.0")),
            webhook_secret=str(config.get("ASAAS_WEBHOOK_SECRET") or ""),
        )


_BOOL_FIELDS = ("pix_enabled", "credit_card_enabled", "boleto_enabled")
_PERCENT_FIELDS = ("pix_fee", "credit_card_fee", "boleto_fee")
CONFIG_FIELDS = tuple(f.name for f in fields(CheckoutConfig))

# Casas decimais gravadas em checkout_settings
_FIELD_PLACES = {
    "pix_fee": 3,
    "credit_card_fee": 3,
    "boleto_fee": 3,
    "fixed_fee": 2,
    "usd_to_brl_rate": 4,
    "checkout_spread": 3,
}
MIN_SPREAD = Decimal(-100)
MAX_SPREAD = Decimal(1000)
# Limite das colunas Numeric(10, 2) e Numeric(10, 4)
MAX_FIXED_FEE = Decimal("99999999.99")
MAX_USD_TO_BRL_RATE = Decimal("999999.9999")


def _parse_bool(value) -> bool | None:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return None


def _round_places(value: Decimal, places: int) -> Decimal:
    try:
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise FeeCalculationError(f"Valor fora do intervalo: {value}") from exc


def parse_spread(value) -> Decimal:
    """Spread percentual. Abaixo de -100 a cotação deixaria de ser positiva."""
    spread = to_decimal(value)
    if spread is None:
        raise FeeCalculationError("checkout_spread deve ser numérico.")
    spread = _round_places(spread, _FIELD_PLACES["checkout_spread"])
    if not (MIN_SPREAD < spread < MAX_SPREAD):
        raise FeeCalculationError("checkout_spread deve estar entre -100 e 1000 (exclusivo).")
    return spread


def validate_config_changes(changes: dict) -> dict:
    """Normaliza e valida uma atualização parcial da configuração.

    Retorna os campos convertidos. Qualquer campo inválido levanta
    ``FeeCalculationError`` e nada deve ser aplicado.
    """
    cleaned: dict = {}
    for key, raw in (changes or {}).items():
        if key not in CONFIG_FIELDS:
            raise FeeCalculationError(f"Campo desconhecido: {key}")

        if key in _BOOL_FIELDS:
            flag = _parse_bool(raw)
            if flag is None:
                raise FeeCalculationError(f"{key} deve ser booleano.")
            cleaned[key] = flag
            continue

        if key == "webhook_secret":
            secret = "" if raw is None else str(raw).strip()
            if len(secret) > 255:
                raise FeeCalculationError("webhook_secret deve ter no máximo 255 caracteres.")
            cleaned[key] = secret
            continue

        if key == "checkout_spread":
            cleaned[key] = parse_spread(raw)
            continue

        value = to_decimal(raw)
        if value is None:
            raise FeeCalculationError(f"{key} deve ser numérico.")
        value = _round_places(value, _FIELD_PLACES[key])
        if key in _PERCENT_FIELDS and not (Decimal(0) <= value <= Decimal(100)):
            raise FeeCalculationError(f"{key} deve estar entre 0 e 100.")
        if key == "fixed_fee" and not (0 <= value <= MAX_FIXED_FEE):
            raise FeeCalculationError("fixed_fee deve estar entre 0 e 99.999.999,99.")
        if key == "usd_to_brl_rate" and not (0 < value <= MAX_USD_TO_BRL_RATE):
            raise FeeCalculationError("usd_to_brl_rate deve ser positivo.")
        cleaned[key] = value
    return cleaned


def apply_config_changes(config: CheckoutConfig, changes: dict) -> CheckoutConfig:
    return replace(config, **validate_config_changes(changes))


@dataclass(frozen=True)
class FeeQuote:
    amount: Decimal
    fee_percentage: Decimal
    percentage_fee: Decimal
    fixed_fee: Decimal
    fee: Decimal
    total: Decimal
    method: PaymentMethod

    @property
    def net(self) -> Decimal:
        return self.amount - self.fee


def _positive_amount(amount) -> Decimal:
    value = to_decimal(amount)
    if value is None:
        raise FeeCalculationError(f"Valor inválido: {amount!r}")
    if value <= 0:
        raise FeeCalculationError("O valor deve ser maior que zero.")
    cents = quantize_money(value)
    if cents <= 0:
        raise FeeCalculationError("O valor deve ser de pelo menos R$ 0,01.")
    return cents


def calculate_fee(amount, method, config: CheckoutConfig) -> FeeQuote:
    method = PaymentMethod.parse(method)
    value = _positive_amount(amount)
    pct = config.fee_percentage(method)

    percentage_fee = percent_of(value, pct)
    fee = quantize_money(percentage_fee + config.fixed_fee)

    return FeeQuote(
        amount=value,
        fee_percentage=pct,
        percentage_fee=quantize_money(percentage_fee),
        fixed_fee=config.fixed_fee,
        fee=fee,
        total=value + fee,
        method=method,
    )


def net_amount(amount, method, config: CheckoutConfig) -> Decimal:
    """Valor líquido recebido após a taxa do gateway."""
    return calculate_fee(amount, method, config).net


def enabled_methods(config: CheckoutConfig) -> list[PaymentMethod]:
    return [m for m in PaymentMethod if config.is_enabled(m)]
