from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from services.exchange_rate import ExchangeRateSample
from services.fees import CheckoutConfig, FeeCalculationError, FeeQuote, PaymentMethod, calculate_fee
from services.ledger import PaymentTransaction, TransactionLedger
from services.plans import CreditPlan


@dataclass(frozen=True)
class CheckoutPreview:
    plan: CreditPlan
    method: PaymentMethod
    rate: Decimal
    rate_source: str
    price_brl: Decimal
    quote: FeeQuote

    @property
    def fee(self) -> Decimal:
        return self.quote.fee

    @property
    def total(self) -> Decimal:
        return self.quote.total


def build_checkout_preview(
    plan: CreditPlan,
    method,
    sample: ExchangeRateSample | None,
    config: CheckoutConfig,
) -> CheckoutPreview:
    """Plano (USD) -> BRL pela cotação com spread -> taxa do método."""
    method = PaymentMethod.parse(method)
    if not config.is_enabled(method):
        raise FeeCalculationError(f"Método {method.value} desabilitado no checkout.")

    if sample is not None:
        rate = sample.rate
        rate_source = sample.source
    else:
        rate = config.usd_to_brl_rate
        rate_source = "config"

    price_brl = plan.price_usd * rate
    quote = calculate_fee(price_brl, method, config)
    return CheckoutPreview(
        plan=plan,
        method=method,
        rate=rate,
        rate_source=rate_source,
        price_brl=quote.amount,
        quote=quote,
    )


def start_checkout(ledger: TransactionLedger, user_id: int, preview: CheckoutPreview) -> PaymentTransaction:
    return ledger.create(user_id, preview.plan.id, preview.total, preview.method)
