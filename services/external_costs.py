"""Custos externos (infraestrutura) e câmbio consolidados para o painel."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from services.date_utils import utcnow
from services.exchange_rate import ExchangeRateProvider, ExchangeRateSample
from services.money import to_decimal

DEFAULT_CLOUD_MONTHLY_COST_USD = Decimal("847.15")


@dataclass(frozen=True)
class CloudCostSample:
    monthly_cost: Decimal
    currency: str
    timestamp: datetime
    source: str


@dataclass(frozen=True)
class CostSnapshot:
    exchange_rate: ExchangeRateSample
    cloud_cost: CloudCostSample
    cloud_cost_brl: Decimal


def get_cloud_cost(config) -> CloudCostSample:
    # Sem integração com o Billing API: valor configurado
    monthly = to_decimal(config.get("CLOUD_MONTHLY_COST_USD"))
    if monthly is None or monthly < 0:
        monthly = DEFAULT_CLOUD_MONTHLY_COST_USD
    return CloudCostSample(
        monthly_cost=monthly,
        currency="USD",
        timestamp=utcnow(),
        source="Google Cloud Billing (simulado)",
    )


def cost_and_exchange_snapshot(provider: ExchangeRateProvider, config) -> CostSnapshot:
    # Custos de infraestrutura usam a cotação sem spread
    sample = provider.get_rate(spread_override=0)
    cloud = get_cloud_cost(config)
    return CostSnapshot(
        exchange_rate=sample,
        cloud_cost=cloud,
        cloud_cost_brl=cloud.monthly_cost * sample.rate,
    )
