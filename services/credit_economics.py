"""Economia de créditos: quanto o usuário consome e quanto custa operar."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from services.money import HUNDRED, to_decimal


@dataclass(frozen=True)
class OperationCosts:
    initial_credits: int = 2100
    analysis_credits: int = 100
    search_credits: int = 20
    gemini_analysis_cost_usd: Decimal = Decimal("0.15")
    gemini_search_cost_usd: Decimal = Decimal("0.03")

    @classmethod
    def from_app_config(cls, config) -> "OperationCosts":
        return cls(
            initial_credits=int(config.get("INITIAL_CREDITS", 2100)),
            analysis_credits=int(config.get("ANALYSIS_CREDITS", 100)),
            search_credits=int(config.get("SEARCH_CREDITS", 20)),
            gemini_analysis_cost_usd=to_decimal(config.get("GEMINI_ANALYSIS_COST_USD", "0.15")),
            gemini_search_cost_usd=to_decimal(config.get("GEMINI_SEARCH_COST_USD", "0.03")),
        )


@dataclass(frozen=True)
class ConsumptionProjection:
    credits: int
    analyses: int
    searches: int


def project_consumption(credits: int, costs: OperationCosts) -> ConsumptionProjection:
    if costs.analysis_credits <= 0 or costs.search_credits <= 0:
        raise ValueError("Custo de operação em créditos deve ser positivo.")
    credits = max(int(credits), 0)
    return ConsumptionProjection(
        credits=credits,
        analyses=credits // costs.analysis_credits,
        searches=credits // costs.search_credits,
    )


def operation_costs_brl(costs: OperationCosts, rate) -> dict[str, Decimal]:
    value = to_decimal(rate)
    if value is None or value <= 0:
        raise ValueError("Taxa de câmbio inválida.")
    return {
        "analysis": costs.gemini_analysis_cost_usd * value,
        "search": costs.gemini_search_cost_usd * value,
    }


@dataclass(frozen=True)
class FinancialSummary:
    revenue: Decimal
    costs: Decimal
    net_profit: Decimal
    margin_pct: Decimal


def financial_summary(revenue, costs) -> FinancialSummary:
    revenue_value = to_decimal(revenue) or Decimal(0)
    costs_value = to_decimal(costs) or Decimal(0)
    net = revenue_value - costs_value
    margin = (net / revenue_value * HUNDRED) if revenue_value else Decimal(0)
    return FinancialSummary(
        revenue=revenue_value,
        costs=costs_value,
        net_profit=net,
        margin_pct=margin,
    )
