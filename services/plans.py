"""Catálogo de planos de créditos (compra avulsa).

Centraliza:
- os pacotes padrão (créditos x preço em USD)
- leitura ordenada e busca por id
- edição pelo admin (campos nomeados, last-write-wins)
- métricas derivadas (preço por crédito, preço em BRL)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Protocol

from services.money import quantize_money, to_decimal


class PlanError(ValueError):
    pass


@dataclass(frozen=True)
class CreditPlan:
    id: str
    name: str
    credits: int
    price_usd: Decimal
    popular: bool = False


DEFAULT_PLANS: tuple[CreditPlan, ...] = (
    CreditPlan("plan_1", "Bronze", 500, Decimal("5.99")),
    CreditPlan("plan_2", "Prata", 1200, Decimal("11.99")),
    CreditPlan("plan_3", "Ouro", 3000, Decimal("25.99"), popular=True),
    CreditPlan("plan_4", "Platina", 7000, Decimal("49.99")),
)


class PlanStore(Protocol):
    def all(self) -> list[CreditPlan]: ...

    def get(self, plan_id: str) -> CreditPlan | None: ...

    def save(self, plan: CreditPlan) -> CreditPlan: ...


class InMemoryPlanStore:
    def __init__(self, plans: Iterable[CreditPlan] = DEFAULT_PLANS) -> None:
        # dict preserva a ordem de inserção
        self._plans: dict[str, CreditPlan] = {p.id: p for p in plans}

    def all(self) -> list[CreditPlan]:
        return list(self._plans.values())

    def get(self, plan_id: str) -> CreditPlan | None:
        return self._plans.get(plan_id)

    def save(self, plan: CreditPlan) -> CreditPlan:
        self._plans[plan.id] = plan
        return plan


def _parse_credits(value) -> int:
    if isinstance(value, bool):
        raise PlanError("credits deve ser um inteiro positivo.")
    if isinstance(value, int):
        credits = value
    else:
        text = str(value or "").strip()
        if not text.isdigit():
            raise PlanError("credits deve ser um inteiro positivo.")
        credits = int(text)
    if credits <= 0:
        raise PlanError("credits deve ser um inteiro positivo.")
    return credits


def _parse_price(value) -> Decimal:
    # Validado já em centavos, como é gravado
    price = to_decimal(value)
    if price is None:
        raise PlanError("price_usd deve ser maior que zero.")
    price = quantize_money(price)
    if price <= 0:
        raise PlanError("price_usd deve ser de pelo menos US$ 0,01.")
    return price


class PlanCatalog:
    def __init__(self, store: PlanStore | None = None) -> None:
        self.store = store if store is not None else InMemoryPlanStore()

    def list_plans(self) -> list[CreditPlan]:
        return self.store.all()

    def get_plan(self, plan_id: str) -> CreditPlan | None:
        if not plan_id:
            return None
        return self.store.get(str(plan_id).strip())

    def update_plan(
        self,
        plan_id: str,
        *,
        name: str | None = None,
        credits=None,
        price_usd=None,
        popular: bool | None = None,
    ) -> CreditPlan:
        plan = self.get_plan(plan_id)
        if plan is None:
            raise PlanError(f"Plano não encontrado: {plan_id}")

        changes: dict = {}
        if name is not None:
            clean_name = str(name).strip()
            if not clean_name:
                raise PlanError("name não pode ser vazio.")
            changes["name"] = clean_name
        if credits is not None:
            changes["credits"] = _parse_credits(credits)
        if price_usd is not None:
            changes["price_usd"] = _parse_price(price_usd)
        if popular is not None:
            changes["popular"] = bool(popular)

        if not changes:
            return plan
        return self.store.save(replace(plan, **changes))


def price_per_credit(plan: CreditPlan) -> Decimal:
    if plan.credits <= 0:
        raise PlanError(f"Plano {plan.id} sem créditos: preço por crédito indefinido.")
    return plan.price_usd / Decimal(plan.credits)


def price_brl(plan: CreditPlan, rate) -> Decimal:
    value = to_decimal(rate)
    if value is None or value <= 0:
        raise PlanError("Taxa de câmbio inválida.")
    return plan.price_usd * value


def price_per_analysis(plan: CreditPlan, analysis_credits: int) -> Decimal:
    """Quanto custa (USD) uma análise comprando por este plano."""
    if analysis_credits <= 0:
        raise PlanError("Custo de análise deve ser positivo.")
    return price_per_credit(plan) * Decimal(analysis_credits)
