"""Formato JSON da API (camelCase, valores monetários como float)."""

from __future__ import annotations

from services.asaas_settings import ASAAS_FIELDS, AsaasConfig, ConnectionCheck, mask_api_key
from services.checkout import CheckoutPreview
from services.credit_economics import ConsumptionProjection, OperationCosts
from services.date_utils import isoformat
from services.exchange_rate import ExchangeRateSample
from services.fees import CONFIG_FIELDS, CheckoutConfig, FeeQuote
from services.ledger import PaymentTransaction
from services.money import money_to_float
from services.plans import CreditPlan, price_per_credit


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


SETTINGS_KEYS = {to_camel(f): f for f in CONFIG_FIELDS}


def settings_changes_from_json(payload: dict) -> dict:
    """Aceita chaves camelCase (pixFee) ou snake_case (pix_fee)."""
    changes = {}
    for key, value in (payload or {}).items():
        changes[SETTINGS_KEYS.get(key, key)] = value
    return changes


def settings_to_dict(config: CheckoutConfig) -> dict:
    data = {}
    for field in CONFIG_FIELDS:
        value = getattr(config, field)
        if field.endswith("_enabled") or field == "webhook_secret":
            data[to_camel(field)] = value
        elif field == "usd_to_brl_rate":
            data[to_camel(field)] = money_to_float(value, 4)
        else:
            data[to_camel(field)] = money_to_float(value)
    return data


ASAAS_KEYS = {to_camel(f): f for f in ASAAS_FIELDS}


def asaas_changes_from_json(payload: dict) -> dict:
    changes = {}
    for key, value in (payload or {}).items():
        changes[ASAAS_KEYS.get(key, key)] = value
    return changes


def asaas_to_dict(config: AsaasConfig) -> dict:
    # A chave nunca volta inteira para o painel
    return {
        "apiKey": mask_api_key(config.api_key),
        "apiKeyConfigured": config.has_api_key,
        "webhookUrl": config.webhook_url,
        "environment": config.environment.value,
        "cpfCnpj": config.cpf_cnpj,
        "accountName": config.account_name,
    }


def connection_check_to_dict(check: ConnectionCheck) -> dict:
    return {
        "success": check.success,
        "message": check.message,
        "environment": check.environment.value,
        "webhookSecretConfigured": check.webhook_secret_configured,
    }


def plan_to_dict(plan: CreditPlan) -> dict:
    return {
        "id": plan.id,
        "name": plan.name,
        "credits": plan.credits,
        "priceUsd": money_to_float(plan.price_usd),
        "pricePerCredit": money_to_float(price_per_credit(plan), 6) if plan.credits > 0 else None,
        "popular": plan.popular,
    }


def sample_to_dict(sample: ExchangeRateSample) -> dict:
    return {
        "baseRate": money_to_float(sample.base_rate, 4),
        "spread": money_to_float(sample.spread),
        "rate": money_to_float(sample.rate, 4),
        "timestamp": isoformat(sample.timestamp),
        "source": sample.source,
        "isFallback": sample.is_fallback,
    }


def quote_to_dict(quote: FeeQuote) -> dict:
    return {
        "amount": money_to_float(quote.amount),
        "method": quote.method.value,
        "feePercentage": money_to_float(quote.fee_percentage),
        "percentageFee": money_to_float(quote.percentage_fee),
        "fixedFee": money_to_float(quote.fixed_fee),
        "fee": money_to_float(quote.fee),
        "total": money_to_float(quote.total),
    }


def preview_to_dict(preview: CheckoutPreview) -> dict:
    return {
        "plan": plan_to_dict(preview.plan),
        "method": preview.method.value,
        "rate": money_to_float(preview.rate, 4),
        "rateSource": preview.rate_source,
        "priceBrl": money_to_float(preview.price_brl),
        "fee": money_to_float(preview.fee),
        "total": money_to_float(preview.total),
        "quote": quote_to_dict(preview.quote),
    }


def transaction_to_dict(txn: PaymentTransaction) -> dict:
    return {
        "id": txn.id,
        "userId": txn.user_id,
        "planId": txn.plan_id,
        "amount": money_to_float(txn.amount),
        "currency": txn.currency,
        "status": txn.status.value,
        "paymentMethod": txn.payment_method.value,
        "createdAt": isoformat(txn.created_at),
        "completedAt": isoformat(txn.completed_at),
        "asaasPaymentId": txn.asaas_payment_id,
    }


def operation_costs_to_dict(costs: OperationCosts) -> dict:
    return {
        "initialCredits": costs.initial_credits,
        "analysisCredits": costs.analysis_credits,
        "searchCredits": costs.search_credits,
        "geminiAnalysisCostUsd": money_to_float(costs.gemini_analysis_cost_usd),
        "geminiSearchCostUsd": money_to_float(costs.gemini_search_cost_usd),
    }


def projection_to_dict(projection: ConsumptionProjection) -> dict:
    return {
        "credits": projection.credits,
        "analyses": projection.analyses,
        "searches": projection.searches,
    }
