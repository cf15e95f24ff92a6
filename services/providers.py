"""Acesso aos serviços registrados na aplicação (stores, câmbio, Lastlink).

``create_app`` registra tudo em ``app.extensions["genesis"]``; testes podem
trocar qualquer item (ex.: um provedor de câmbio falso).
"""

from __future__ import annotations

from flask import current_app

from services.asaas_settings import AsaasConfig, AsaasSettingsStore
from services.credit_economics import OperationCosts
from services.exchange_rate import ExchangeRateProvider, ExchangeRateSample
from services.fees import CheckoutConfig
from services.lastlink import LastlinkSource, StaticLastlinkSource
from services.ledger import TransactionLedger
from services.plans import PlanCatalog
from services.settings_store import SettingsStore, get_checkout_config, get_checkout_spread
from services.sql_stores import SqlAsaasSettingsStore, SqlPlanStore, SqlSettingsStore, SqlTransactionStore

EXTENSION_KEY = "genesis"


def register_services(app, **overrides) -> dict:
    defaults = CheckoutConfig.from_app_config(app.config)
    services = {
        "settings_store": SqlSettingsStore(defaults),
        "asaas_store": SqlAsaasSettingsStore(AsaasConfig.from_app_config(app.config)),
        "plan_catalog": PlanCatalog(SqlPlanStore()),
        "ledger": TransactionLedger(SqlTransactionStore()),
        "exchange_rate_provider": ExchangeRateProvider.from_app_config(app.config),
        "lastlink_source": StaticLastlinkSource(),
        "operation_costs": OperationCosts.from_app_config(app.config),
    }
    services.update(overrides)
    app.extensions[EXTENSION_KEY] = services
    return services


def _get(name: str):
    return current_app.extensions[EXTENSION_KEY][name]


def settings_store() -> SettingsStore:
    return _get("settings_store")


def checkout_config() -> CheckoutConfig:
    return get_checkout_config(settings_store())


def asaas_store() -> AsaasSettingsStore:
    return _get("asaas_store")


def plan_catalog() -> PlanCatalog:
    return _get("plan_catalog")


def ledger() -> TransactionLedger:
    return _get("ledger")


def exchange_rate_provider() -> ExchangeRateProvider:
    return _get("exchange_rate_provider")


def lastlink_source() -> LastlinkSource:
    return _get("lastlink_source")


def operation_costs() -> OperationCosts:
    return _get("operation_costs")


def current_exchange_rate(spread_override=None) -> ExchangeRateSample:
    """Cotação com o spread do checkout salvo, salvo override explícito."""
    if spread_override is None:
        spread_override = get_checkout_spread(settings_store())
    return exchange_rate_provider().get_rate(spread_override=spread_override)
