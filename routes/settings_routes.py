from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from services.asaas_settings import AsaasConfigError, check_connection, get_asaas_config, update_asaas_config
from services.credit_economics import operation_costs_brl
from services.external_costs import cost_and_exchange_snapshot
from services.fees import FeeCalculationError, enabled_methods, parse_spread
from services.money import money_to_float
from services.permissions import json_error, require_admin
from services.providers import (
    asaas_store,
    checkout_config,
    current_exchange_rate,
    exchange_rate_provider,
    operation_costs,
    settings_store,
)
from services.serializers import (
    asaas_changes_from_json,
    asaas_to_dict,
    connection_check_to_dict,
    operation_costs_to_dict,
    sample_to_dict,
    settings_changes_from_json,
    settings_to_dict,
)
from services.settings_store import update_checkout_config

settings_bp = Blueprint("settings", __name__, url_prefix="/api")


def _settings_payload(config) -> dict:
    data = settings_to_dict(config)
    data["enabledMethods"] = [m.value for m in enabled_methods(config)]
    return data


@settings_bp.get("/settings")
@require_admin
def get_settings():
    return jsonify(_settings_payload(checkout_config()))


@settings_bp.post("/settings")
@require_admin
def update_settings():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return json_error("invalid_payload", 422, "Envie um objeto JSON.")

    try:
        config = update_checkout_config(settings_store(), settings_changes_from_json(payload))
    except FeeCalculationError as exc:
        return json_error("invalid_settings", 422, str(exc))
    return jsonify(_settings_payload(config))


@settings_bp.get("/exchange-rate")
@require_admin
def exchange_rate():
    raw_spread = request.args.get("spread")
    spread = None
    if raw_spread not in (None, ""):
        try:
            spread = parse_spread(raw_spread)
        except FeeCalculationError as exc:
            return json_error("invalid_spread", 422, str(exc))

    sample = current_exchange_rate(spread)
    data = sample_to_dict(sample)
    if sample.is_fallback:
        data["warning"] = "Não foi possível consultar o câmbio. Usando valor padrão."
    return jsonify(data)


@settings_bp.get("/costs")
@require_admin
def costs():
    snapshot = cost_and_exchange_snapshot(exchange_rate_provider(), current_app.config)
    op_costs = operation_costs()
    per_operation = operation_costs_brl(op_costs, snapshot.exchange_rate.rate)
    return jsonify(
        {
            "exchangeRate": sample_to_dict(snapshot.exchange_rate),
            "cloudCost": {
                "monthlyCost": money_to_float(snapshot.cloud_cost.monthly_cost),
                "currency": snapshot.cloud_cost.currency,
                "source": snapshot.cloud_cost.source,
                "monthlyCostBrl": money_to_float(snapshot.cloud_cost_brl),
            },
            "operations": operation_costs_to_dict(op_costs),
            "operationCostsBrl": {k: money_to_float(v, 4) for k, v in per_operation.items()},
        }
    )


@settings_bp.get("/asaas")
@require_admin
def get_asaas():
    return jsonify(asaas_to_dict(get_asaas_config(asaas_store())))


@settings_bp.post("/asaas")
@require_admin
def update_asaas():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return json_error("invalid_payload", 422, "Envie um objeto JSON.")

    try:
        config = update_asaas_config(asaas_store(), asaas_changes_from_json(payload))
    except AsaasConfigError as exc:
        return json_error("invalid_asaas_config", 422, str(exc))
    return jsonify(asaas_to_dict(config))


@settings_bp.post("/asaas/test-connection")
@require_admin
def asaas_connection_check():
    check = check_connection(get_asaas_config(asaas_store()), checkout_config().webhook_secret)
    return jsonify(connection_check_to_dict(check))
