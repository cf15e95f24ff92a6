from __future__ import annotations

from flask import Blueprint, jsonify, request

from services.credit_economics import project_consumption
from services.money import money_to_float
from services.permissions import json_error, require_admin
from services.plans import PlanError, price_brl, price_per_analysis
from services.providers import current_exchange_rate, operation_costs, plan_catalog
from services.serializers import plan_to_dict, projection_to_dict

plans_bp = Blueprint("plans", __name__, url_prefix="/api")


@plans_bp.get("/plans")
@require_admin
def list_plans():
    plans = plan_catalog().list_plans()
    if request.args.get("details") not in {"1", "true"}:
        return jsonify([plan_to_dict(p) for p in plans])

    # Com details=1: preço em BRL e quantas operações o pacote rende
    rate = current_exchange_rate().rate
    costs = operation_costs()
    items = []
    for plan in plans:
        data = plan_to_dict(plan)
        data["priceBrl"] = money_to_float(price_brl(plan, rate))
        data["pricePerAnalysisUsd"] = money_to_float(price_per_analysis(plan, costs.analysis_credits), 4)
        data["consumption"] = projection_to_dict(project_consumption(plan.credits, costs))
        items.append(data)
    return jsonify(items)


@plans_bp.post("/plans/<plan_id>")
@require_admin
def update_plan(plan_id):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return json_error("invalid_payload", 422, "Envie um objeto JSON.")

    catalog = plan_catalog()
    if catalog.get_plan(plan_id) is None:
        return json_error("not_found", 404, f"Plano não encontrado: {plan_id}")

    popular = payload.get("popular")
    try:
        plan = catalog.update_plan(
            plan_id,
            name=payload.get("name"),
            credits=payload.get("credits"),
            price_usd=payload.get("priceUsd", payload.get("price_usd")),
            popular=popular if isinstance(popular, bool) else None,
        )
    except PlanError as exc:
        return json_error("invalid_plan", 422, str(exc))
    return jsonify(plan_to_dict(plan))
