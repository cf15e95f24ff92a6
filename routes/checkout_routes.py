from __future__ import annotations

from flask import Blueprint, jsonify, request

from services.checkout import build_checkout_preview, start_checkout
from services.fees import FeeCalculationError
from services.ledger import InvalidTransition, LedgerError
from services.permissions import json_error, require_admin
from services.providers import checkout_config, current_exchange_rate, ledger, plan_catalog
from services.serializers import preview_to_dict, transaction_to_dict
from services.subscribers import get_subscriber

checkout_bp = Blueprint("checkout", __name__, url_prefix="/api")


def _preview_from_payload(payload: dict):
    plan_id = payload.get("planId") or payload.get("plan_id")
    plan = plan_catalog().get_plan(plan_id)
    if plan is None:
        return None, json_error("not_found", 404, f"Plano não encontrado: {plan_id}")

    config = checkout_config()
    try:
        preview = build_checkout_preview(plan, payload.get("method"), current_exchange_rate(), config)
    except FeeCalculationError as exc:
        return None, json_error("invalid_checkout", 422, str(exc))
    return preview, None


@checkout_bp.post("/checkout/preview")
@require_admin
def checkout_preview():
    payload = request.get_json(silent=True) or {}
    preview, error = _preview_from_payload(payload)
    if error is not None:
        return error
    return jsonify(preview_to_dict(preview))


@checkout_bp.post("/checkout")
@require_admin
def checkout_start():
    payload = request.get_json(silent=True) or {}
    user_id = payload.get("userId") or payload.get("user_id")
    if get_subscriber(user_id) is None:
        return json_error("not_found", 404, "Usuário não encontrado.")

    preview, error = _preview_from_payload(payload)
    if error is not None:
        return error

    try:
        txn = start_checkout(ledger(), int(user_id), preview)
    except LedgerError as exc:
        return json_error("invalid_transaction", 422, str(exc))
    return jsonify({"transaction": transaction_to_dict(txn), "preview": preview_to_dict(preview)}), 201


@checkout_bp.get("/transactions")
@require_admin
def list_transactions():
    user_id = request.args.get("user_id") or request.args.get("userId")
    if user_id:
        try:
            items = ledger().list_by_user(int(user_id))
        except ValueError:
            return json_error("invalid_user_id", 422)
    else:
        items = ledger().list_all()
    return jsonify([transaction_to_dict(t) for t in items])


@checkout_bp.get("/transactions/<txn_id>")
@require_admin
def get_transaction(txn_id):
    txn = ledger().get(txn_id)
    if txn is None:
        return json_error("not_found", 404)
    return jsonify(transaction_to_dict(txn))


@checkout_bp.post("/transactions/<txn_id>/status")
@require_admin
def update_transaction_status(txn_id):
    payload = request.get_json(silent=True) or {}
    try:
        txn = ledger().update_status(txn_id, payload.get("status"))
    except InvalidTransition as exc:
        return json_error("invalid_transition", 409, str(exc))
    except LedgerError as exc:
        return json_error("invalid_status", 422, str(exc))
    if txn is None:
        return json_error("not_found", 404)
    return jsonify(transaction_to_dict(txn))
