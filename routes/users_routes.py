from __future__ import annotations

from flask import Blueprint, jsonify, make_response, request

from models.extensions import db
from models.terms_model import TermsSignature
from services.activation import ActivationError
from services.date_utils import isoformat, utcnow
from services.lastlink import sync_subscribers
from services.permissions import json_error, require_admin
from services.providers import lastlink_source
from services.rate_limiter import client_ip
from services.subscribers import (
    CREDIT_BUCKETS,
    STATUSES,
    SubscriberError,
    add_credits,
    change_activation,
    export_csv,
    filter_subscribers,
    get_subscriber,
    list_subscribers,
    subscriber_to_dict,
    summarize,
    toggle_status,
    update_profile,
)
from services.terms import get_current_terms, sign_terms

users_bp = Blueprint("users", __name__, url_prefix="/api")


def _terms_dates() -> dict:
    return {row.user_id: row.signed_at for row in TermsSignature.query.all()}


def _serialize(subscriber, terms_dates: dict | None = None, now=None) -> dict:
    if terms_dates is None:
        terms_dates = _terms_dates()
    return subscriber_to_dict(subscriber, now=now, terms_signed_at=terms_dates.get(subscriber.id))


def _filtered():
    status = (request.args.get("status") or "all").strip().lower()
    bucket = (request.args.get("credits") or "all").strip().lower()
    if status not in ("all",) + STATUSES:
        status = "all"
    if bucket not in ("all",) + CREDIT_BUCKETS:
        bucket = "all"
    return filter_subscribers(
        list_subscribers(),
        search=request.args.get("search") or "",
        status=status,
        bucket=bucket,
    )


@users_bp.get("/users")
@require_admin
def list_users():
    now = utcnow()
    terms_dates = _terms_dates()
    items = _filtered()
    summary = summarize(list_subscribers())
    return jsonify(
        {
            "users": [_serialize(s, terms_dates, now) for s in items],
            "summary": {
                "total": summary.total,
                "active": summary.active,
                "totalCredits": summary.total_credits,
                "lowCreditActive": summary.low_credit_active,
                "manualActivation": summary.manual_activation,
            },
        }
    )


@users_bp.get("/users/export")
@require_admin
def export_users():
    content = export_csv(_filtered(), terms_dates=_terms_dates())
    filename = f"usuarios_genesis_{utcnow().date().isoformat()}.csv"
    response = make_response(content)
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    response.headers["Content-Type"] = "text/csv; charset=utf-8"
    return response


def _load_or_404(user_id):
    subscriber = get_subscriber(user_id)
    if subscriber is None:
        return None, json_error("not_found", 404, "Usuário não encontrado.")
    return subscriber, None


@users_bp.get("/users/<int:user_id>")
@require_admin
def get_user(user_id):
    subscriber, error = _load_or_404(user_id)
    if error is not None:
        return error
    return jsonify(_serialize(subscriber))


@users_bp.post("/users/<int:user_id>")
@require_admin
def update_user(user_id):
    subscriber, error = _load_or_404(user_id)
    if error is not None:
        return error

    payload = request.get_json(silent=True) or {}
    try:
        update_profile(
            subscriber,
            name=payload.get("name"),
            email=payload.get("email"),
            credits=payload.get("credits"),
        )
    except SubscriberError as exc:
        db.session.rollback()
        return json_error("invalid_user", 422, str(exc))
    return jsonify(_serialize(subscriber))


@users_bp.post("/users/<int:user_id>/credits")
@require_admin
def add_user_credits(user_id):
    subscriber, error = _load_or_404(user_id)
    if error is not None:
        return error

    payload = request.get_json(silent=True) or {}
    try:
        add_credits(subscriber, payload.get("credits"))
    except SubscriberError as exc:
        return json_error("invalid_credits", 422, str(exc))
    return jsonify(_serialize(subscriber))


@users_bp.post("/users/<int:user_id>/status")
@require_admin
def toggle_user_status(user_id):
    subscriber, error = _load_or_404(user_id)
    if error is not None:
        return error
    toggle_status(subscriber)
    return jsonify(_serialize(subscriber))


@users_bp.post("/users/<int:user_id>/activation")
@require_admin
def update_user_activation(user_id):
    subscriber, error = _load_or_404(user_id)
    if error is not None:
        return error

    payload = request.get_json(silent=True) or {}
    try:
        change_activation(subscriber, payload)
    except ActivationError as exc:
        db.session.rollback()
        return json_error("invalid_activation", 422, str(exc))
    return jsonify(_serialize(subscriber))


@users_bp.post("/lastlink/sync")
@require_admin
def lastlink_sync():
    result = sync_subscribers(list_subscribers(), lastlink_source())
    db.session.commit()
    return jsonify(
        {
            "success": result.success,
            "message": result.message,
            "syncedUsers": result.synced_users,
            "updatedSubscriptions": result.updated_subscriptions,
            "timestamp": isoformat(result.timestamp),
        }
    )


@users_bp.get("/terms")
@require_admin
def current_terms():
    terms = get_current_terms()
    return jsonify(
        {
            "id": terms.id,
            "version": terms.version,
            "content": terms.content,
            "createdDate": terms.created_date,
            "lastUpdated": terms.last_updated,
        }
    )


@users_bp.post("/users/<int:user_id>/terms")
@require_admin
def sign_user_terms(user_id):
    subscriber, error = _load_or_404(user_id)
    if error is not None:
        return error

    signature = sign_terms(subscriber.id, client_ip(), request.headers.get("User-Agent"))
    return jsonify(
        {
            "userId": signature.user_id,
            "termsVersion": signature.terms_version,
            "signedAt": isoformat(signature.signed_at),
            "ipAddress": signature.ip_address,
            "userAgent": signature.user_agent,
        }
    )
