from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from models.extensions import db
from models.user_model import User
from services.permissions import json_error
from services.rate_limiter import throttle

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/login")
def login():
    payload = request.get_json(silent=True) or {}
    email = str(payload.get("email") or "").strip().lower()
    password = str(payload.get("password") or "")

    rate_block = throttle(
        "login",
        limit=int(current_app.config.get("RATE_LIMIT_LOGIN", 10)),
        window=int(current_app.config.get("RATE_LIMIT_LOGIN_WINDOW", 900)),
        identifier=email or None,
    )
    if rate_block is not None:
        return rate_block

    if not email or not password:
        return json_error("missing_credentials", 422, "Preencha e-mail e senha.")

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        return json_error("invalid_credentials", 401, "E-mail ou senha inválidos.")

    if not user.is_active:
        return json_error("account_disabled", 403, "Conta desativada.")

    return jsonify({"access_token": user.generate_api_token(), "token_type": "Bearer", "user": user.to_dict()})


@auth_bp.post("/logout")
@login_required
def logout():
    # Novo token_version invalida todos os tokens já emitidos
    current_user.token_version = (current_user.token_version or 0) + 1
    db.session.commit()
    return jsonify({"ok": True})


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(current_user.to_dict())
