from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import jsonify
from flask_login import current_user


@dataclass(frozen=True)
class AccessDecision:
    ok: bool
    status: int = 200
    error: str | None = None


def json_error(error: str, status: int, message: str | None = None):
    body = {"error": error}
    if message:
        body["message"] = message
    return jsonify(body), status


def evaluate_access(user, *, require_admin: bool = True) -> AccessDecision:
    if not user or not getattr(user, "is_authenticated", False):
        return AccessDecision(False, 401, "not_authenticated")

    if not getattr(user, "is_active", False):
        return AccessDecision(False, 403, "account_disabled")

    if require_admin and not getattr(user, "is_admin", False):
        return AccessDecision(False, 403, "admin_required")

    return AccessDecision(True)


def require_api_access(*, require_admin: bool = True):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            decision = evaluate_access(current_user, require_admin=require_admin)
            if not decision.ok:
                return json_error(decision.error or "forbidden", decision.status)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def require_admin(fn):
    """Decorator para endpoints do painel (somente operadores admin)."""
    return require_api_access(require_admin=True)(fn)
