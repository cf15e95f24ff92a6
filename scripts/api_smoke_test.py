import os
import sys
import tempfile


def _setup_env():
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if root not in sys.path:
        sys.path.insert(0, root)
    tmpdir = tempfile.mkdtemp(prefix="api_smoke_")
    db_path = os.path.join(tmpdir, "api_smoke.db")
    os.environ.setdefault("DATABASE_URL", f"sqlite:///{db_path}")
    os.environ.setdefault("APP_ENV", "production")
    os.environ.setdefault("SECRET_KEY", "test-secret-key-please-change-32chars+")
    os.environ.setdefault("SEED_DEMO_DATA", "1")
    # Porta fechada: força o fallback de câmbio sem depender de rede
    os.environ.setdefault("EXCHANGE_RATE_URL", "http://127.0.0.1:9/bcb")
    os.environ.setdefault("EXCHANGE_RATE_TIMEOUT", "0.5")
    os.environ["ASAAS_API_KEY"] = ""


def main():
    _setup_env()

    from app import create_app
    from models.extensions import db
    from models.user_model import User

    app = create_app()

    results = []

    def check(label, condition):
        if not condition:
            raise AssertionError(label)
        results.append(label)

    with app.app_context():
        user = User(name="Admin", email="admin@example.test", is_admin=True)
        user.set_password("Secret123")
        db.session.add(user)
        db.session.commit()

    client = app.test_client()

    resp = client.get("/api/settings")
    check("auth_required", resp.status_code == 401)

    resp = client.post("/api/login", json={"email": "admin@example.test", "password": "wrong"})
    check("bad_password_rejected", resp.status_code == 401)

    resp = client.post("/api/login", json={"email": "admin@example.test", "password": "Secret123"})
    check("login_ok", resp.status_code == 200)
    token = resp.get_json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    resp = client.get("/api/exchange-rate?spread=0", headers=headers)
    data = resp.get_json() or {}
    check("exchange_rate_fallback", data.get("baseRate") == 5.53 and data.get("isFallback") is True)

    resp = client.post("/api/checkout/preview", json={"planId": "plan_1", "method": "pix"}, headers=headers)
    data = resp.get_json() or {}
    check("checkout_preview", resp.status_code == 200 and data.get("total", 0) > data.get("priceBrl", 0))

    resp = client.post("/api/settings", json={"pixFee": 150}, headers=headers)
    check("invalid_settings_rejected", resp.status_code == 422)

    resp = client.post("/api/asaas/test-connection", headers=headers)
    check("asaas_without_key", (resp.get_json() or {}).get("message") == "API Key não configurada")

    resp = client.post("/api/checkout", json={"userId": 1, "planId": "plan_2", "method": "pix"}, headers=headers)
    check("checkout_created", resp.status_code == 201)
    txn_id = resp.get_json()["transaction"]["id"]

    resp = client.post(f"/api/transactions/{txn_id}/status", json={"status": "completed"}, headers=headers)
    check("transaction_completed", (resp.get_json() or {}).get("completedAt") is not None)

    resp = client.post(f"/api/transactions/{txn_id}/status", json={"status": "failed"}, headers=headers)
    check("terminal_state_locked", resp.status_code == 409)

    resp = client.post("/api/users/2/activation", json={"activationMode": "manual", "manualActivationDays": 30}, headers=headers)
    data = resp.get_json() or {}
    check("manual_activation", data.get("activationMode") == "manual" and data.get("remainingDays") == 30)

    resp = client.post("/api/lastlink/sync", headers=headers)
    check("lastlink_sync", (resp.get_json() or {}).get("syncedUsers") == 8)

    resp = client.get("/api/users?search=maria", headers=headers)
    users = (resp.get_json() or {}).get("users") or []
    check("sync_keeps_manual_mode", users and users[0]["activationMode"] == "manual")

    resp = client.post("/api/logout", headers=headers)
    check("logout_ok", resp.status_code == 200)
    resp = client.get("/api/me", headers=headers)
    check("token_revoked", resp.status_code == 401)

    print("OK - API smoke tests passed:")
    for item in results:
        print(f"- {item}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
