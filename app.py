from flask import Flask, jsonify
from flask_login import LoginManager
from dotenv import load_dotenv
from sqlalchemy.exc import OperationalError

# Carrega variaveis de ambiente de .env (desenvolvimento local)
load_dotenv()

from config import Config
from models.extensions import db
from models.schema import init_db
from models.user_model import User

from routes.auth_routes import auth_bp
from routes.checkout_routes import checkout_bp
from routes.dashboard_routes import dashboard_bp
from routes.plans_routes import plans_bp
from routes.settings_routes import settings_bp
from routes.users_routes import users_bp

from services.permissions import json_error
from services.providers import register_services
from services.subscribers import seed_demo_subscribers


def _bearer_token(request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def create_app(overrides: dict | None = None, **services) -> Flask:
    """Monta a aplicação. ``overrides`` sobrescreve chaves de Config e
    ``services`` substitui stores/provedores registrados (ver services.providers)."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    init_db(app)
    register_services(app, **services)

    if app.config.get("SEED_DEMO_DATA"):
        with app.app_context():
            seed_demo_subscribers()

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.request_loader
    def load_user_from_request(request):
        token = _bearer_token(request)
        if not token:
            return None
        try:
            return User.from_api_token(token)
        except OperationalError:
            # Conexao SSL instavel em pools remotos: tenta limpar e reabrir.
            db.session.rollback()
            db.session.remove()
            db.engine.dispose()
            try:
                return User.from_api_token(token)
            except OperationalError:
                db.session.rollback()
                return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return json_error("not_authenticated", 401)

    app.register_blueprint(auth_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(plans_bp)
    app.register_blueprint(checkout_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(dashboard_bp)

    @app.errorhandler(404)
    def not_found(_err):
        return json_error("not_found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_err):
        return json_error("method_not_allowed", 405)

    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    create_app().run(debug=True, use_reloader=False)
