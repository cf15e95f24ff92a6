import pytest

from app import create_app
from models.extensions import db
from models.user_model import User
from services.exchange_rate import ExchangeRateProvider
from tests.fakes import FakeSession, bcb_response

ADMIN_EMAIL = "admin@example.test"
ADMIN_PASSWORD = "Secret123"
OPERATOR_EMAIL = "operador@example.test"


@pytest.fixture
def bcb_session():
    return FakeSession(bcb_response("5.0000"))


@pytest.fixture
def app_factory(tmp_path, bcb_session):
    def _make(**overrides):
        config = {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
            "SECRET_KEY": "test-secret-key-0123456789-abcdefghij",
            "SEED_DEMO_DATA": True,
        }
        config.update(overrides)
        app = create_app(
            config,
            exchange_rate_provider=ExchangeRateProvider("https://bcb.test/dados", timeout=5, session=bcb_session),
        )
        with app.app_context():
            if User.query.filter_by(email=ADMIN_EMAIL).first() is None:
                admin = User(name="Admin", email=ADMIN_EMAIL, is_admin=True)
                admin.set_password(ADMIN_PASSWORD)
                operator = User(name="Operador", email=OPERATOR_EMAIL, is_admin=False)
                operator.set_password(ADMIN_PASSWORD)
                db.session.add_all([admin, operator])
                db.session.commit()
        return app

    return _make


@pytest.fixture
def app(app_factory):
    app = app_factory()
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email):
    resp = client.post("/api/login", json={"email": email, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["access_token"]


@pytest.fixture
def admin_token(client):
    return _login(client, ADMIN_EMAIL)


@pytest.fixture
def auth(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def operator_auth(client):
    return {"Authorization": f"Bearer {_login(client, OPERATOR_EMAIL)}"}
