import os
from datetime import timedelta

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not str(value).strip():
        return default
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        return default


class Config:
    # Ambiente (opcional) - use para rotular logs
    APP_ENV = (
        os.getenv("APP_ENV")
        or os.getenv("FLASK_ENV")
        or os.getenv("ENV")
        or "development"
    ).lower()
    IS_PRODUCTION = APP_ENV in {"prod", "production"}

    APP_NAME = (os.getenv("APP_NAME", "Gênesis Admin") or "").strip() or "Gênesis Admin"
    APP_COMPANY = (os.getenv("APP_COMPANY", "Gênesis Labs") or "").strip() or "Gênesis Labs"

    def _is_weak_secret(value: str) -> bool:
        if not value:
            return True
        if value == "dev-secret-change-me":
            return True
        if len(value) < 32:
            return True
        return False

    # Assina os tokens Bearer do painel
    SECRET_KEY = os.getenv("SECRET_KEY", "")
    if not SECRET_KEY:
        SECRET_KEY = "dev-secret-change-me"
    if IS_PRODUCTION and _is_weak_secret(SECRET_KEY):
        raise RuntimeError("SECRET_KEY ausente ou fraco em produção.")

    # Banco:
    # - Local: sqlite
    # - Produção: DATABASE_URL (Postgres)
    DATABASE_URL = os.getenv("DATABASE_URL")

    if DATABASE_URL:
        # Alguns provedores usam "postgres://", SQLAlchemy prefere "postgresql://"
        if DATABASE_URL.startswith("postgres://"):
            DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

        if DATABASE_URL.startswith("postgresql+psycopg2://"):
            DATABASE_URL = DATABASE_URL.replace(
                "postgresql+psycopg2://", "postgresql+psycopg://", 1
            )

        # Sem driver explícito (postgresql://), força psycopg (v3)
        if DATABASE_URL.startswith("postgresql://"):
            DATABASE_URL = DATABASE_URL.replace(
                "postgresql://", "postgresql+psycopg://", 1
            )

        SQLALCHEMY_DATABASE_URI = DATABASE_URL
    else:
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + os.path.join(BASE_DIR, "genesis.db")

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", "280")),
    }

    DEBUG = _env_bool("DEBUG", default=not IS_PRODUCTION)
    if IS_PRODUCTION:
        DEBUG = False
    TESTING = _env_bool("TESTING", default=False)

    # Validade do token Bearer (segundos)
    API_TOKEN_MAX_AGE = int(os.getenv("API_TOKEN_MAX_AGE", str(int(timedelta(days=7).total_seconds()))))

    # Câmbio USD/BRL (Banco Central do Brasil, série 1)
    EXCHANGE_RATE_URL = os.getenv(
        "EXCHANGE_RATE_URL",
        "https://api.bcb.gov.br/dados/serie/bcdata.sgs.1/dados/ultimos/1?formato=json",
    )
    EXCHANGE_RATE_TIMEOUT = _env_float("EXCHANGE_RATE_TIMEOUT", 5.0)
    EXCHANGE_RATE_FALLBACK = _env_float("EXCHANGE_RATE_FALLBACK", 5.53)
    CHECKOUT_SPREAD_DEFAULT = _env_float("CHECKOUT_SPREAD_DEFAULT", 2.0)

    # Checkout (valores iniciais; depois o admin edita via /api/settings)
    PIX_FEE = _env_float("PIX_FEE", 1.99)
    CREDIT_CARD_FEE = _env_float("CREDIT_CARD_FEE", 2.99)
    BOLETO_FEE = _env_float("BOLETO_FEE", 1.99)
    FIXED_FEE = _env_float("FIXED_FEE", 0.49)
    USD_TO_BRL_RATE = _env_float("USD_TO_BRL_RATE", 5.53)
    ASAAS_WEBHOOK_SECRET = os.getenv("ASAAS_WEBHOOK_SECRET", "")

    # Conta Asaas (valores iniciais; depois o admin edita via /api/asaas)
    ASAAS_API_KEY = os.getenv("ASAAS_API_KEY", "")
    ASAAS_ENVIRONMENT = os.getenv("ASAAS_ENVIRONMENT", "sandbox")
    ASAAS_WEBHOOK_URL = os.getenv("ASAAS_WEBHOOK_URL", "")
    ASAAS_CPF_CNPJ = os.getenv("ASAAS_CPF_CNPJ", "")
    ASAAS_ACCOUNT_NAME = os.getenv("ASAAS_ACCOUNT_NAME", "Gênesis")

    # Economia de créditos
    INITIAL_CREDITS = int(os.getenv("INITIAL_CREDITS", "2100"))
    ANALYSIS_CREDITS = int(os.getenv("ANALYSIS_CREDITS", "100"))
    SEARCH_CREDITS = int(os.getenv("SEARCH_CREDITS", "20"))
    GEMINI_ANALYSIS_COST_USD = _env_float("GEMINI_ANALYSIS_COST_USD", 0.15)
    GEMINI_SEARCH_COST_USD = _env_float("GEMINI_SEARCH_COST_USD", 0.03)

    # Custo mensal de infraestrutura (Google Cloud, simulado)
    CLOUD_MONTHLY_COST_USD = _env_float("CLOUD_MONTHLY_COST_USD", 847.15)

    # Rate limiting (em memória - produção multi-instância exige Redis)
    RATE_LIMIT_LOGIN = int(os.getenv("RATE_LIMIT_LOGIN", "10"))
    RATE_LIMIT_LOGIN_WINDOW = int(os.getenv("RATE_LIMIT_LOGIN_WINDOW", "900"))

    # Popula assinantes de demonstração no primeiro boot (desenvolvimento)
    SEED_DEMO_DATA = _env_bool("SEED_DEMO_DATA", default=False)
