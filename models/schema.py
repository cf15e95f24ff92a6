from __future__ import annotations

from sqlalchemy import text

from models.extensions import db
from services.asaas_settings import AsaasConfig
from services.fees import CheckoutConfig
from services.plans import DEFAULT_PLANS


def init_db(app):
    db.init_app(app)
    with app.app_context():
        # Garante que todas as tabelas entram no metadata
        from models.plan_model import CreditPlanRecord  # noqa: F401
        from models.settings_model import AsaasSettings, CheckoutSettings  # noqa: F401
        from models.subscriber_model import Subscriber  # noqa: F401
        from models.terms_model import TermsSignature  # noqa: F401
        from models.transaction_model import PaymentTransactionRecord  # noqa: F401
        from models.user_model import User  # noqa: F401

        db.create_all()

        if db.engine.name == "sqlite":
            with db.engine.begin() as conn:
                conn.execute(text("PRAGMA journal_mode=WAL"))
                conn.execute(text("PRAGMA busy_timeout=5000"))

        seed_defaults(CheckoutConfig.from_app_config(app.config), AsaasConfig.from_app_config(app.config))


def seed_defaults(initial_config: CheckoutConfig, asaas_config: AsaasConfig | None = None) -> None:
    """Cria as linhas de configuração e os planos padrão se ainda não existirem."""
    from models.plan_model import CreditPlanRecord
    from models.settings_model import AsaasSettings, CheckoutSettings

    changed = False
    if db.session.get(CheckoutSettings, 1) is None:
        db.session.add(CheckoutSettings(id=1, **initial_config.to_dict()))
        changed = True

    if db.session.get(AsaasSettings, 1) is None:
        db.session.add(AsaasSettings(id=1, **(asaas_config or AsaasConfig()).to_dict()))
        changed = True

    if db.session.query(CreditPlanRecord.id).first() is None:
        for position, plan in enumerate(DEFAULT_PLANS):
            db.session.add(
                CreditPlanRecord(
                    id=plan.id,
                    position=position,
                    name=plan.name,
                    credits=plan.credits,
                    price_usd=plan.price_usd,
                    popular=plan.popular,
                )
            )
        changed = True

    if changed:
        db.session.commit()
