"""Stores SQLAlchemy para o estado mutável compartilhado.

Mesmas interfaces dos stores em memória (plans, settings_store,
asaas_settings, ledger); cada operação de escrita faz commit da sessão atual.
"""

from __future__ import annotations

from decimal import Decimal

from models.extensions import db
from models.plan_model import CreditPlanRecord
from models.settings_model import AsaasSettings, CheckoutSettings
from models.transaction_model import PaymentTransactionRecord
from services.asaas_settings import AsaasConfig, AsaasEnvironment
from services.fees import CONFIG_FIELDS, CheckoutConfig, PaymentMethod
from services.ledger import LedgerError, PaymentTransaction, TransactionStatus
from services.plans import CreditPlan

SETTINGS_ROW_ID = 1


def _dec(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class SqlPlanStore:
    def _to_dto(self, m: CreditPlanRecord) -> CreditPlan:
        return CreditPlan(
            id=m.id,
            name=m.name,
            credits=int(m.credits),
            price_usd=_dec(m.price_usd),
            popular=bool(m.popular),
        )

    def all(self) -> list[CreditPlan]:
        rows = CreditPlanRecord.query.order_by(CreditPlanRecord.position.asc(), CreditPlanRecord.id.asc()).all()
        return [self._to_dto(m) for m in rows]

    def get(self, plan_id: str) -> CreditPlan | None:
        m = db.session.get(CreditPlanRecord, plan_id)
        return self._to_dto(m) if m else None

    def save(self, plan: CreditPlan) -> CreditPlan:
        m = db.session.get(CreditPlanRecord, plan.id)
        if m is None:
            position = db.session.query(db.func.count(CreditPlanRecord.id)).scalar() or 0
            m = CreditPlanRecord(id=plan.id, position=position)
            db.session.add(m)
        m.name = plan.name
        m.credits = plan.credits
        m.price_usd = plan.price_usd
        m.popular = plan.popular
        db.session.commit()
        return self._to_dto(m)


class SqlSettingsStore:
    def __init__(self, defaults: CheckoutConfig | None = None) -> None:
        self.defaults = defaults or CheckoutConfig()

    def _to_dto(self, m: CheckoutSettings) -> CheckoutConfig:
        return CheckoutConfig(
            pix_enabled=bool(m.pix_enabled),
            credit_card_enabled=bool(m.credit_card_enabled),
            boleto_enabled=bool(m.boleto_enabled),
            pix_fee=_dec(m.pix_fee),
            credit_card_fee=_dec(m.credit_card_fee),
            boleto_fee=_dec(m.boleto_fee),
            fixed_fee=_dec(m.fixed_fee),
            usd_to_brl_rate=_dec(m.usd_to_brl_rate),
            checkout_spread=_dec(m.checkout_spread),
            webhook_secret=m.webhook_secret or "",
        )

    def load(self) -> CheckoutConfig:
        m = db.session.get(CheckoutSettings, SETTINGS_ROW_ID)
        if m is None:
            return self.defaults
        return self._to_dto(m)

    def save(self, config: CheckoutConfig) -> CheckoutConfig:
        m = db.session.get(CheckoutSettings, SETTINGS_ROW_ID)
        if m is None:
            m = CheckoutSettings(id=SETTINGS_ROW_ID)
            db.session.add(m)
        for name in CONFIG_FIELDS:
            setattr(m, name, getattr(config, name))
        db.session.commit()
        return self._to_dto(m)


class SqlAsaasSettingsStore:
    def __init__(self, defaults: AsaasConfig | None = None) -> None:
        self.defaults = defaults or AsaasConfig()

    def _to_dto(self, m: AsaasSettings) -> AsaasConfig:
        return AsaasConfig(
            api_key=m.api_key or "",
            webhook_url=m.webhook_url or "",
            environment=AsaasEnvironment.parse(m.environment),
            cpf_cnpj=m.cpf_cnpj or "",
            account_name=m.account_name or "",
        )

    def load(self) -> AsaasConfig:
        m = db.session.get(AsaasSettings, SETTINGS_ROW_ID)
        if m is None:
            return self.defaults
        return self._to_dto(m)

    def save(self, config: AsaasConfig) -> AsaasConfig:
        m = db.session.get(AsaasSettings, SETTINGS_ROW_ID)
        if m is None:
            m = AsaasSettings(id=SETTINGS_ROW_ID)
            db.session.add(m)
        for name, value in config.to_dict().items():
            setattr(m, name, value)
        db.session.commit()
        return self._to_dto(m)


class SqlTransactionStore:
    def _to_dto(self, m: PaymentTransactionRecord) -> PaymentTransaction:
        return PaymentTransaction(
            id=m.id,
            user_id=int(m.user_id),
            plan_id=m.plan_id,
            amount=_dec(m.amount),
            currency=m.currency,
            status=TransactionStatus.parse(m.status),
            payment_method=PaymentMethod.parse(m.payment_method),
            created_at=m.created_at,
            asaas_payment_id=m.asaas_payment_id,
            completed_at=m.completed_at,
        )

    def add(self, txn: PaymentTransaction) -> PaymentTransaction:
        if PaymentTransactionRecord.query.filter_by(id=txn.id).first():
            raise LedgerError(f"Transação duplicada: {txn.id}")
        m = PaymentTransactionRecord(
            id=txn.id,
            user_id=txn.user_id,
            plan_id=txn.plan_id,
            amount=txn.amount,
            currency=txn.currency,
            status=txn.status.value,
            payment_method=txn.payment_method.value,
            asaas_payment_id=txn.asaas_payment_id,
            created_at=txn.created_at,
            completed_at=txn.completed_at,
        )
        db.session.add(m)
        db.session.commit()
        return self._to_dto(m)

    def get(self, txn_id: str) -> PaymentTransaction | None:
        m = PaymentTransactionRecord.query.filter_by(id=txn_id).first()
        return self._to_dto(m) if m else None

    def save(self, txn: PaymentTransaction) -> PaymentTransaction:
        m = PaymentTransactionRecord.query.filter_by(id=txn.id).first()
        if m is None:
            raise LedgerError(f"Transação não encontrada: {txn.id}")
        m.status = txn.status.value
        m.completed_at = txn.completed_at
        db.session.commit()
        return self._to_dto(m)

    def select(self, user_id: int | None = None) -> list[PaymentTransaction]:
        query = PaymentTransactionRecord.query
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        return [self._to_dto(m) for m in query.order_by(PaymentTransactionRecord.seq.asc()).all()]
