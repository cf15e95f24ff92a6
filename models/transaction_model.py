from __future__ import annotations

from models.extensions import db
from services.date_utils import utcnow


class PaymentTransactionRecord(db.Model):
    __tablename__ = "payment_transactions"

    # Ordem de inserção
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(64), unique=True, nullable=False, index=True)

    user_id = db.Column(db.Integer, nullable=False, index=True)
    plan_id = db.Column(db.String(32), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="BRL")

    status = db.Column(db.String(20), nullable=False, default="pending")
    payment_method = db.Column(db.String(20), nullable=False)
    asaas_payment_id = db.Column(db.String(64), unique=True, nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
