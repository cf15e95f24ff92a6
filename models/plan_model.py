from __future__ import annotations

from models.extensions import db
from services.date_utils import utcnow


class CreditPlanRecord(db.Model):
    __tablename__ = "credit_plans"

    id = db.Column(db.String(32), primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    name = db.Column(db.String(60), nullable=False)
    credits = db.Column(db.Integer, nullable=False)
    price_usd = db.Column(db.Numeric(12, 2), nullable=False)
    popular = db.Column(db.Boolean, nullable=False, default=False)

    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
