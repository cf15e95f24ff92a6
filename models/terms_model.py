from __future__ import annotations

from models.extensions import db
from services.date_utils import utcnow


class TermsSignature(db.Model):
    __tablename__ = "terms_signatures"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("subscribers.id"), nullable=False, unique=True, index=True)
    terms_version = db.Column(db.String(20), nullable=False)
    signed_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
