from __future__ import annotations

from models.extensions import db
from services.activation import (
    ActivationMode,
    UserSubscription,
    parse_lastlink_status,
    parse_mode,
)
from services.date_utils import utcnow


class Subscriber(db.Model):
    """Conta de usuário da plataforma (assinante Cripto.ico)."""

    __tablename__ = "subscribers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(140), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    credits = db.Column(db.Integer, nullable=False, default=0)
    analyses = db.Column(db.Integer, nullable=False, default=0)
    searches = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(20), nullable=False, default="active")  # active | inactive
    joined_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Ativação: lastlink (automático) | manual (janela definida pelo admin)
    activation_mode = db.Column(db.String(20), nullable=False, default=ActivationMode.LASTLINK.value)
    lastlink_status = db.Column(db.String(20), nullable=False, default="inactive")
    manual_activation_start = db.Column(db.DateTime, nullable=True)
    manual_activation_end = db.Column(db.DateTime, nullable=True)
    lastlink_synced_at = db.Column(db.DateTime, nullable=True)

    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def subscription(self) -> UserSubscription:
        return UserSubscription(
            user_id=self.id,
            activation_mode=parse_mode(self.activation_mode),
            lastlink_status=parse_lastlink_status(self.lastlink_status),
            manual_activation_start=self.manual_activation_start,
            manual_activation_end=self.manual_activation_end,
        )

    def apply_subscription(self, sub: UserSubscription) -> None:
        self.activation_mode = sub.activation_mode.value
        self.lastlink_status = sub.lastlink_status.value
        self.manual_activation_start = sub.manual_activation_start
        self.manual_activation_end = sub.manual_activation_end
