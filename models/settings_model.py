from __future__ import annotations

from models.extensions import db
from services.date_utils import utcnow


class CheckoutSettings(db.Model):
    """Configuração de checkout (linha única, id=1)."""

    __tablename__ = "checkout_settings"

    id = db.Column(db.Integer, primary_key=True)

    pix_enabled = db.Column(db.Boolean, nullable=False, default=True)
    credit_card_enabled = db.Column(db.Boolean, nullable=False, default=True)
    boleto_enabled = db.Column(db.Boolean, nullable=False, default=True)

    # Percentuais (0-100)
    pix_fee = db.Column(db.Numeric(6, 3), nullable=False)
    credit_card_fee = db.Column(db.Numeric(6, 3), nullable=False)
    boleto_fee = db.Column(db.Numeric(6, 3), nullable=False)

    fixed_fee = db.Column(db.Numeric(10, 2), nullable=False)
    usd_to_brl_rate = db.Column(db.Numeric(10, 4), nullable=False)
    checkout_spread = db.Column(db.Numeric(6, 3), nullable=False)
    webhook_secret = db.Column(db.String(255), nullable=False, default="")

    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class AsaasSettings(db.Model):
    """Credenciais da conta Asaas (linha única, id=1)."""

    __tablename__ = "asaas_settings"

    id = db.Column(db.Integer, primary_key=True)
    api_key = db.Column(db.String(255), nullable=False, default="")
    webhook_url = db.Column(db.String(255), nullable=False, default="")
    environment = db.Column(db.String(20), nullable=False, default="sandbox")
    cpf_cnpj = db.Column(db.String(14), nullable=False, default="")
    account_name = db.Column(db.String(255), nullable=False, default="Gênesis")

    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
