"""Termo e Condições de uso: versão vigente e assinaturas por usuário."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from models.extensions import db
from models.terms_model import TermsSignature
from services.date_utils import format_display, utcnow


@dataclass(frozen=True)
class TermsOfService:
    id: str
    version: str
    content: str
    created_date: str
    last_updated: str


@dataclass(frozen=True)
class UserTermsSignature:
    user_id: int
    terms_version: str
    signed_at: datetime
    ip_address: str | None
    user_agent: str | None


CURRENT_TERMS = TermsOfService(
    id="terms_v1",
    version="1.0",
    content="""TERMO E CONDIÇÕES DE USO - PLATAFORMA GÊNESIS

1. ACEITAÇÃO DOS TERMOS
Ao acessar e usar a plataforma Gênesis, você concorda em estar vinculado por estes Termos e Condições. Se você não concordar com qualquer parte destes termos, não use a plataforma.

2. DESCRIÇÃO DO SERVIÇO
A plataforma Gênesis fornece análises de criptoativos e buscas de oportunidades de mercado utilizando inteligência artificial para melhorar a assertividade de traders.

3. LICENÇA E ACESSO
A assinatura do Cripto.ico concede ao usuário acesso à plataforma por 1 (um) ano, com 2.100 créditos iniciais para operações.

4. CRÉDITOS E OPERAÇÕES
- Análise de ativo: 100 créditos
- Busca de oportunidade: 20 créditos
- Créditos adicionais podem ser adquiridos através dos planos disponíveis

5. RESPONSABILIDADES DO USUÁRIO
O usuário é responsável por:
- Manter a confidencialidade de suas credenciais
- Usar a plataforma de forma legal e ética
- Não compartilhar sua conta com terceiros

6. LIMITAÇÕES DE RESPONSABILIDADE
A plataforma é fornecida "como está". Gênesis não se responsabiliza por perdas financeiras resultantes do uso das análises fornecidas.

7. CANCELAMENTO
O usuário pode cancelar sua assinatura a qualquer momento, perdendo acesso imediato à plataforma.

8. MODIFICAÇÕES DOS TERMOS
Gênesis se reserva o direito de modificar estes termos. Notificações de mudanças serão enviadas aos usuários.

9. LEGISLAÇÃO
Estes termos são regidos pelas leis brasileiras.

10. CONTATO
Para dúvidas, entre em contato através de support@genesis.app""",
    created_date="2025-01-01",
    last_updated="2025-01-01",
)


def get_current_terms() -> TermsOfService:
    return CURRENT_TERMS


def _to_dto(m: TermsSignature) -> UserTermsSignature:
    return UserTermsSignature(
        user_id=m.user_id,
        terms_version=m.terms_version,
        signed_at=m.signed_at,
        ip_address=m.ip_address,
        user_agent=m.user_agent,
    )


def get_signature(user_id: int) -> UserTermsSignature | None:
    if not user_id:
        return None
    m = TermsSignature.query.filter_by(user_id=user_id).first()
    return _to_dto(m) if m else None


def has_signed(user_id: int) -> bool:
    return get_signature(user_id) is not None


def sign_terms(user_id: int, ip_address: str | None, user_agent: str | None) -> UserTermsSignature:
    """Registra (ou renova) a assinatura do usuário na versão vigente."""
    m = TermsSignature.query.filter_by(user_id=user_id).first()
    if m is None:
        m = TermsSignature(user_id=user_id)
        db.session.add(m)
    m.terms_version = CURRENT_TERMS.version
    m.signed_at = utcnow()
    m.ip_address = (ip_address or "")[:64] or None
    m.user_agent = (user_agent or "")[:255] or None
    db.session.commit()
    return _to_dto(m)


def formatted_signature_date(user_id: int) -> str | None:
    signature = get_signature(user_id)
    if signature is None:
        return None
    return format_display(signature.signed_at, with_time=True)
