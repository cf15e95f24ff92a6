"""Gestão de assinantes: filtros, resumo, créditos, status e exportação."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime

from models.extensions import db
from models.subscriber_model import Subscriber
from services.activation import (
    ActivationMode,
    activate_manual,
    activate_manual_window,
    activation_label,
    is_active,
    parse_mode,
    remaining_days,
    restore_lastlink,
)
from services.date_utils import format_display, isoformat, parse_datetime, utcnow

logger = logging.getLogger(__name__)

LOW_CREDITS_LIMIT = 500
HIGH_CREDITS_LIMIT = 2000

CREDIT_BUCKETS = ("low", "medium", "high")
BUCKET_LABELS = {"low": "Baixo", "medium": "Médio", "high": "Alto"}
STATUSES = ("active", "inactive")


class SubscriberError(ValueError):
    pass


@dataclass(frozen=True)
class SubscriberSummary:
    total: int
    active: int
    total_credits: int
    low_credit_active: int
    manual_activation: int


def credit_bucket(credits: int) -> str:
    if credits < LOW_CREDITS_LIMIT:
        return "low"
    if credits < HIGH_CREDITS_LIMIT:
        return "medium"
    return "high"


def filter_subscribers(subscribers, *, search: str = "", status: str = "all", bucket: str = "all"):
    term = (search or "").strip().lower()
    status = (status or "all").strip().lower()
    bucket = (bucket or "all").strip().lower()

    result = []
    for s in subscribers:
        if term and term not in (s.name or "").lower() and term not in (s.email or "").lower():
            continue
        if status != "all" and s.status != status:
            continue
        if bucket != "all" and credit_bucket(s.credits or 0) != bucket:
            continue
        result.append(s)
    return result


def summarize(subscribers) -> SubscriberSummary:
    items = list(subscribers)
    return SubscriberSummary(
        total=len(items),
        active=sum(1 for s in items if s.status == "active"),
        total_credits=sum(s.credits or 0 for s in items),
        low_credit_active=sum(
            1 for s in items if s.status == "active" and (s.credits or 0) < LOW_CREDITS_LIMIT
        ),
        manual_activation=sum(1 for s in items if s.activation_mode == "manual"),
    )


def parse_credit_amount(value) -> int:
    if isinstance(value, bool):
        raise SubscriberError("Quantidade de créditos inválida.")
    try:
        amount = int(str(value).strip())
    except (TypeError, ValueError):
        raise SubscriberError("Quantidade de créditos inválida.")
    if amount <= 0:
        raise SubscriberError("A quantidade de créditos deve ser maior que zero.")
    return amount


def list_subscribers() -> list[Subscriber]:
    return Subscriber.query.order_by(Subscriber.id.asc()).all()


def get_subscriber(subscriber_id) -> Subscriber | None:
    try:
        return db.session.get(Subscriber, int(subscriber_id))
    except (TypeError, ValueError):
        return None


def add_credits(subscriber: Subscriber, amount) -> Subscriber:
    amount = parse_credit_amount(amount)
    subscriber.credits = (subscriber.credits or 0) + amount
    db.session.commit()
    logger.info("Assinante %s: +%s créditos (saldo %s)", subscriber.id, amount, subscriber.credits)
    return subscriber


def toggle_status(subscriber: Subscriber) -> Subscriber:
    subscriber.status = "inactive" if subscriber.status == "active" else "active"
    db.session.commit()
    logger.info("Assinante %s agora está %s", subscriber.id, subscriber.status)
    return subscriber


def update_profile(subscriber: Subscriber, *, name=None, email=None, credits=None) -> Subscriber:
    """Atualiza nome, e-mail e saldo; valida tudo antes de alterar o registro."""
    changes = {}
    if name is not None:
        name = str(name).strip()
        if len(name) < 2:
            raise SubscriberError("Informe um nome válido.")
        changes["name"] = name
    if email is not None:
        email = str(email).strip().lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise SubscriberError("Informe um e-mail válido.")
        clash = Subscriber.query.filter(Subscriber.email == email, Subscriber.id != subscriber.id).first()
        if clash is not None:
            raise SubscriberError("Esse e-mail já está em uso.")
        changes["email"] = email
    if credits is not None:
        if isinstance(credits, bool):
            raise SubscriberError("Créditos inválidos.")
        try:
            credits = int(credits)
        except (TypeError, ValueError):
            raise SubscriberError("Créditos inválidos.")
        if credits < 0:
            raise SubscriberError("Créditos não podem ser negativos.")
        changes["credits"] = credits

    for field, value in changes.items():
        setattr(subscriber, field, value)
    db.session.commit()
    return subscriber


def change_activation(subscriber: Subscriber, data: dict, *, now: datetime | None = None) -> Subscriber:
    """Aplica ``{activationMode, manualActivationDays?}`` ou janela explícita.

    Modo ``manual`` exige dias (a partir de agora) ou início e fim;
    ``lastlink`` limpa a janela manual. Nada é gravado se a entrada for inválida.
    """
    now = now or utcnow()
    sub = subscriber.subscription()
    mode = parse_mode(data.get("activationMode"))

    if mode is ActivationMode.LASTLINK:
        updated = restore_lastlink(sub)
    elif data.get("manualActivationDays") not in (None, ""):
        updated = activate_manual(sub, data.get("manualActivationDays"), now)
    else:
        start = parse_datetime(data.get("manualActivationStart"))
        end = parse_datetime(data.get("manualActivationEnd"))
        updated = activate_manual_window(sub, start, end)

    subscriber.apply_subscription(updated)
    db.session.commit()
    logger.info(
        "Assinante %s: ativação %s (%s)",
        subscriber.id,
        updated.activation_mode.value,
        activation_label(updated, now),
    )
    return subscriber


def subscriber_to_dict(subscriber: Subscriber, *, now: datetime | None = None, terms_signed_at=None) -> dict:
    now = now or utcnow()
    sub = subscriber.subscription()
    credits = subscriber.credits or 0
    return {
        "id": subscriber.id,
        "name": subscriber.name,
        "email": subscriber.email,
        "credits": credits,
        "creditBucket": credit_bucket(credits),
        "creditLabel": BUCKET_LABELS[credit_bucket(credits)],
        "analyses": subscriber.analyses or 0,
        "searches": subscriber.searches or 0,
        "status": subscriber.status,
        "joined": format_display(subscriber.joined_at),
        "lastlinkStatus": sub.lastlink_status.value,
        "activationMode": sub.activation_mode.value,
        "manualActivationStart": isoformat(sub.manual_activation_start),
        "manualActivationEnd": isoformat(sub.manual_activation_end),
        "isActive": is_active(sub, now),
        "remainingDays": remaining_days(sub, now),
        "termsSignedDate": isoformat(terms_signed_at),
    }


def _sanitize_cell(value):
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return value
    text = str(value)
    if text and text[0] in {"=", "+", "-", "@"}:
        return "'" + text
    return text


def export_csv(subscribers, *, now: datetime | None = None, terms_dates: dict | None = None) -> str:
    now = now or utcnow()
    terms_dates = terms_dates or {}
    output = io.StringIO()
    writer = csv.writer(output, delimiter=";")
    writer.writerow(
        ["ID", "Nome", "Email", "Créditos", "Análises", "Buscas", "Status", "Modo Ativação", "Lastlink", "T&C Assinado"]
    )
    for s in subscribers:
        sub = s.subscription()
        writer.writerow(
            [_sanitize_cell(v) for v in (
                s.id,
                s.name,
                s.email,
                s.credits or 0,
                s.analyses or 0,
                s.searches or 0,
                s.status,
                activation_label(sub, now),
                sub.lastlink_status.value,
                format_display(terms_dates.get(s.id)) if terms_dates.get(s.id) else "",
            )]
        )
    return output.getvalue()


DEMO_SUBSCRIBERS = (
    (1, "João Silva", "joao@email.com", 1850, 25, 180, "active", "2025-01-15", "active"),
    (2, "Maria Santos", "maria@email.com", 450, 165, 520, "active", "2025-01-08", "active"),
    (3, "Pedro Costa", "pedro@email.com", 2800, 12, 95, "active", "2025-01-22", "active"),
    (4, "Ana Oliveira", "ana@email.com", 120, 198, 640, "active", "2025-01-03", "active"),
    (5, "Carlos Mendes", "carlos@email.com", 3200, 8, 42, "active", "2025-01-28", "active"),
    (6, "Juliana Lima", "juliana@email.com", 0, 210, 780, "inactive", "2024-12-12", "expired"),
    (7, "Roberto Alves", "roberto@email.com", 1450, 58, 320, "active", "2025-01-18", "active"),
    (8, "Fernanda Rocha", "fernanda@email.com", 890, 102, 445, "active", "2025-01-10", "active"),
)


def seed_demo_subscribers() -> int:
    if db.session.query(Subscriber.id).first() is not None:
        return 0
    for sid, name, email, credits, analyses, searches, status, joined, lastlink in DEMO_SUBSCRIBERS:
        db.session.add(
            Subscriber(
                id=sid,
                name=name,
                email=email,
                credits=credits,
                analyses=analyses,
                searches=searches,
                status=status,
                joined_at=datetime.fromisoformat(joined),
                lastlink_status=lastlink,
            )
        )
    db.session.commit()
    logger.info("Assinantes de demonstração criados: %s", len(DEMO_SUBSCRIBERS))
    return len(DEMO_SUBSCRIBERS)
