"""Sincronização de status de assinatura com a Lastlink.

A Lastlink é a fonte padrão do direito de acesso. Aqui tratamos a fonte como
plugável (``LastlinkSource``); ``StaticLastlinkSource`` serve de base local
enquanto a integração real não existe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Protocol

from services.activation import LastlinkStatus, parse_lastlink_status
from services.date_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LastlinkSubscription:
    id: str
    user_id: int
    crypto_ico_id: str
    status: LastlinkStatus
    start_date: date
    end_date: date
    plan: str
    last_sync_date: date


@dataclass(frozen=True)
class SyncResult:
    success: bool
    message: str
    synced_users: int
    updated_subscriptions: int
    timestamp: datetime


class LastlinkSource(Protocol):
    def subscription_for(self, user_id: int) -> LastlinkSubscription | None: ...


def _sub(n: int, status: str, start: str, end: str, plan: str) -> LastlinkSubscription:
    return LastlinkSubscription(
        id=f"sub_{n:03d}",
        user_id=n,
        crypto_ico_id=f"cripto_ico_{n:03d}",
        status=parse_lastlink_status(status),
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
        plan=plan,
        last_sync_date=date(2025, 12, 19),
    )


DEMO_SUBSCRIPTIONS: tuple[LastlinkSubscription, ...] = (
    _sub(1, "active", "2025-01-15", "2026-01-15", "Premium"),
    _sub(2, "active", "2025-01-08", "2026-01-08", "Standard"),
    _sub(3, "active", "2025-01-22", "2026-01-22", "Premium"),
    _sub(4, "active", "2025-01-03", "2026-01-03", "Standard"),
    _sub(5, "active", "2025-01-28", "2026-01-28", "Premium"),
    _sub(6, "expired", "2024-12-12", "2025-12-12", "Standard"),
    _sub(7, "active", "2025-01-18", "2026-01-18", "Premium"),
    _sub(8, "active", "2025-01-10", "2026-01-10", "Standard"),
)


class StaticLastlinkSource:
    def __init__(self, subscriptions: Iterable[LastlinkSubscription] = DEMO_SUBSCRIPTIONS) -> None:
        self._by_user = {s.user_id: s for s in subscriptions}

    def subscription_for(self, user_id: int) -> LastlinkSubscription | None:
        return self._by_user.get(int(user_id))


def check_subscription_status(source: LastlinkSource, user_id: int) -> LastlinkStatus:
    """Status efetivo na Lastlink: sem assinatura ou pendente conta como inativo."""
    subscription = source.subscription_for(user_id)
    if subscription is None:
        return LastlinkStatus.INACTIVE
    if subscription.status is LastlinkStatus.EXPIRED:
        return LastlinkStatus.EXPIRED
    if subscription.status is LastlinkStatus.ACTIVE:
        return LastlinkStatus.ACTIVE
    return LastlinkStatus.INACTIVE


def sync_subscribers(subscribers, source: LastlinkSource, *, now: datetime | None = None) -> SyncResult:
    """Atualiza ``lastlink_status`` de cada assinante.

    Nunca altera o modo de ativação: assinantes em modo manual continuam em
    manual, apenas com o status Lastlink atualizado.
    """
    now = now or utcnow()
    synced = 0
    updated = 0
    for subscriber in subscribers:
        status = check_subscription_status(source, subscriber.id)
        synced += 1
        if subscriber.lastlink_status != status.value:
            subscriber.lastlink_status = status.value
            updated += 1
        if hasattr(subscriber, "lastlink_synced_at"):
            subscriber.lastlink_synced_at = now

    logger.info("Lastlink: %s assinantes sincronizados, %s atualizados", synced, updated)
    return SyncResult(
        success=True,
        message="Sincronização com Lastlink concluída com sucesso",
        synced_users=synced,
        updated_subscriptions=updated,
        timestamp=now,
    )
