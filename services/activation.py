"""Resolução de acesso do assinante.

Dois modos mutuamente exclusivos:

- ``lastlink``: a Lastlink é a fonte de verdade; acesso ativo somente com
  status ``active``.
- ``manual``: o admin concedeu uma janela ``[start, end)``. Ao expirar, o modo
  continua ``manual`` (com 0 dias restantes) até um admin intervir.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum


class ActivationError(ValueError):
    pass


class ActivationMode(str, Enum):
    LASTLINK = "lastlink"
    MANUAL = "manual"


class LastlinkStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    PENDING = "pending"


def _parse_enum(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    text = str(value or "").strip().lower()
    for item in enum_cls:
        if item.value == text:
            return item
    raise ActivationError(f"{field} inválido: {value!r}")


def parse_mode(value) -> ActivationMode:
    return _parse_enum(ActivationMode, value, "activationMode")


def parse_lastlink_status(value) -> LastlinkStatus:
    return _parse_enum(LastlinkStatus, value, "lastlinkStatus")


@dataclass(frozen=True)
class UserSubscription:
    user_id: int
    activation_mode: ActivationMode = ActivationMode.LASTLINK
    lastlink_status: LastlinkStatus = LastlinkStatus.INACTIVE
    manual_activation_start: datetime | None = None
    manual_activation_end: datetime | None = None

    def __post_init__(self):
        has_start = self.manual_activation_start is not None
        has_end = self.manual_activation_end is not None
        if self.activation_mode is ActivationMode.MANUAL:
            if not (has_start and has_end):
                raise ActivationError("Ativação manual exige início e fim.")
            if self.manual_activation_end <= self.manual_activation_start:
                raise ActivationError("Fim da ativação manual deve ser após o início.")
        elif has_start or has_end:
            raise ActivationError("Modo lastlink não aceita janela manual.")


MAX_MANUAL_DAYS = 3650


def parse_duration_days(value) -> int:
    """Duração em dias: inteiro entre 1 e MAX_MANUAL_DAYS (aceita string de dígitos)."""
    if isinstance(value, bool):
        raise ActivationError("Informe uma quantidade de dias válida.")
    if isinstance(value, int):
        days = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ActivationError("Informe uma quantidade de dias válida.")
        days = int(value)
    else:
        text = str(value or "").strip()
        if not text.isdigit():
            raise ActivationError("Informe uma quantidade de dias válida.")
        days = int(text)
    if days <= 0:
        raise ActivationError("Informe uma quantidade de dias válida.")
    if days > MAX_MANUAL_DAYS:
        raise ActivationError(f"A ativação manual pode durar no máximo {MAX_MANUAL_DAYS} dias.")
    return days


def is_active(sub: UserSubscription, now: datetime) -> bool:
    if sub.activation_mode is ActivationMode.MANUAL:
        return sub.manual_activation_start <= now < sub.manual_activation_end
    return sub.lastlink_status is LastlinkStatus.ACTIVE


def remaining_days(sub: UserSubscription, now: datetime) -> int:
    if sub.activation_mode is not ActivationMode.MANUAL:
        return 0
    seconds = (sub.manual_activation_end - now).total_seconds()
    return max(math.ceil(seconds / 86400), 0)


def is_manual_expired(sub: UserSubscription, now: datetime) -> bool:
    if sub.activation_mode is not ActivationMode.MANUAL:
        return False
    return now >= sub.manual_activation_end


def activate_manual(sub: UserSubscription, days, now: datetime) -> UserSubscription:
    duration = parse_duration_days(days)
    try:
        end = now + timedelta(days=duration)
    except OverflowError as exc:
        raise ActivationError("Data final da ativação fora do intervalo suportado.") from exc
    return replace(
        sub,
        activation_mode=ActivationMode.MANUAL,
        manual_activation_start=now,
        manual_activation_end=end,
    )


def activate_manual_window(sub: UserSubscription, start: datetime, end: datetime) -> UserSubscription:
    """Janela explícita (POST /users/{id}/activation com start/end)."""
    if not start or not end:
        raise ActivationError("Informe início e fim da ativação manual.")
    if end <= start:
        raise ActivationError("O fim da ativação manual deve ser posterior ao início.")
    return replace(
        sub,
        activation_mode=ActivationMode.MANUAL,
        manual_activation_start=start,
        manual_activation_end=end,
    )


def restore_lastlink(sub: UserSubscription) -> UserSubscription:
    return replace(
        sub,
        activation_mode=ActivationMode.LASTLINK,
        manual_activation_start=None,
        manual_activation_end=None,
    )


def activation_label(sub: UserSubscription, now: datetime) -> str:
    if sub.activation_mode is ActivationMode.MANUAL:
        return f"Manual ({remaining_days(sub, now)} dias)"
    return "Lastlink"


def activation_context(sub: UserSubscription, now: datetime) -> dict:
    return {
        "activation_mode": sub.activation_mode.value,
        "lastlink_status": sub.lastlink_status.value,
        "is_active": is_active(sub, now),
        "remaining_days": remaining_days(sub, now),
        "is_manual_expired": is_manual_expired(sub, now),
        "label": activation_label(sub, now),
    }
