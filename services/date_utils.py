from datetime import datetime, timezone


def utcnow() -> datetime:
    """Agora em UTC, sem tzinfo (mesmo formato gravado no banco)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def isoformat(value: datetime | None) -> str | None:
    if not value:
        return None
    return value.replace(microsecond=0).isoformat() + "Z"


def format_display(value: datetime | None, *, with_time: bool = False) -> str:
    if not value:
        return "-"
    if with_time:
        return value.strftime("%d/%m/%Y %H:%M")
    return value.strftime("%d/%m/%Y")
