from datetime import date, datetime, timedelta
from types import SimpleNamespace

from services.activation import LastlinkStatus
from services.lastlink import (
    LastlinkSubscription,
    StaticLastlinkSource,
    check_subscription_status,
    sync_subscribers,
)

NOW = datetime(2026, 2, 1, 9, 0)


def _subscriber(id, lastlink_status="active", activation_mode="lastlink", **kwargs):
    return SimpleNamespace(
        id=id,
        lastlink_status=lastlink_status,
        activation_mode=activation_mode,
        lastlink_synced_at=None,
        **kwargs,
    )


def test_status_from_demo_source():
    source = StaticLastlinkSource()
    assert check_subscription_status(source, 1) is LastlinkStatus.ACTIVE
    assert check_subscription_status(source, 6) is LastlinkStatus.EXPIRED
    assert check_subscription_status(source, 404) is LastlinkStatus.INACTIVE


def test_pending_counts_as_inactive():
    pending = LastlinkSubscription(
        id="sub_x",
        user_id=10,
        crypto_ico_id="cripto_ico_x",
        status=LastlinkStatus.PENDING,
        start_date=date(2026, 1, 1),
        end_date=date(2027, 1, 1),
        plan="Premium",
        last_sync_date=date(2026, 1, 1),
    )
    assert check_subscription_status(StaticLastlinkSource([pending]), 10) is LastlinkStatus.INACTIVE


def test_sync_updates_status_and_counts_changes():
    subscribers = [
        _subscriber(1, "active"),
        _subscriber(6, "active"),
        _subscriber(50, "active"),
    ]
    result = sync_subscribers(subscribers, StaticLastlinkSource(), now=NOW)

    assert result.success
    assert result.synced_users == 3
    assert result.updated_subscriptions == 2
    assert [s.lastlink_status for s in subscribers] == ["active", "expired", "inactive"]
    assert all(s.lastlink_synced_at == NOW for s in subscribers)
    assert result.timestamp == NOW


def test_sync_never_changes_activation_mode():
    manual = _subscriber(
        6,
        "active",
        activation_mode="manual",
        manual_activation_start=NOW - timedelta(days=1),
        manual_activation_end=NOW + timedelta(days=10),
    )
    sync_subscribers([manual], StaticLastlinkSource(), now=NOW)

    assert manual.lastlink_status == "expired"
    assert manual.activation_mode == "manual"
    assert manual.manual_activation_end == NOW + timedelta(days=10)
