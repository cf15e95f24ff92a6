from datetime import datetime, timedelta

import pytest

from services.activation import (
    ActivationError,
    ActivationMode,
    LastlinkStatus,
    UserSubscription,
    activate_manual,
    activate_manual_window,
    activation_context,
    activation_label,
    is_active,
    is_manual_expired,
    MAX_MANUAL_DAYS,
    parse_duration_days,
    remaining_days,
    restore_lastlink,
)

NOW = datetime(2026, 3, 10, 12, 0, 0)


def _manual(start, end, **kwargs):
    return UserSubscription(
        user_id=1,
        activation_mode=ActivationMode.MANUAL,
        manual_activation_start=start,
        manual_activation_end=end,
        **kwargs,
    )


def test_manual_window_in_progress():
    sub = _manual(NOW - timedelta(days=1), NOW + timedelta(days=5))
    assert is_active(sub, NOW) is True
    assert remaining_days(sub, NOW) == 5


def test_manual_window_expired_keeps_manual_mode():
    sub = _manual(NOW - timedelta(days=10), NOW - timedelta(days=1))
    assert is_active(sub, NOW) is False
    assert remaining_days(sub, NOW) == 0
    assert sub.activation_mode is ActivationMode.MANUAL
    assert is_manual_expired(sub, NOW)


def test_manual_overrides_lastlink_status():
    sub = _manual(NOW - timedelta(days=1), NOW + timedelta(days=1), lastlink_status=LastlinkStatus.EXPIRED)
    assert is_active(sub, NOW) is True


def test_window_end_is_exclusive():
    sub = _manual(NOW - timedelta(days=1), NOW)
    assert is_active(sub, NOW) is False


def test_partial_day_rounds_up():
    sub = _manual(NOW - timedelta(days=1), NOW + timedelta(hours=30))
    assert remaining_days(sub, NOW) == 2


@pytest.mark.parametrize(
    "status, expected",
    [
        (LastlinkStatus.ACTIVE, True),
        (LastlinkStatus.EXPIRED, False),
        (LastlinkStatus.INACTIVE, False),
        (LastlinkStatus.PENDING, False),
    ],
)
def test_lastlink_mode_follows_status(status, expected):
    sub = UserSubscription(user_id=1, lastlink_status=status)
    assert is_active(sub, NOW) is expected
    assert remaining_days(sub, NOW) == 0


def test_manual_requires_both_dates():
    with pytest.raises(ActivationError):
        _manual(NOW, None)


def test_manual_end_must_follow_start():
    with pytest.raises(ActivationError):
        _manual(NOW, NOW)


def test_lastlink_mode_rejects_window():
    with pytest.raises(ActivationError):
        UserSubscription(user_id=1, manual_activation_start=NOW)


@pytest.mark.parametrize("value, days", [(30, 30), ("7", 7), (" 15 ", 15), (2.0, 2), (MAX_MANUAL_DAYS, MAX_MANUAL_DAYS)])
def test_parse_duration_days(value, days):
    assert parse_duration_days(value) == days


@pytest.mark.parametrize("value", [0, -1, "abc", "", None, True, 2.5, "3.5", MAX_MANUAL_DAYS + 1, "3000000"])
def test_parse_duration_days_rejects(value):
    with pytest.raises(ActivationError):
        parse_duration_days(value)


def test_activate_manual_then_restore():
    sub = UserSubscription(user_id=7, lastlink_status=LastlinkStatus.EXPIRED)
    manual = activate_manual(sub, "30", NOW)
    assert manual.manual_activation_start == NOW
    assert manual.manual_activation_end == NOW + timedelta(days=30)
    assert activation_label(manual, NOW) == "Manual (30 dias)"
    assert sub.activation_mode is ActivationMode.LASTLINK

    restored = restore_lastlink(manual)
    assert restored.activation_mode is ActivationMode.LASTLINK
    assert restored.manual_activation_start is None and restored.manual_activation_end is None
    assert restored.lastlink_status is LastlinkStatus.EXPIRED
    assert activation_label(restored, NOW) == "Lastlink"


def test_invalid_duration_leaves_subscription_untouched():
    sub = UserSubscription(user_id=7)
    with pytest.raises(ActivationError):
        activate_manual(sub, 0, NOW)
    assert sub.activation_mode is ActivationMode.LASTLINK


def test_activate_manual_window():
    sub = activate_manual_window(UserSubscription(user_id=1), NOW, NOW + timedelta(days=3))
    assert remaining_days(sub, NOW) == 3
    with pytest.raises(ActivationError):
        activate_manual_window(UserSubscription(user_id=1), NOW, NOW - timedelta(days=1))
    with pytest.raises(ActivationError):
        activate_manual_window(UserSubscription(user_id=1), None, NOW)


def test_activation_context():
    sub = _manual(NOW - timedelta(days=1), NOW + timedelta(days=5))
    ctx = activation_context(sub, NOW)
    assert ctx["activation_mode"] == "manual"
    assert ctx["is_active"] is True
    assert ctx["remaining_days"] == 5
    assert ctx["is_manual_expired"] is False


def test_activate_manual_near_max_date_is_rejected():
    sub = UserSubscription(user_id=7)
    with pytest.raises(ActivationError):
        activate_manual(sub, 30, datetime(9999, 12, 20))
    assert sub.activation_mode is ActivationMode.LASTLINK
