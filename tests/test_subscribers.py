from datetime import timedelta
from types import SimpleNamespace

import pytest

from models.extensions import db
from services.activation import ActivationError
from services.date_utils import utcnow
from services.subscribers import (
    SubscriberError,
    add_credits,
    change_activation,
    credit_bucket,
    export_csv,
    filter_subscribers,
    get_subscriber,
    list_subscribers,
    parse_credit_amount,
    summarize,
    toggle_status,
    update_profile,
)


@pytest.mark.parametrize(
    "credits, bucket",
    [(0, "low"), (499, "low"), (500, "medium"), (1999, "medium"), (2000, "high"), (7000, "high")],
)
def test_credit_bucket_boundaries(credits, bucket):
    assert credit_bucket(credits) == bucket


def _people():
    return [
        SimpleNamespace(name="João Silva", email="joao@email.com", credits=1850, status="active", activation_mode="lastlink"),
        SimpleNamespace(name="Ana Oliveira", email="ana@email.com", credits=120, status="active", activation_mode="manual"),
        SimpleNamespace(name="Juliana Lima", email="juliana@email.com", credits=0, status="inactive", activation_mode="lastlink"),
    ]


def test_filter_by_search_status_and_bucket():
    people = _people()
    assert [p.name for p in filter_subscribers(people, search="JU")] == ["Juliana Lima"]
    assert [p.name for p in filter_subscribers(people, search="email.com", status="active", bucket="low")] == [
        "Ana Oliveira"
    ]
    assert len(filter_subscribers(people)) == 3


def test_summary():
    summary = summarize(_people())
    assert summary.total == 3
    assert summary.active == 2
    assert summary.total_credits == 1970
    assert summary.low_credit_active == 1
    assert summary.manual_activation == 1


@pytest.mark.parametrize("value", [0, -5, "abc", None, True, "1.5"])
def test_parse_credit_amount_rejects(value):
    with pytest.raises(SubscriberError):
        parse_credit_amount(value)


def test_parse_credit_amount_accepts_digit_string():
    assert parse_credit_amount(" 250 ") == 250


def test_add_credits_and_toggle(app):
    with app.app_context():
        maria = get_subscriber(2)
        add_credits(maria, "100")
        toggle_status(maria)
        db.session.expire_all()

        maria = get_subscriber(2)
        assert maria.credits == 550
        assert maria.status == "inactive"


def test_update_profile_validates_everything_first(app):
    with app.app_context():
        pedro = get_subscriber(3)
        with pytest.raises(SubscriberError):
            update_profile(pedro, name="Pedro C.", email="joao@email.com")
        db.session.rollback()
        assert get_subscriber(3).name == "Pedro Costa"

        update_profile(pedro, name="Pedro C.", credits=10)
        assert get_subscriber(3).credits == 10


def test_change_activation_manual_days_and_restore(app):
    with app.app_context():
        ana = get_subscriber(4)
        change_activation(ana, {"activationMode": "manual", "manualActivationDays": "15"})
        sub = get_subscriber(4).subscription()
        assert sub.activation_mode.value == "manual"
        assert sub.manual_activation_end - sub.manual_activation_start == timedelta(days=15)

        change_activation(ana, {"activationMode": "lastlink"})
        sub = get_subscriber(4).subscription()
        assert sub.activation_mode.value == "lastlink"
        assert sub.manual_activation_start is None


def test_change_activation_explicit_window(app):
    now = utcnow().replace(microsecond=0)
    with app.app_context():
        ana = get_subscriber(4)
        change_activation(
            ana,
            {
                "activationMode": "manual",
                "manualActivationStart": (now - timedelta(days=1)).isoformat() + "Z",
                "manualActivationEnd": (now + timedelta(days=2)).isoformat() + "Z",
            },
            now=now,
        )
        assert get_subscriber(4).manual_activation_end == now + timedelta(days=2)


def test_change_activation_rejects_bad_input(app):
    with app.app_context():
        ana = get_subscriber(4)
        for payload in (
            {"activationMode": "manual", "manualActivationDays": 0},
            {"activationMode": "manual"},
            {"activationMode": "sempre"},
        ):
            with pytest.raises(ActivationError):
                change_activation(ana, payload)
        assert get_subscriber(4).activation_mode == "lastlink"


def test_export_csv_uses_semicolons(app):
    with app.app_context():
        content = export_csv(list_subscribers())
    lines = content.strip().splitlines()
    assert lines[0].startswith("ID;Nome;Email;Créditos")
    assert len(lines) == 9
    assert lines[1].split(";")[:3] == ["1", "João Silva", "joao@email.com"]
    assert "Lastlink" in lines[1]


def test_export_csv_neutralizes_formulas(app):
    with app.app_context():
        pedro = get_subscriber(3)
        update_profile(pedro, name="=HYPERLINK(1)")
        content = export_csv([pedro])
    assert "'=HYPERLINK(1)" in content
