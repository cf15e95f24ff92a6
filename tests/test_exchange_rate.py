import logging
from decimal import Decimal

import pytest

from services.exchange_rate import (
    FALLBACK_BASE_RATE,
    SOURCE_BCB,
    ExchangeRateProvider,
    ExchangeRateUnavailable,
    convert_usd_to_brl,
)
from services.external_costs import get_cloud_cost
from tests.fakes import FakeResponse, FakeSession, bcb_response, connection_error


def _provider(session, **kwargs):
    return ExchangeRateProvider("https://bcb.test/dados", timeout=5, session=session, **kwargs)


def test_applies_default_spread_to_fetched_rate():
    sample = _provider(FakeSession(bcb_response("5.0000"))).get_rate()
    assert sample.base_rate == Decimal("5.0000")
    assert sample.spread == Decimal("2.0")
    assert sample.rate == Decimal("5.10")
    assert sample.source == SOURCE_BCB
    assert not sample.is_fallback


def test_spread_override_wins():
    sample = _provider(FakeSession(bcb_response("5.0000"))).get_rate(spread_override=0)
    assert sample.rate == sample.base_rate


def test_request_is_bounded_by_timeout():
    session = FakeSession(bcb_response())
    _provider(session).get_rate()
    assert session.calls[0]["timeout"] == 5
    assert session.calls[0]["url"] == "https://bcb.test/dados"


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=connection_error()),
        FakeSession(FakeResponse(500, {"erro": "indisponível"}, reason="Server Error")),
        FakeSession(FakeResponse(200, invalid_json=True)),
        FakeSession(FakeResponse(200, [])),
        FakeSession(FakeResponse(200, [{"valor": "abc"}])),
        FakeSession(FakeResponse(200, {"valor": "5.1"})),
    ],
)
def test_never_raises_and_falls_back(session):
    sample = _provider(session).get_rate(spread_override="2")
    assert sample.base_rate == FALLBACK_BASE_RATE == Decimal("5.53")
    assert sample.rate == Decimal("5.53") * Decimal("1.02")
    assert sample.is_fallback


def test_fallback_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="services.exchange_rate"):
        _provider(FakeSession(error=connection_error())).get_rate()
    assert any("5.53" in r.getMessage() for r in caplog.records)


def test_fetch_base_rate_raises_domain_error():
    with pytest.raises(ExchangeRateUnavailable):
        _provider(FakeSession(error=connection_error())).fetch_base_rate()


def test_from_app_config_reads_fallback_and_spread():
    provider = ExchangeRateProvider.from_app_config(
        {"EXCHANGE_RATE_URL": "https://x.test", "EXCHANGE_RATE_TIMEOUT": 2, "EXCHANGE_RATE_FALLBACK": 6.0, "CHECKOUT_SPREAD_DEFAULT": 1.5}
    )
    assert provider.url == "https://x.test"
    assert provider.timeout == 2.0
    assert provider.fallback_rate == Decimal("6.0")
    assert provider.default_spread == Decimal("1.5")

    no_spread = ExchangeRateProvider.from_app_config({"CHECKOUT_SPREAD_DEFAULT": 0})
    assert no_spread.default_spread == Decimal("0")
    assert no_spread.fallback_rate == Decimal("5.53")
    no_spread.session = FakeSession(bcb_response("5.0000"))
    sample = no_spread.get_rate()
    assert sample.spread == Decimal("0")
    assert sample.rate == Decimal("5.0000")


def test_convert_usd_to_brl():
    sample = _provider(FakeSession(bcb_response("5.0000"))).get_rate(spread_override=0)
    assert convert_usd_to_brl("10", sample) == Decimal("50.0000")


def test_cloud_cost_accepts_zero():
    assert get_cloud_cost({"CLOUD_MONTHLY_COST_USD": 0}).monthly_cost == Decimal("0")
    assert get_cloud_cost({}).monthly_cost == Decimal("847.15")
