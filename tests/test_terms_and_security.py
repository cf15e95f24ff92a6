import pytest

from services.password_policy import PasswordValidationError, validate_password
from services.rate_limiter import RateLimiter
from services.terms import (
    formatted_signature_date,
    get_current_terms,
    get_signature,
    has_signed,
    sign_terms,
)


def test_sign_terms_records_current_version(app):
    with app.app_context():
        assert has_signed(5) is False
        assert get_signature(5) is None
        assert formatted_signature_date(5) is None

        first = sign_terms(5, "10.0.0.1", "Mozilla/5.0")
        assert first.terms_version == get_current_terms().version
        assert first.ip_address == "10.0.0.1"
        assert has_signed(5) is True
        assert formatted_signature_date(5) == first.signed_at.strftime("%d/%m/%Y %H:%M")

        again = sign_terms(5, None, None)
        assert again.ip_address is None
        assert again.signed_at >= first.signed_at


@pytest.mark.parametrize(
    "password",
    ["curta1", "semnumeros", "12345678", "x" * 120 + "1" * 10],
)
def test_password_policy_rejects(password):
    with pytest.raises(PasswordValidationError):
        validate_password(password)


def test_password_policy_rejects_email_user():
    with pytest.raises(PasswordValidationError):
        validate_password("Roberto2026", email="roberto@email.com")
    validate_password("Secret123", email="roberto@email.com")


def test_rate_limiter_sliding_window():
    now = [1000.0]
    limiter = RateLimiter(clock=lambda: now[0])

    assert limiter.hit("login:ip", limit=2, window_seconds=60).remaining == 1
    assert limiter.hit("login:ip", limit=2, window_seconds=60).remaining == 0
    blocked = limiter.hit("login:ip", limit=2, window_seconds=60)
    assert blocked.allowed is False
    assert blocked.retry_after == 60

    now[0] += 30
    assert limiter.hit("login:ip", limit=2, window_seconds=60).retry_after == 30
    assert limiter.hit("outra:chave", limit=2, window_seconds=60).allowed is True

    now[0] += 31
    assert limiter.hit("login:ip", limit=2, window_seconds=60).allowed is True


def test_rate_limiter_reset_single_key():
    limiter = RateLimiter(clock=lambda: 0.0)
    limiter.hit("a", limit=1, window_seconds=60)
    limiter.hit("b", limit=1, window_seconds=60)
    limiter.reset("a")
    assert limiter.hit("a", limit=1, window_seconds=60).allowed is True
    assert limiter.hit("b", limit=1, window_seconds=60).allowed is False


def test_rate_limiter_disabled_with_zero_limit():
    limiter = RateLimiter()
    for _ in range(5):
        assert limiter.hit("k", limit=0, window_seconds=60).allowed is True
