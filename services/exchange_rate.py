from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import requests

from services.date_utils import utcnow
from services.money import apply_percentage, to_decimal

logger = logging.getLogger(__name__)

BCB_USD_BRL_URL = "https://api.bcb.gov.br/dados/serie/bcdata.sgs.1/dados/ultimos/1?formato=json"
FALLBACK_BASE_RATE = Decimal("5.53")
DEFAULT_SPREAD = Decimal("2.0")

SOURCE_BCB = "Banco Central do Brasil"
SOURCE_FALLBACK = "fallback"


class ExchangeRateUnavailable(RuntimeError):
    pass


@dataclass(frozen=True)
class ExchangeRateSample:
    base_rate: Decimal
    spread: Decimal
    rate: Decimal
    timestamp: datetime
    source: str

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK


def rate_with_spread(base_rate: Decimal, spread: Decimal) -> Decimal:
    return apply_percentage(base_rate, spread)


def convert_usd_to_brl(amount_usd, sample: ExchangeRateSample) -> Decimal:
    value = to_decimal(amount_usd)
    if value is None:
        raise ValueError(f"Valor em USD inválido: {amount_usd!r}")
    return value * sample.rate


def _parse_bcb_body(body) -> Decimal:
    if not isinstance(body, list) or not body:
        raise ExchangeRateUnavailable("Resposta do BCB sem itens.")
    first = body[0]
    if not isinstance(first, dict):
        raise ExchangeRateUnavailable("Item do BCB em formato inesperado.")
    value = to_decimal(first.get("valor"))
    if value is None or value <= 0:
        raise ExchangeRateUnavailable(f"Valor de câmbio inválido: {first.get('valor')!r}")
    return value


class ExchangeRateProvider:
    """Busca a cotação USD/BRL e aplica o spread do checkout.

    Disponibilidade acima de precisão: qualquer falha na consulta cai no
    valor fixo ``fallback_rate`` e nunca é propagada para quem chamou.
    """

    def __init__(
        self,
        url: str = BCB_USD_BRL_URL,
        *,
        timeout: float = 5.0,
        fallback_rate: Decimal = FALLBACK_BASE_RATE,
        default_spread: Decimal = DEFAULT_SPREAD,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.fallback_rate = to_decimal(fallback_rate)
        if self.fallback_rate is None or self.fallback_rate <= 0:
            self.fallback_rate = FALLBACK_BASE_RATE
        self.default_spread = to_decimal(default_spread)
        if self.default_spread is None:
            self.default_spread = DEFAULT_SPREAD
        self.session = session or requests.Session()

    @classmethod
    def from_app_config(cls, config) -> "ExchangeRateProvider":
        return cls(
            config.get("EXCHANGE_RATE_URL") or BCB_USD_BRL_URL,
            timeout=float(config.get("EXCHANGE_RATE_TIMEOUT", 5.0)),
            fallback_rate=to_decimal(config.get("EXCHANGE_RATE_FALLBACK")),
            default_spread=to_decimal(config.get("CHECKOUT_SPREAD_DEFAULT")),
        )

    def fetch_base_rate(self) -> Decimal:
        """Uma única consulta, sem retry. Levanta ExchangeRateUnavailable."""
        try:
            resp = self.session.get(
                self.url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ExchangeRateUnavailable(f"Falha na requisição: {exc}") from exc

        if not resp.ok:
            raise ExchangeRateUnavailable(f"HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise ExchangeRateUnavailable("JSON inválido") from exc

        return _parse_bcb_body(body)

    def get_rate(self, spread_override=None) -> ExchangeRateSample:
        spread = to_decimal(spread_override) if spread_override is not None else None
        if spread is None:
            spread = self.default_spread

        try:
            base_rate = self.fetch_base_rate()
            source = SOURCE_BCB
        except ExchangeRateUnavailable as exc:
            logger.warning(
                "Câmbio: usando valor fixo %s (%s)",
                self.fallback_rate,
                exc,
                exc_info=True,
            )
            base_rate = self.fallback_rate
            source = SOURCE_FALLBACK

        return ExchangeRateSample(
            base_rate=base_rate,
            spread=spread,
            rate=rate_with_spread(base_rate, spread),
            timestamp=utcnow(),
            source=source,
        )
