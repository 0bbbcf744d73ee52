"""Sequential collection of every raw series for one refresh run."""
from __future__ import annotations

from datetime import date
from typing import Callable, List
import logging

from krw_valuation.config import Settings
from krw_valuation.data_models.time_series import RawSeriesBundle, TimePoint
from krw_valuation.errors import UpstreamFetchError
from krw_valuation.providers.ecos_client import EcosClient, format_ecos_month
from krw_valuation.providers.exchange_rate_client import ExchangeRateClient
from krw_valuation.providers.fred_client import FredClient

logger = logging.getLogger(__name__)


def _optional(name: str, fetch: Callable[[], List[TimePoint]]) -> List[TimePoint]:
    try:
        return fetch()
    except UpstreamFetchError as exc:
        logger.warning("Optional series %s unavailable, continuing without it: %s", name, exc)
        return []


def fetch_raw_bundle(settings: Settings, start: date, end: date) -> RawSeriesBundle:
    """Fetch all series between `start` and `end`.

    The exchange rate and both M2 series are required: their errors
    propagate. Every other series degrades to an empty list on failure.
    """
    settings.require_api_keys()
    ecos = EcosClient(settings.ecos_api_key, timeout=settings.http_timeout)
    fred = FredClient(settings.fred_api_key, timeout=settings.http_timeout)
    fx = ExchangeRateClient(settings.exchange_rate_api_key, timeout=settings.http_timeout)

    exchange_rates = [fx.fetch_current_rate()]
    kr_m2 = ecos.fetch_korea_m2(format_ecos_month(start), format_ecos_month(end))
    us_m2 = fred.fetch_us_m2(start, end)

    return RawSeriesBundle(
        exchange_rates=exchange_rates,
        kr_m2=kr_m2,
        us_m2=us_m2,
        dxy=_optional("dxy", lambda: fred.fetch_dollar_index(start, end)),
        kr_base_rate=_optional("kr_base_rate", lambda: fred.fetch_korea_base_rate(start, end)),
        us_fed_rate=_optional("us_fed_rate", lambda: fred.fetch_us_fed_rate(start, end)),
        vix=_optional("vix", lambda: fred.fetch_vix(start, end)),
        kr_cpi=_optional("kr_cpi", lambda: fred.fetch_korea_cpi(start, end)),
        us_cpi=_optional("us_cpi", lambda: fred.fetch_us_cpi(start, end)),
        kr_gdp=_optional("kr_gdp", lambda: fred.fetch_korea_gdp(start, end)),
        us_gdp=_optional("us_gdp", lambda: fred.fetch_us_gdp(start, end)),
        current_account=_optional("current_account", lambda: fred.fetch_current_account(start, end)),
        trade_balance=_optional("trade_balance", lambda: fred.fetch_trade_balance(start, end)),
    )
