"""FRED (St. Louis Fed) series client.

API: https://fred.stlouisfed.org/docs/api/fred/
"""
from __future__ import annotations

from datetime import date
from typing import List
import logging

from krw_valuation.data_models.time_series import TimePoint
from krw_valuation.errors import UpstreamFetchError
from krw_valuation.providers.http import get_json

logger = logging.getLogger(__name__)

FRED_BASE_URL = "https://api.stlouisfed.org/fred/series/observations"
SOURCE = "FRED"

US_M2 = "M2SL"                      # billions USD, seasonally adjusted
DOLLAR_INDEX = "DTWEXBGS"           # nominal broad US dollar index
KR_BASE_RATE = "INTDSRKRM193N"
US_FED_RATE = "FEDFUNDS"
VIX = "VIXCLS"
KR_CPI = "FPCPITOTLZGKOR"            # annual CPI inflation rate (%), not an index level
US_CPI = "CPIAUCSL"
KR_REAL_GDP = "NGDPRSAXDCKRQ"
US_REAL_GDP = "GDPC1"
KR_CURRENT_ACCOUNT = "KORBCABP6USD"
KR_TRADE_BALANCE = "XTNTVA01KRQ667S"


class FredClient:
    def __init__(self, api_key: str, timeout: float = 30.0):
        self.api_key = api_key
        self.timeout = timeout

    def fetch_series(self, series_id: str, start: date, end: date, scale: float = 1.0) -> List[TimePoint]:
        """Fetch observations of `series_id`, multiplying each value by `scale`.

        Missing observations (reported as ".") are dropped.
        """
        params = {
            "series_id": series_id,
            "api_key": self.api_key,
            "file_type": "json",
            "observation_start": start.isoformat(),
            "observation_end": end.isoformat(),
        }
        payload = get_json(SOURCE, FRED_BASE_URL, params=params, timeout=self.timeout)

        observations = payload.get("observations") if isinstance(payload, dict) else None
        if not isinstance(observations, list):
            raise UpstreamFetchError(SOURCE, f"no observations in response for {series_id}")

        points: List[TimePoint] = []
        for obs in observations:
            if not isinstance(obs, dict):
                raise UpstreamFetchError(SOURCE, f"malformed observation in {series_id}: {obs!r}")
            raw = obs.get("value")
            if raw in (None, "", "."):
                continue
            try:
                points.append(TimePoint(date=date.fromisoformat(obs["date"]), value=float(raw) * scale))
            except (KeyError, ValueError) as exc:
                raise UpstreamFetchError(SOURCE, f"malformed observation in {series_id}: {obs!r}") from exc

        logger.info("Fetched %d points for FRED series %s", len(points), series_id)
        return points

    def fetch_us_m2(self, start: date, end: date) -> List[TimePoint]:
        """US M2 in trillions of USD."""
        return self.fetch_series(US_M2, start, end, scale=1 / 1000)

    def fetch_dollar_index(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(DOLLAR_INDEX, start, end)

    def fetch_korea_base_rate(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(KR_BASE_RATE, start, end)

    def fetch_us_fed_rate(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(US_FED_RATE, start, end)

    def fetch_vix(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(VIX, start, end)

    def fetch_korea_cpi(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(KR_CPI, start, end)

    def fetch_us_cpi(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(US_CPI, start, end)

    def fetch_korea_gdp(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(KR_REAL_GDP, start, end)

    def fetch_us_gdp(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(US_REAL_GDP, start, end)

    def fetch_current_account(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(KR_CURRENT_ACCOUNT, start, end)

    def fetch_trade_balance(self, start: date, end: date) -> List[TimePoint]:
        return self.fetch_series(KR_TRADE_BALANCE, start, end)
