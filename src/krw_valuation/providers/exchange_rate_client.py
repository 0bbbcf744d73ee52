"""ExchangeRate-API client (USD/KRW pair).

The free plan only serves the latest rate, so each refresh contributes one
observation dated by the provider's last-update timestamp.
"""
from __future__ import annotations

from email.utils import parsedate_to_datetime
import logging

from krw_valuation.data_models.time_series import TimePoint
from krw_valuation.errors import UpstreamFetchError
from krw_valuation.providers.http import get_json

logger = logging.getLogger(__name__)

EXCHANGE_RATE_BASE_URL = "https://v6.exchangerate-api.com/v6"
SOURCE = "ExchangeRate-API"


class ExchangeRateClient:
    def __init__(self, api_key: str, timeout: float = 30.0):
        self.api_key = api_key
        self.timeout = timeout

    def fetch_current_rate(self) -> TimePoint:
        url = f"{EXCHANGE_RATE_BASE_URL}/{self.api_key}/pair/USD/KRW"
        payload = get_json(SOURCE, url, timeout=self.timeout)

        if not isinstance(payload, dict) or payload.get("result") != "success":
            error_type = payload.get("error-type") if isinstance(payload, dict) else None
            raise UpstreamFetchError(SOURCE, f"request was not successful ({error_type or 'unknown error'})")

        try:
            # e.g. "Fri, 27 Mar 2020 00:00:01 +0000"
            updated = parsedate_to_datetime(payload["time_last_update_utc"])
            rate = float(payload["conversion_rate"])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamFetchError(SOURCE, "malformed pair response") from exc

        point = TimePoint(date=updated.date(), value=rate)
        logger.info("Fetched current USD/KRW %.2f (%s)", point.value, point.date)
        return point
