"""Bank of Korea ECOS statistics client.

API: https://ecos.bok.or.kr/api/ - stat code 101Y004 (M2, monthly average).
"""
from __future__ import annotations

from datetime import date
from typing import List
import logging

from krw_valuation.data_models.time_series import TimePoint
from krw_valuation.errors import UpstreamFetchError
from krw_valuation.providers.http import get_json
from krw_valuation.services.rounding import round_half_away

logger = logging.getLogger(__name__)

ECOS_BASE_URL = "https://ecos.bok.or.kr/api"
M2_STAT_CODE = "101Y004"
M2_ITEM_CODE = "BBHA00"  # M2 total
MONTHLY = "M"
SOURCE = "ECOS"


def format_ecos_month(d: date) -> str:
    return f"{d.year:04d}{d.month:02d}"


class EcosClient:
    def __init__(self, api_key: str, timeout: float = 30.0):
        self.api_key = api_key
        self.timeout = timeout

    def fetch_korea_m2(self, start_month: str, end_month: str) -> List[TimePoint]:
        """Fetch Korean M2 between two YYYYMM months, in trillions of KRW.

        Observations are dated on the first of their month.
        """
        url = (
            f"{ECOS_BASE_URL}/StatisticSearch/{self.api_key}/json/kr/1/10000/"
            f"{M2_STAT_CODE}/{MONTHLY}/{start_month}/{end_month}/"
        )
        payload = get_json(SOURCE, url, timeout=self.timeout)

        result = payload.get("RESULT") if isinstance(payload, dict) else None
        if result:
            raise UpstreamFetchError(SOURCE, f"API error [{result.get('CODE')}]: {result.get('MESSAGE')}")

        try:
            rows = payload["StatisticSearch"]["row"]
        except (KeyError, TypeError) as exc:
            raise UpstreamFetchError(SOURCE, "StatisticSearch.row not found in response") from exc

        points: List[TimePoint] = []
        for row in rows:
            if row.get("ITEM_CODE1") != M2_ITEM_CODE:
                continue
            period = str(row.get("TIME", ""))
            try:
                obs_date = date(int(period[:4]), int(period[4:6]), 1)
                billions = float(row["DATA_VALUE"])
            except (KeyError, ValueError) as exc:
                raise UpstreamFetchError(SOURCE, f"malformed row: {row!r}") from exc
            points.append(TimePoint(date=obs_date, value=round_half_away(billions / 1000.0, 1)))

        logger.info("Fetched %d Korea M2 points from ECOS (%s..%s)", len(points), start_month, end_month)
        return points
