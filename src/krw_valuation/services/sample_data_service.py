"""Synthetic raw series for offline demos and tests.

The generator is seeded, so a given (start, end, seed) always produces the
same bundle. Levels are loosely calibrated to 2010-2025 history: USD/KRW
drifting from 1,167 towards 1,448, KR M2 from 1,500 to 3,800 trillion KRW
and US M2 from 8.5 to 21.0 trillion USD.
"""
from __future__ import annotations

from datetime import date
from typing import List

import numpy as np
import pandas as pd

from krw_valuation.data_models.time_series import RawSeriesBundle, TimePoint

BASE_RATE = 1167.0
CURRENT_RATE = 1448.0
BASE_KR_M2 = 1500.0
CURRENT_KR_M2 = 3800.0
BASE_US_M2 = 8.5
CURRENT_US_M2 = 21.0


def _points(index: pd.DatetimeIndex, values: np.ndarray) -> List[TimePoint]:
    return [TimePoint(date=ts.date(), value=float(v)) for ts, v in zip(index, values)]


def _exponential_path(start_value: float, end_value: float, progress: np.ndarray) -> np.ndarray:
    return start_value * np.exp(np.log(end_value / start_value) * progress)


def generate_sample_bundle(start: date, end: date, seed: int = 42) -> RawSeriesBundle:
    """Generate a deterministic `RawSeriesBundle` covering [start, end]."""
    rng = np.random.default_rng(seed)

    days = pd.date_range(start, end, freq="D")
    business_days = days[days.dayofweek < 5]
    months = pd.date_range(pd.Timestamp(start).replace(day=1), end, freq="MS")
    quarters = months[months.month.isin([1, 4, 7, 10])]

    n = max(len(business_days) - 1, 1)
    progress = np.arange(len(business_days)) / n
    trend = BASE_RATE + (CURRENT_RATE - BASE_RATE) * progress
    t = np.arange(len(business_days))
    wave = np.sin(t / 30.0) * trend * 0.025 + np.sin(t / 90.0) * trend * 0.015
    noise = rng.normal(scale=0.005, size=len(business_days)) * trend
    rates = np.round(trend + wave + noise, 2)

    m = max(len(months) - 1, 1)
    month_progress = np.arange(len(months)) / m
    kr_m2 = np.round(_exponential_path(BASE_KR_M2, CURRENT_KR_M2, month_progress)
                     * (1 + rng.normal(scale=0.002, size=len(months))), 1)
    us_m2 = np.round(_exponential_path(BASE_US_M2, CURRENT_US_M2, month_progress)
                     * (1 + rng.normal(scale=0.002, size=len(months))), 3)

    dxy = np.round(95.0 + 8.0 * np.sin(t / 400.0) + rng.normal(scale=0.4, size=len(business_days)), 2)
    vix = np.round(np.clip(18.0 + 6.0 * np.sin(t / 60.0) + rng.normal(scale=2.0, size=len(business_days)), 9.0, None), 2)

    kr_base_rate = np.round(np.clip(2.0 + 1.25 * np.sin(month_progress * 6.0), 0.5, None) * 4) / 4
    us_fed_rate = np.round(np.clip(1.5 + 2.5 * np.sin(month_progress * 5.0 - 1.0), 0.25, None) * 4) / 4
    kr_cpi = np.round(_exponential_path(100.0, 135.0, month_progress), 2)
    us_cpi = np.round(_exponential_path(217.0, 320.0, month_progress), 2)

    q = max(len(quarters) - 1, 1)
    quarter_progress = np.arange(len(quarters)) / q
    kr_gdp = np.round(_exponential_path(330_000.0, 500_000.0, quarter_progress), 0)
    us_gdp = np.round(_exponential_path(16_800.0, 23_500.0, quarter_progress), 1)
    current_account = np.round(rng.normal(loc=7e9, scale=4e9, size=len(months)), -6)
    trade_balance = np.round(rng.normal(loc=5e9, scale=5e9, size=len(quarters)), -6)

    return RawSeriesBundle(
        exchange_rates=_points(business_days, rates),
        kr_m2=_points(months, kr_m2),
        us_m2=_points(months, us_m2),
        dxy=_points(business_days, dxy),
        vix=_points(business_days, vix),
        kr_base_rate=_points(months, kr_base_rate),
        us_fed_rate=_points(months, us_fed_rate),
        kr_cpi=_points(months, kr_cpi),
        us_cpi=_points(months, us_cpi),
        kr_gdp=_points(quarters, kr_gdp),
        us_gdp=_points(quarters, us_gdp),
        current_account=_points(months, current_account),
        trade_balance=_points(quarters, trade_balance),
    )
