"""Monthly-to-daily interpolation of money-supply series.

M2 is published monthly; the dataset needs one value per calendar day.
Days inside a known month are linearly interpolated towards the next
observation, and everything from the final observed month onwards carries
the last value forward flat (no extrapolation).
"""
from __future__ import annotations

from calendar import monthrange
from datetime import date
from typing import Dict, Iterable, Tuple
import logging

import pandas as pd

from krw_valuation.data_models.time_series import TimePoint
from krw_valuation.errors import InterpolationDomainError
from krw_valuation.services.rounding import round_half_away
from krw_valuation.services.series_ingestion_service import normalize_points

logger = logging.getLogger(__name__)


def interpolate(
    month_start_value: float,
    month_end_value: float,
    month_start_day: int,
    month_end_day: int,
    target_day: int,
    ndigits: int = 0,
) -> float:
    """Linearly interpolate between two monthly observations.

    value = start + (end - start) * (target - start_day) / (end_day - start_day)

    The result is rounded to `ndigits` decimals, an integer by default
    (half away from zero). The two interval endpoints return the observed
    values unchanged.

    Raises
    ------
    InterpolationDomainError
        If the interval is empty or `target_day` lies outside it.
    """
    if month_end_day <= month_start_day:
        raise InterpolationDomainError(
            f"Empty interpolation interval: start day {month_start_day}, end day {month_end_day}"
        )
    if not (month_start_day <= target_day <= month_end_day):
        raise InterpolationDomainError(
            f"Target day {target_day} outside [{month_start_day}, {month_end_day}]"
        )

    if target_day == month_start_day:
        return month_start_value
    if target_day == month_end_day:
        return month_end_value

    span = month_end_day - month_start_day
    offset = target_day - month_start_day
    value = month_start_value + (month_end_value - month_start_value) * offset / span
    return round_half_away(value, ndigits)


def interpolate_daily(
    monthly_points: Iterable[TimePoint],
    start_date: date,
    end_date: date,
    ndigits: int = 0,
) -> Dict[date, float]:
    """Expand monthly observations into one value per day of [start_date, end_date].

    For a day in month i (the first observation of that calendar month),
    interpolate between observation i at its own day and observation i+1,
    using the length of observation i+1's month as the end day. The target
    day is clamped into that interval so short following months (February)
    never push it out of range.

    Days in or after the final observed month get the last value. Days
    before the first observed month, or in a month with no observation
    between two observed months, are left out of the mapping.
    """
    points = normalize_points(monthly_points)
    daily: Dict[date, float] = {}
    if not points or end_date < start_date:
        return daily

    first_in_month: Dict[Tuple[int, int], int] = {}
    for i, p in enumerate(points):
        first_in_month.setdefault((p.date.year, p.date.month), i)

    last = points[-1]
    last_month = (last.date.year, last.date.month)

    for ts in pd.date_range(start_date, end_date, freq="D"):
        day = ts.date()
        month_key = (day.year, day.month)

        if month_key >= last_month:
            daily[day] = last.value
            continue

        i = first_in_month.get(month_key)
        if i is None:
            continue

        this_point = points[i]
        next_point = points[i + 1]
        start_day = this_point.date.day
        end_day = monthrange(next_point.date.year, next_point.date.month)[1]

        if end_day <= start_day:
            # observation dated at or after the following month's length
            daily[day] = this_point.value
            continue

        target_day = min(max(day.day, start_day), end_day)
        daily[day] = interpolate(
            this_point.value, next_point.value, start_day, end_day, target_day, ndigits
        )

    logger.debug(
        "Interpolated %d monthly points into %d daily values (%s..%s)",
        len(points), len(daily), start_date, end_date,
    )
    return daily
