"""Valuation formulas.

Fair exchange rate from relative M2 growth, the valuation gap against the
market rate, and the auxiliary macro ratios attached to each daily record.
Every function is pure and rejects zero denominators or non-finite inputs
with `ValuationDomainError` instead of returning inf or NaN.
"""
from __future__ import annotations

from typing import Optional
import math

from pydantic import BaseModel, Field

from krw_valuation.errors import ValuationDomainError
from krw_valuation.services.rounding import round_half_away


class CompositeWeights(BaseModel):
    """Weights of each indicator in the composite score.

    Defaults sum to 1.00. Only the weights of indicators that actually have
    a score are used for normalisation.
    """

    rate_diff: float = Field(default=0.30, ge=0.0)
    current_account: float = Field(default=0.25, ge=0.0)
    m2_gap: float = Field(default=0.20, ge=0.0)
    gdp_growth: float = Field(default=0.10, ge=0.0)
    cpi_gap: float = Field(default=0.10, ge=0.0)
    vix: float = Field(default=0.05, ge=0.0)


class IndicatorScores(BaseModel):
    """Standardised indicator scores in [-1, +1].

    Positive values are KRW strength factors. None means the indicator is
    not available and is excluded from the composite score.
    """

    rate_diff: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    current_account: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    m2_gap: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    gdp_growth: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    cpi_gap: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    vix: Optional[float] = Field(default=None, ge=-1.0, le=1.0)


def _check_finite(**values: float) -> None:
    for name, v in values.items():
        if v is None or not math.isfinite(float(v)):
            raise ValuationDomainError(f"{name} must be a finite number, got {v!r}")


def _check_nonzero(**values: float) -> None:
    for name, v in values.items():
        if float(v) == 0.0:
            raise ValuationDomainError(f"{name} must be non-zero")


def _relative_rate(base_rate, base_kr, base_us, cur_kr, cur_us, label: str) -> float:
    _check_finite(base_rate=base_rate, **{
        f"base_kr_{label}": base_kr, f"base_us_{label}": base_us,
        f"current_kr_{label}": cur_kr, f"current_us_{label}": cur_us,
    })
    _check_nonzero(**{f"base_kr_{label}": base_kr, f"base_us_{label}": base_us, f"current_us_{label}": cur_us})

    kr_ratio = cur_kr / base_kr
    us_ratio = cur_us / base_us
    if kr_ratio == us_ratio:
        return base_rate
    return round_half_away(base_rate * (kr_ratio / us_ratio))


def fair_rate(
    base_rate: float,
    base_kr_m2: float,
    base_us_m2: float,
    current_kr_m2: float,
    current_us_m2: float,
) -> float:
    """M2-implied fair USD/KRW rate, rounded to an integer.

    fair = base_rate * (KR_M2(t) / KR_M2(base)) / (US_M2(t) / US_M2(base))

    Equal growth ratios return `base_rate` unchanged.
    """
    return _relative_rate(base_rate, base_kr_m2, base_us_m2, current_kr_m2, current_us_m2, "m2")


def ppp_rate(
    base_rate: float,
    base_kr_cpi: float,
    base_us_cpi: float,
    current_kr_cpi: float,
    current_us_cpi: float,
) -> float:
    """Purchasing-power-parity rate: the fair-rate formula driven by CPI."""
    return _relative_rate(base_rate, base_kr_cpi, base_us_cpi, current_kr_cpi, current_us_cpi, "cpi")


def valuation_gap(market_rate: float, fair: float) -> float:
    """Percent deviation of the market rate from the fair rate (1 decimal).

    Positive: KRW undervalued against the model (dollar expensive).
    Negative: KRW overvalued.
    """
    _check_finite(market_rate=market_rate, fair_rate=fair)
    _check_nonzero(fair_rate=fair)
    return round_half_away((market_rate - fair) / fair * 100.0, 1)


def interest_rate_diff(kr_base_rate: float, us_fed_rate: float) -> float:
    """Korean policy rate minus US policy rate, in percentage points (2 decimals)."""
    _check_finite(kr_base_rate=kr_base_rate, us_fed_rate=us_fed_rate)
    return round_half_away(kr_base_rate - us_fed_rate, 2)


def gdp_growth_diff(kr_gdp_growth: float, us_gdp_growth: float) -> float:
    _check_finite(kr_gdp_growth=kr_gdp_growth, us_gdp_growth=us_gdp_growth)
    return round_half_away(kr_gdp_growth - us_gdp_growth, 1)


def gdp_growth_rate(current_gdp: float, year_ago_gdp: float) -> float:
    """Year-over-year growth of a real GDP level, in percent (1 decimal)."""
    _check_finite(current_gdp=current_gdp, year_ago_gdp=year_ago_gdp)
    _check_nonzero(year_ago_gdp=year_ago_gdp)
    return round_half_away((current_gdp / year_ago_gdp - 1.0) * 100.0, 1)


def m2_growth_ratio(
    current_kr_m2: float,
    previous_kr_m2: float,
    current_us_m2: float,
    previous_us_m2: float,
) -> float:
    """Korean YoY M2 growth rate divided by the US one (3 decimals).

    > 1 means Korea expanded money supply faster than the US.
    """
    _check_finite(
        current_kr_m2=current_kr_m2, previous_kr_m2=previous_kr_m2,
        current_us_m2=current_us_m2, previous_us_m2=previous_us_m2,
    )
    _check_nonzero(previous_kr_m2=previous_kr_m2, previous_us_m2=previous_us_m2)

    kr_growth = (current_kr_m2 - previous_kr_m2) / previous_kr_m2
    us_growth = (current_us_m2 - previous_us_m2) / previous_us_m2
    if us_growth == 0.0:
        raise ValuationDomainError("US M2 growth rate is zero; growth ratio is undefined")
    return round_half_away(kr_growth / us_growth, 3)


def composite_score(scores: IndicatorScores, weights: Optional[CompositeWeights] = None) -> float:
    """Weighted composite of the available indicator scores, scaled to [-100, 100].

    Missing scores drop out of both the weighted sum and the weight total,
    so the result is normalised over the indicators actually present.
    Returns 0.0 when no score is available.
    """
    w = weights or CompositeWeights()
    total_score = 0.0
    total_weight = 0.0
    for name, score in scores.model_dump().items():
        if score is None:
            continue
        weight = getattr(w, name)
        total_score += score * weight
        total_weight += weight

    if total_weight <= 0.0:
        return 0.0
    return round_half_away(total_score / total_weight * 100.0, 1)


def _clamp(value: float) -> float:
    return max(-1.0, min(1.0, value))


def score_indicators(
    gap: Optional[float] = None,
    rate_diff: Optional[float] = None,
    current_account: Optional[float] = None,
    gdp_diff: Optional[float] = None,
    market_rate: Optional[float] = None,
    ppp: Optional[float] = None,
    vix: Optional[float] = None,
) -> IndicatorScores:
    """Map raw indicators onto [-1, 1] scores (clamped linear scalings).

    - rate differential: +/-2 %p saturates
    - current account: +/-10bn USD saturates
    - M2 gap: +/-20 % saturates
    - GDP growth differential: +/-2 %p saturates
    - PPP gap of the market rate: +/-20 % saturates
    - VIX: 20 is neutral, 0 and 40 saturate (low volatility is positive)
    """
    cpi_gap = None
    if market_rate is not None and ppp:
        cpi_gap = _clamp((market_rate - ppp) / ppp * 100.0 / 20.0)

    return IndicatorScores(
        rate_diff=_clamp(rate_diff / 2.0) if rate_diff is not None else None,
        current_account=_clamp(current_account / 10e9) if current_account is not None else None,
        m2_gap=_clamp(gap / 20.0) if gap is not None else None,
        gdp_growth=_clamp(gdp_diff / 2.0) if gdp_diff is not None else None,
        cpi_gap=cpi_gap,
        vix=_clamp((20.0 - vix) / 20.0) if vix is not None else None,
    )
