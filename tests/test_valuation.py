import math

import pytest

from krw_valuation.errors import ValuationDomainError
from krw_valuation.services.valuation_service import (
    CompositeWeights,
    IndicatorScores,
    composite_score,
    fair_rate,
    gdp_growth_diff,
    gdp_growth_rate,
    interest_rate_diff,
    m2_growth_ratio,
    ppp_rate,
    score_indicators,
    valuation_gap,
)


def test_fair_rate_follows_relative_m2_growth():
    # KR M2 +10% against flat US M2
    assert fair_rate(1200, 2000, 10, 2200, 10) == 1320
    # 1167 * (3800/1500) / (21/8.5) = 1196.6
    assert fair_rate(1167, 1500, 8.5, 3800, 21.0) == 1197


def test_fair_rate_is_base_rate_when_levels_equal_base():
    assert fair_rate(1167.0, 1500, 8.5, 1500, 8.5) == 1167.0
    assert fair_rate(1200, 2000, 10, 2000, 10) == 1200


def test_fair_rate_is_base_rate_when_growth_ratios_match():
    assert fair_rate(1167.5, 1500, 8.5, 3000, 17.0) == 1167.5


def test_fair_rate_rejects_zero_and_non_finite_inputs():
    with pytest.raises(ValuationDomainError):
        fair_rate(1200, 0, 10, 2000, 10)
    with pytest.raises(ValuationDomainError):
        fair_rate(1200, 2000, 0, 2000, 10)
    with pytest.raises(ValuationDomainError):
        fair_rate(1200, 2000, 10, 2000, 0)
    with pytest.raises(ValuationDomainError):
        fair_rate(1200, 2000, 10, math.nan, 10)


def test_valuation_gap_sign_and_rounding():
    assert valuation_gap(1455, 1196) == pytest.approx(21.7)
    assert valuation_gap(1100, 1200) == pytest.approx(-8.3)
    assert valuation_gap(1200, 1200) == 0.0


def test_valuation_gap_rejects_zero_fair_rate():
    with pytest.raises(ValuationDomainError):
        valuation_gap(1200, 0)


def test_ppp_rate_uses_the_fair_rate_formula():
    assert ppp_rate(1200, 100, 200, 110, 200) == 1320
    assert ppp_rate(1200, 100, 200, 100, 200) == 1200


def test_interest_rate_diff_two_decimals():
    assert interest_rate_diff(3.5, 5.25) == -1.75
    assert interest_rate_diff(3.25, 3.125) == pytest.approx(0.13)


def test_gdp_growth_diff_one_decimal():
    assert gdp_growth_diff(2.6, 2.9) == pytest.approx(-0.3)


def test_gdp_growth_rate_year_over_year():
    assert gdp_growth_rate(103.0, 100.0) == pytest.approx(3.0)
    with pytest.raises(ValuationDomainError):
        gdp_growth_rate(103.0, 0.0)


def test_m2_growth_ratio():
    assert m2_growth_ratio(110, 100, 105, 100) == pytest.approx(2.0)


def test_m2_growth_ratio_rejects_zero_us_growth():
    with pytest.raises(ValuationDomainError):
        m2_growth_ratio(110, 100, 100, 100)


def test_composite_score_all_positive():
    scores = IndicatorScores(
        rate_diff=1.0, current_account=1.0, m2_gap=1.0, gdp_growth=1.0, cpi_gap=1.0, vix=1.0,
    )
    assert composite_score(scores) == pytest.approx(100.0)


def test_composite_score_normalises_over_present_scores():
    assert composite_score(IndicatorScores(rate_diff=0.5)) == pytest.approx(50.0)
    # (0.30 - 0.05) / 0.35
    assert composite_score(IndicatorScores(rate_diff=1.0, vix=-1.0)) == pytest.approx(71.4)


def test_composite_score_without_scores_is_zero():
    assert composite_score(IndicatorScores()) == 0.0


def test_composite_score_weights_override_individually():
    weights = CompositeWeights(rate_diff=1.0)
    scores = IndicatorScores(rate_diff=1.0, current_account=-1.0)
    # (1.0 - 0.25) / 1.25
    assert composite_score(scores, weights) == pytest.approx(60.0)


def test_default_weights_sum_to_one():
    assert sum(CompositeWeights().model_dump().values()) == pytest.approx(1.0)


def test_score_indicators_clamps_and_skips_missing():
    scores = score_indicators(gap=30.0, rate_diff=-1.0, vix=20.0)
    assert scores.m2_gap == 1.0
    assert scores.rate_diff == pytest.approx(-0.5)
    assert scores.vix == 0.0
    assert scores.current_account is None
    assert scores.gdp_growth is None
    assert scores.cpi_gap is None


def test_score_indicators_ppp_gap():
    scores = score_indicators(market_rate=1320.0, ppp=1200.0)
    # 10% above PPP over a 20% saturation
    assert scores.cpi_gap == pytest.approx(0.5)
