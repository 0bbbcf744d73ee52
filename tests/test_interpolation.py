from datetime import date

import pytest

from krw_valuation.data_models.time_series import TimePoint
from krw_valuation.errors import InterpolationDomainError
from krw_valuation.services.interpolation_service import interpolate, interpolate_daily
from krw_valuation.services.rounding import round_half_away


def _make_points(*pairs):
    return [TimePoint(date=d, value=v) for d, v in pairs]


def test_interpolate_returns_endpoints_unchanged():
    assert interpolate(3750, 3800, 1, 31, 1) == 3750
    assert interpolate(3750, 3800, 1, 31, 31) == 3800


def test_interpolate_midpoint_is_rounded_to_integer():
    # 3750 + 50 * 14 / 30 = 3773.33
    assert interpolate(3750, 3800, 1, 31, 15) == 3773


def test_interpolate_rounds_half_away_from_zero():
    assert interpolate(0, 1, 0, 2, 1) == 1.0
    assert interpolate(0, -1, 0, 2, 1) == -1.0
    assert interpolate(2, 3, 0, 2, 1) == 3.0


def test_interpolate_keeps_decimals_when_requested():
    assert interpolate(20.0, 20.4, 1, 29, 15, ndigits=1) == pytest.approx(20.2)


def test_interpolate_rejects_empty_interval():
    with pytest.raises(InterpolationDomainError):
        interpolate(1.0, 2.0, 15, 15, 15)
    with pytest.raises(InterpolationDomainError):
        interpolate(1.0, 2.0, 20, 10, 15)


def test_interpolate_rejects_target_outside_interval():
    with pytest.raises(InterpolationDomainError):
        interpolate(1.0, 2.0, 1, 31, 0)
    with pytest.raises(InterpolationDomainError):
        interpolate(1.0, 2.0, 1, 31, 32)


def test_interpolation_error_is_a_value_error():
    with pytest.raises(ValueError):
        interpolate(1.0, 2.0, 5, 5, 5)


def test_round_half_away_uses_decimal_repr():
    assert round_half_away(2.5) == 3.0
    assert round_half_away(-2.5) == -3.0
    assert round_half_away(2.675, 2) == 2.68
    assert str(round_half_away(-0.04, 1)) == "0.0"


def test_interpolate_daily_between_two_months():
    points = _make_points((date(2024, 1, 1), 100.0), (date(2024, 2, 1), 128.0))
    daily = interpolate_daily(points, date(2024, 1, 1), date(2024, 1, 31))

    # end day is the length of February 2024 (29)
    assert daily[date(2024, 1, 1)] == 100.0
    assert daily[date(2024, 1, 15)] == 114.0
    assert daily[date(2024, 1, 29)] == 128.0
    # days past the end day clamp onto it
    assert daily[date(2024, 1, 30)] == 128.0
    assert daily[date(2024, 1, 31)] == 128.0
    assert len(daily) == 31


def test_interpolate_daily_carries_last_value_forward():
    points = _make_points((date(2024, 1, 1), 100.0), (date(2024, 2, 1), 128.0))
    daily = interpolate_daily(points, date(2024, 1, 1), date(2024, 3, 10))

    assert daily[date(2024, 2, 1)] == 128.0
    assert daily[date(2024, 2, 29)] == 128.0
    assert daily[date(2024, 3, 10)] == 128.0


def test_interpolate_daily_leaves_out_days_before_first_month():
    points = _make_points((date(2024, 1, 1), 100.0), (date(2024, 2, 1), 128.0))
    daily = interpolate_daily(points, date(2023, 12, 1), date(2024, 1, 5))

    assert date(2023, 12, 31) not in daily
    assert min(daily) == date(2024, 1, 1)


def test_interpolate_daily_leaves_out_gap_months():
    points = _make_points(
        (date(2024, 1, 1), 100.0),
        (date(2024, 3, 1), 200.0),
        (date(2024, 4, 1), 300.0),
    )
    daily = interpolate_daily(points, date(2024, 1, 1), date(2024, 4, 30))

    assert date(2024, 1, 20) in daily
    assert not any(d.month == 2 for d in daily)
    assert daily[date(2024, 3, 1)] == 200.0
    assert daily[date(2024, 4, 30)] == 300.0


def test_interpolate_daily_uses_last_duplicate_and_sorts():
    points = _make_points(
        (date(2024, 2, 1), 130.0),
        (date(2024, 1, 1), 90.0),
        (date(2024, 1, 1), 100.0),
    )
    daily = interpolate_daily(points, date(2024, 1, 1), date(2024, 1, 1))
    assert daily[date(2024, 1, 1)] == 100.0


def test_interpolate_daily_empty_input():
    assert interpolate_daily([], date(2024, 1, 1), date(2024, 12, 31)) == {}
    points = _make_points((date(2024, 1, 1), 100.0))
    assert interpolate_daily(points, date(2024, 2, 1), date(2024, 1, 1)) == {}


def test_interpolate_daily_single_point_is_flat():
    points = _make_points((date(2024, 1, 1), 100.0))
    daily = interpolate_daily(points, date(2024, 1, 1), date(2024, 1, 10))
    assert set(daily.values()) == {100.0}
    assert len(daily) == 10
