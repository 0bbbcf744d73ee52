"""Investment-timing rules.

The M2 gap is the necessary condition (value); the rate differential, the
dollar index and VIX are critical trigger conditions that block a buy
signal when they fail; the current account is informational only.
"""
from __future__ import annotations

from typing import Callable, Dict, List, NamedTuple, Optional
import logging

from krw_valuation.data_models.daily_record import Dataset, DailyRecord
from krw_valuation.data_models.investment_environment import (
    ConditionKind,
    ConditionStatus,
    InvestmentCondition,
    InvestmentEnvironment,
    SignalLevel,
)
from krw_valuation.errors import DatasetLoadError

logger = logging.getLogger(__name__)

VALUE_THRESHOLD = 15.0
STRONG_SIGNAL_GAP = 20.0
RATE_DIFF_THRESHOLD = -1.5
DXY_THRESHOLD = 110.0
VIX_THRESHOLD = 25.0
CURRENT_ACCOUNT_THRESHOLD = 0.0


class ConditionRule(NamedTuple):
    name: str
    field: str
    threshold: float
    threshold_label: str
    is_critical: bool
    passes: Callable[[float], bool]
    fails: Callable[[float], bool]


RULES: Dict[ConditionKind, ConditionRule] = {
    ConditionKind.VALUE: ConditionRule(
        name="Valuation (M2 basis)",
        field="gap",
        threshold=VALUE_THRESHOLD,
        threshold_label="+15% or more",
        is_critical=False,
        passes=lambda v: v > VALUE_THRESHOLD,
        fails=lambda v: v < -VALUE_THRESHOLD,
    ),
    ConditionKind.RATE_DIFF: ConditionRule(
        name="Interest appeal (rate differential)",
        field="rate_diff",
        threshold=RATE_DIFF_THRESHOLD,
        threshold_label="-1.5%p or higher",
        is_critical=True,
        passes=lambda v: v > RATE_DIFF_THRESHOLD,
        fails=lambda v: v <= RATE_DIFF_THRESHOLD,
    ),
    ConditionKind.DXY: ConditionRule(
        name="Market sentiment (dollar index)",
        field="dxy",
        threshold=DXY_THRESHOLD,
        threshold_label="below 110",
        is_critical=True,
        passes=lambda v: v < DXY_THRESHOLD,
        fails=lambda v: v >= DXY_THRESHOLD,
    ),
    ConditionKind.VIX: ConditionRule(
        name="Volatility (VIX)",
        field="vix",
        threshold=VIX_THRESHOLD,
        threshold_label="below 25",
        is_critical=True,
        passes=lambda v: v < VIX_THRESHOLD,
        fails=lambda v: v >= VIX_THRESHOLD,
    ),
    ConditionKind.FUNDAMENTAL: ConditionRule(
        name="Fundamentals (current account)",
        field="current_account",
        threshold=CURRENT_ACCOUNT_THRESHOLD,
        threshold_label="surplus",
        is_critical=False,
        passes=lambda v: v > CURRENT_ACCOUNT_THRESHOLD,
        fails=lambda v: v <= CURRENT_ACCOUNT_THRESHOLD,
    ),
}

CRITICAL_KINDS = [kind for kind, rule in RULES.items() if rule.is_critical]

NO_DATA_MESSAGE = "No data available."


def _signed(value: float, digits: int) -> str:
    return f"{value:+.{digits}f}"


def _value_message(status: ConditionStatus, gap: float) -> str:
    if status == ConditionStatus.PASS:
        return (f"Undervalued. Current M2 gap {_signed(gap, 1)}% (threshold: +15% or more). "
                "Attractive value from a long-term perspective.")
    if status == ConditionStatus.FAIL:
        return (f"Overvalued. Current M2 gap {gap:.1f}% (threshold: +15% or more). "
                "Unsuitable range for buying.")
    return (f"Fair value range. Current M2 gap {_signed(gap, 1)}% (range: -15% to +15%). "
            "No clear under- or overvaluation signal.")


def _rate_diff_message(status: ConditionStatus, diff: float) -> str:
    if status == ConditionStatus.PASS:
        carry = ("Higher Korean rates favour holding KRW. " if diff > 1.0
                 else "The rate gap is limited. ")
        return (f"Acceptable level. Current rate differential {_signed(diff, 2)}%p "
                f"(threshold: -1.5%p or higher). {carry}Investment condition met.")
    if diff < -2.0:
        return (f"US rates are substantially higher. Current rate differential {diff:.2f}%p "
                "(threshold: -1.5%p or higher). Holding dollars is strongly favoured. "
                "Investment condition not met.")
    return (f"US rates are higher. Current rate differential {diff:.2f}%p "
            "(threshold: -1.5%p or higher). Holding dollars is favoured. "
            "Investment condition not met.")


def _dxy_message(status: ConditionStatus, dxy: float) -> str:
    if status == ConditionStatus.PASS:
        return (f"Normal range. Current DXY {dxy:.1f} (threshold: below 110). "
                "The dollar is not in extreme strength. Investment condition met.")
    if dxy >= 120.0:
        return (f"Historic dollar strength. Current DXY {dxy:.1f} (threshold: below 110). "
                "Risk aversion is severe. Investment condition not met.")
    return (f"Strong dollar. Current DXY {dxy:.1f} (threshold: below 110). "
            "Safe-haven demand is strong. Investment condition not met.")


def _vix_message(status: ConditionStatus, vix: float) -> str:
    if status == ConditionStatus.PASS:
        calm = ("The market is very stable. " if vix < 15.0
                else "Market volatility is manageable. ")
        return (f"Normal range. Current VIX {vix:.1f} (threshold: below 25). "
                f"{calm}Investment condition met.")
    if vix >= 40.0:
        return (f"Extreme fear. Current VIX {vix:.1f} (threshold: below 25). "
                "Risk assets may fall sharply. Investment condition not met.")
    return (f"Risk-off phase. Current VIX {vix:.1f} (threshold: below 25). "
            "Market instability adds capital outflow pressure. Investment condition not met.")


def _fundamental_message(status: ConditionStatus, account: float) -> str:
    billions = account / 1_000_000_000
    if status == ConditionStatus.PASS:
        return (f"Surplus. Current account ${billions:.1f}B (threshold: surplus). "
                "Export strength supports the won. Positive factor.")
    return (f"Deficit. Current account ${billions:.1f}B (threshold: surplus). "
            "The deficit weighs on the won. Negative factor.")


MESSAGES: Dict[ConditionKind, Callable[[ConditionStatus, float], str]] = {
    ConditionKind.VALUE: _value_message,
    ConditionKind.RATE_DIFF: _rate_diff_message,
    ConditionKind.DXY: _dxy_message,
    ConditionKind.VIX: _vix_message,
    ConditionKind.FUNDAMENTAL: _fundamental_message,
}

BLOCKER_FORMATS: Dict[ConditionKind, str] = {
    ConditionKind.RATE_DIFF: "Rate differential: {label} required (current: {value:.2f}%p)",
    ConditionKind.DXY: "Dollar index: {label} required (current: {value:.1f})",
    ConditionKind.VIX: "VIX: {label} required (current: {value:.1f})",
}


def evaluate_condition(kind: ConditionKind, record: DailyRecord) -> InvestmentCondition:
    """Evaluate one rule of the closed condition table against a record."""
    rule = RULES[kind]
    current: Optional[float] = getattr(record, rule.field)

    if current is None:
        status = ConditionStatus.NOT_APPLICABLE
        message = NO_DATA_MESSAGE
    else:
        if rule.passes(current):
            status = ConditionStatus.PASS
        elif rule.fails(current):
            status = ConditionStatus.FAIL
        else:
            status = ConditionStatus.NOT_APPLICABLE
        message = MESSAGES[kind](status, current)

    return InvestmentCondition(
        kind=kind,
        name=rule.name,
        status=status,
        current=current,
        threshold=rule.threshold,
        threshold_label=rule.threshold_label,
        message=message,
        is_critical=rule.is_critical,
    )


def _blockers(conditions: Dict[ConditionKind, InvestmentCondition]) -> List[str]:
    blockers: List[str] = []
    for kind in CRITICAL_KINDS:
        cond = conditions[kind]
        if cond.status == ConditionStatus.FAIL:
            blockers.append(BLOCKER_FORMATS[kind].format(label=cond.threshold_label, value=cond.current))
    return blockers


def evaluate_investment_environment(record: DailyRecord) -> InvestmentEnvironment:
    """Derive the overall investment verdict for one daily record.

    Priority:
    1. value PASS and every critical condition PASS -> BUY (STRONG_BUY above a 20% gap)
    2. value PASS otherwise -> HOLD, timing unfavourable
    3. value FAIL -> SELL (STRONG_SELL below a -20% gap)
    4. otherwise -> HOLD, neutral range
    """
    conditions = {kind: evaluate_condition(kind, record) for kind in ConditionKind}
    blockers = _blockers(conditions)

    value_status = conditions[ConditionKind.VALUE].status
    critical_pass = all(conditions[k].status == ConditionStatus.PASS for k in CRITICAL_KINDS)
    ready_to_buy = value_status == ConditionStatus.PASS and critical_pass

    if ready_to_buy:
        signal = SignalLevel.STRONG_BUY if record.gap > STRONG_SIGNAL_GAP else SignalLevel.BUY
        message = "Buy signal"
        color = "green"
        guidance = "All conditions are met. This is a point at which investment can be considered."
    elif value_status == ConditionStatus.PASS:
        signal = SignalLevel.HOLD
        message = "Hold (value attractive, timing unfavourable)"
        color = "yellow"
        if blockers:
            guidance = (
                "Value is attractive on an M2 basis, but these blocking conditions are unfavourable: "
                f"{'; '.join(blockers)}. Re-check when conditions improve."
            )
        else:
            guidance = (
                "Value is attractive on an M2 basis, but not every timing condition could be "
                "confirmed because data is missing. Re-check when the data is available."
            )
    elif value_status == ConditionStatus.FAIL:
        signal = SignalLevel.STRONG_SELL if record.gap < -STRONG_SIGNAL_GAP else SignalLevel.SELL
        message = "Sell / neutral"
        color = "red"
        guidance = "The won is overvalued and the range is unsuitable for buying."
    else:
        signal = SignalLevel.HOLD
        message = "Neutral (hold, fair value range)"
        color = "gray"
        guidance = "Within the fair value range. Monitor changes in the other conditions."

    logger.debug("Evaluated %s: signal=%s blockers=%d", record.date, signal.value, len(blockers))

    return InvestmentEnvironment(
        overall_signal=signal,
        overall_message=message,
        overall_color=color,
        conditions=conditions,
        blockers=blockers,
        ready_to_buy=ready_to_buy,
        timing_guidance=guidance,
    )


def evaluate_latest(dataset: Dataset) -> InvestmentEnvironment:
    """Evaluate the most recent record of a dataset."""
    record = dataset.latest
    if record is None:
        raise DatasetLoadError("Dataset contains no records to evaluate")
    return evaluate_investment_environment(record)
