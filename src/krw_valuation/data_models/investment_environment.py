from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConditionKind(str, Enum):
    """The closed set of investment conditions evaluated per record."""

    VALUE = "value"
    RATE_DIFF = "rate_diff"
    DXY = "dxy"
    VIX = "vix"
    FUNDAMENTAL = "fundamental"


class ConditionStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    NOT_APPLICABLE = "N/A"


class SignalLevel(str, Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"


class InvestmentCondition(BaseModel):
    """Outcome of one threshold rule against one daily record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kind: ConditionKind
    name: str
    status: ConditionStatus
    current: Optional[float] = None
    threshold: float
    threshold_label: str
    message: str
    is_critical: bool


class InvestmentEnvironment(BaseModel):
    """Overall verdict derived from the five investment conditions.

    Built fresh from a single record by the investment signal service.
    `blockers` lists one human-readable line per FAILed critical condition.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    overall_signal: SignalLevel
    overall_message: str
    overall_color: str
    conditions: Dict[ConditionKind, InvestmentCondition]
    blockers: List[str] = Field(default_factory=list)
    ready_to_buy: bool
    timing_guidance: str

    def condition(self, kind: ConditionKind) -> InvestmentCondition:
        return self.conditions[kind]
