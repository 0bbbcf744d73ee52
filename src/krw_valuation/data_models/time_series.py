"""Time series observation models.

`TimePoint` is one observation of an upstream series. `RawSeriesBundle`
groups every series the dataset assembler consumes for one refresh run.
"""
from __future__ import annotations

from datetime import date
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TimePoint(BaseModel):
    """One dated observation (monthly, quarterly or daily cadence)."""

    model_config = ConfigDict(frozen=True)

    date: date
    value: float


class RawSeriesBundle(BaseModel):
    """All raw series collected for one refresh.

    Units follow the providers: M2 in trillions of local currency, the
    exchange rate in KRW per USD, policy rates in percent, the current
    account and trade balance in USD, GDP as real levels.

    `exchange_rates`, `kr_m2` and `us_m2` are required for any record to be
    emitted; the remaining series only feed the optional record fields.
    """

    exchange_rates: List[TimePoint] = Field(default_factory=list)
    kr_m2: List[TimePoint] = Field(default_factory=list)
    us_m2: List[TimePoint] = Field(default_factory=list)

    dxy: List[TimePoint] = Field(default_factory=list)
    kr_base_rate: List[TimePoint] = Field(default_factory=list)
    us_fed_rate: List[TimePoint] = Field(default_factory=list)
    vix: List[TimePoint] = Field(default_factory=list)
    kr_cpi: List[TimePoint] = Field(default_factory=list)
    us_cpi: List[TimePoint] = Field(default_factory=list)
    kr_gdp: List[TimePoint] = Field(default_factory=list)
    us_gdp: List[TimePoint] = Field(default_factory=list)
    current_account: List[TimePoint] = Field(default_factory=list)
    trade_balance: List[TimePoint] = Field(default_factory=list)
