"""Daily valuation record and dataset snapshot models.

Attribute names are snake_case; the JSON document consumed by the dashboard
uses camelCase keys, so every model here serialises by alias.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DailyRecord(_CamelModel):
    """One calendar date of the assembled dataset.

    `calculated_rate` and `gap` are always derived by the assembler from
    `market_rate`, `kr_m2`, `us_m2` and the dataset base values.
    Optional fields are None when an upstream series does not cover the date.
    """

    date: date
    market_rate: float
    kr_m2: float
    us_m2: float
    calculated_rate: float
    gap: float

    dxy: Optional[float] = None
    kr_base_rate: Optional[float] = None
    us_fed_rate: Optional[float] = None
    rate_diff: Optional[float] = None
    current_account: Optional[float] = None
    trade_balance: Optional[float] = None
    kr_gdp_growth: Optional[float] = None
    us_gdp_growth: Optional[float] = None
    gdp_growth_diff: Optional[float] = None
    kr_cpi: Optional[float] = Field(default=None, alias="krCPI")
    us_cpi: Optional[float] = Field(default=None, alias="usCPI")
    vix: Optional[float] = None
    ppp_rate: Optional[float] = None
    m2_growth_ratio: Optional[float] = None
    composite_score: Optional[float] = None


class DatasetMetadata(_CamelModel):
    last_updated: str
    base_date: date
    base_rate: float
    version: str = "v2.0"
    # series key (camelCase, e.g. "krM2") -> provenance label
    sources: Dict[str, str] = Field(default_factory=dict)


class Dataset(BaseModel):
    """Full dataset snapshot, replaced wholesale on every refresh."""

    metadata: DatasetMetadata
    data: List[DailyRecord] = Field(default_factory=list)

    @property
    def latest(self) -> Optional[DailyRecord]:
        return self.data[-1] if self.data else None
