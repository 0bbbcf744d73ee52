"""Dataset assembly and storage.

Merges the independently sourced series into one ordered list of
`DailyRecord`, applying the valuation formulas per date, and persists the
result as a single JSON snapshot that is replaced wholesale on each refresh.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional
import logging
import os

import pandas as pd
from pydantic import ValidationError

from krw_valuation.config import AssemblyConfig
from krw_valuation.data_models.daily_record import Dataset, DatasetMetadata, DailyRecord
from krw_valuation.data_models.time_series import RawSeriesBundle, TimePoint
from krw_valuation.errors import DatasetLoadError, ValuationDomainError
from krw_valuation.services.interpolation_service import interpolate_daily
from krw_valuation.services.series_ingestion_service import normalize_points
from krw_valuation.services import valuation_service as vs

logger = logging.getLogger(__name__)

DATASET_VERSION = "v2.0"

# bundle field -> (metadata key, provenance label)
SOURCE_LABELS = {
    "exchange_rates": ("exchangeRate", "ExchangeRate-API"),
    "kr_m2": ("krM2", "ECOS (Bank of Korea)"),
    "us_m2": ("usM2", "FRED (St. Louis Fed)"),
    "dxy": ("dxy", "FRED (DTWEXBGS)"),
    "kr_base_rate": ("krBaseRate", "FRED (INTDSRKRM193N)"),
    "us_fed_rate": ("usFedRate", "FRED (FEDFUNDS)"),
    "vix": ("vix", "FRED (VIXCLS)"),
    "kr_cpi": ("krCPI", "FRED (FPCPITOTLZGKOR)"),
    "us_cpi": ("usCPI", "FRED (CPIAUCSL)"),
    "kr_gdp": ("krGdpGrowth", "FRED (NGDPRSAXDCKRQ)"),
    "us_gdp": ("usGdpGrowth", "FRED (GDPC1)"),
    "current_account": ("currentAccount", "FRED (KORBCABP6USD)"),
    "trade_balance": ("tradeBalance", "FRED (XTNTVA01KRQ667S)"),
}
REQUIRED_SOURCES = ("exchange_rates", "kr_m2", "us_m2")


def _exact_lookup(points: Iterable[TimePoint]) -> Dict[date, float]:
    return {p.date: p.value for p in normalize_points(points)}


def _carry_forward_daily(points: Iterable[TimePoint], end_date: date) -> Dict[date, float]:
    """Last observation on or before each day, from the first observation to `end_date`."""
    pts = normalize_points(points)
    if not pts or pts[0].date > end_date:
        return {}
    series = pd.Series(
        [p.value for p in pts],
        index=pd.DatetimeIndex([pd.Timestamp(p.date) for p in pts]),
    )
    window = pd.date_range(pts[0].date, end_date, freq="D")
    filled = series.reindex(series.index.union(window)).ffill().reindex(window).dropna()
    return {ts.date(): float(v) for ts, v in filled.items()}


def _year_ago(d: date) -> date:
    return (pd.Timestamp(d) - pd.DateOffset(years=1)).date()


def _resolve_base(explicit: Optional[float], daily: Dict[date, float], base_date: date, label: str) -> float:
    if explicit is not None:
        return float(explicit)
    value = daily.get(base_date)
    if value is None:
        logger.warning("No %s value at base date %s; falling back to 0", label, base_date)
        return 0.0
    return float(value)


def _growth(daily: Dict[date, float], d: date) -> Optional[float]:
    current = daily.get(d)
    previous = daily.get(_year_ago(d))
    if current is None or not previous:
        return None
    return vs.gdp_growth_rate(current, previous)


def _build_sources(raw: RawSeriesBundle) -> Dict[str, str]:
    sources: Dict[str, str] = {}
    for field, (key, label) in SOURCE_LABELS.items():
        if field in REQUIRED_SOURCES or getattr(raw, field):
            sources[key] = label
    return sources


def assemble_dataset(
    raw: RawSeriesBundle,
    config: AssemblyConfig,
    today: Optional[date] = None,
) -> Dataset:
    """Assemble the daily valuation dataset from raw series.

    Steps:
    - interpolate KR and US M2 to daily values over [base_date, today];
    - resolve base M2 levels (config override, else value at base_date);
    - emit a record only for dates with a market rate and both M2 values;
    - derive calculated_rate and gap, then the optional macro fields where
      their series cover the date.

    Empty M2 input yields a dataset with no records. If M2 data exists but
    no base level can be resolved, `ValuationDomainError` is raised rather
    than dividing by a zero base.
    """
    end_date = today or date.today()
    base_date = config.base_date
    base_rate = float(config.base_rate)

    kr_m2_daily = interpolate_daily(raw.kr_m2, base_date, end_date)
    us_m2_daily = interpolate_daily(raw.us_m2, base_date, end_date)

    base_kr_m2 = _resolve_base(config.base_kr_m2, kr_m2_daily, base_date, "KR M2")
    base_us_m2 = _resolve_base(config.base_us_m2, us_m2_daily, base_date, "US M2")

    common_dates = sorted(set(kr_m2_daily) & set(us_m2_daily))
    if common_dates and (base_kr_m2 == 0.0 or base_us_m2 == 0.0):
        raise ValuationDomainError(
            f"Base M2 unavailable at {base_date} (KR={base_kr_m2}, US={base_us_m2}); "
            "set base_kr_m2/base_us_m2 explicitly or extend the M2 history"
        )

    market_rates = _exact_lookup(raw.exchange_rates)
    dxy = _exact_lookup(raw.dxy)
    vix = _exact_lookup(raw.vix)

    kr_base_rate = _carry_forward_daily(raw.kr_base_rate, end_date)
    us_fed_rate = _carry_forward_daily(raw.us_fed_rate, end_date)
    kr_cpi = _carry_forward_daily(raw.kr_cpi, end_date)
    us_cpi = _carry_forward_daily(raw.us_cpi, end_date)
    kr_gdp = _carry_forward_daily(raw.kr_gdp, end_date)
    us_gdp = _carry_forward_daily(raw.us_gdp, end_date)
    current_account = _carry_forward_daily(raw.current_account, end_date)
    trade_balance = _carry_forward_daily(raw.trade_balance, end_date)

    base_kr_cpi = kr_cpi.get(base_date)
    base_us_cpi = us_cpi.get(base_date)

    records: List[DailyRecord] = []
    dropped = 0
    for d in common_dates:
        market_rate = market_rates.get(d)
        kr_m2 = kr_m2_daily[d]
        us_m2 = us_m2_daily[d]
        if not market_rate or not kr_m2 or not us_m2:
            dropped += 1
            continue

        calculated = vs.fair_rate(base_rate, base_kr_m2, base_us_m2, kr_m2, us_m2)
        gap = vs.valuation_gap(market_rate, calculated)

        kr_rate = kr_base_rate.get(d)
        us_rate = us_fed_rate.get(d)
        rate_diff = vs.interest_rate_diff(kr_rate, us_rate) if kr_rate is not None and us_rate is not None else None

        kr_growth = _growth(kr_gdp, d)
        us_growth = _growth(us_gdp, d)
        growth_diff = vs.gdp_growth_diff(kr_growth, us_growth) if kr_growth is not None and us_growth is not None else None

        cur_kr_cpi = kr_cpi.get(d)
        cur_us_cpi = us_cpi.get(d)
        ppp = None
        if cur_kr_cpi is not None and cur_us_cpi and base_kr_cpi and base_us_cpi:
            ppp = vs.ppp_rate(base_rate, base_kr_cpi, base_us_cpi, cur_kr_cpi, cur_us_cpi)

        m2_ratio = None
        prev = _year_ago(d)
        prev_kr, prev_us = kr_m2_daily.get(prev), us_m2_daily.get(prev)
        if prev_kr and prev_us and us_m2 != prev_us:
            m2_ratio = vs.m2_growth_ratio(kr_m2, prev_kr, us_m2, prev_us)

        vix_value = vix.get(d)
        account = current_account.get(d)
        scores = vs.score_indicators(
            gap=gap,
            rate_diff=rate_diff,
            current_account=account,
            gdp_diff=growth_diff,
            market_rate=market_rate,
            ppp=ppp,
            vix=vix_value,
        )

        records.append(
            DailyRecord(
                date=d,
                market_rate=market_rate,
                kr_m2=kr_m2,
                us_m2=us_m2,
                calculated_rate=calculated,
                gap=gap,
                dxy=dxy.get(d),
                kr_base_rate=kr_rate,
                us_fed_rate=us_rate,
                rate_diff=rate_diff,
                current_account=account,
                trade_balance=trade_balance.get(d),
                kr_gdp_growth=kr_growth,
                us_gdp_growth=us_growth,
                gdp_growth_diff=growth_diff,
                kr_cpi=cur_kr_cpi,
                us_cpi=cur_us_cpi,
                vix=vix_value,
                ppp_rate=ppp,
                m2_growth_ratio=m2_ratio,
                composite_score=vs.composite_score(scores),
            )
        )

    metadata = DatasetMetadata(
        last_updated=datetime.now(timezone.utc).isoformat(),
        base_date=base_date,
        base_rate=base_rate,
        version=DATASET_VERSION,
        sources=_build_sources(raw),
    )

    logger.info(
        "Assembled %d daily records (%s..%s); %d dates dropped for missing market rate",
        len(records), base_date, end_date, dropped,
    )
    return Dataset(metadata=metadata, data=records)


def save_dataset(dataset: Dataset, path: Path | str) -> Path:
    """Write the dataset JSON, replacing any previous snapshot at `path`."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(target.name + ".tmp")
    try:
        tmp.write_text(dataset.model_dump_json(indent=2, by_alias=True, exclude_none=True), encoding="utf-8")
        os.replace(tmp, target)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    logger.info("Wrote dataset with %d records to %s", len(dataset.data), target)
    return target


def load_dataset(path: Path | str) -> Dataset:
    """Load a dataset snapshot written by `save_dataset`.

    Raises
    ------
    DatasetLoadError
        If the file is missing, unreadable or does not match the schema.
    """
    source = Path(path)
    if not source.exists():
        raise DatasetLoadError(f"Dataset file not found: {source}")
    try:
        text = source.read_text(encoding="utf-8")
        dataset = Dataset.model_validate_json(text)
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        raise DatasetLoadError(f"Could not load dataset {source}: {exc}") from exc
    logger.info("Loaded dataset with %d records from %s", len(dataset.data), source)
    return dataset
