"""Raw series ingestion.

Reads `date,value` CSV exports into typed `TimePoint` lists and normalises
them (ascending, one observation per date) before the assembler uses them.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List
import logging

import pandas as pd

from krw_valuation.data_models.time_series import RawSeriesBundle, TimePoint


logger = logging.getLogger(__name__)

REQUIRED_SERIES = ("exchange_rates", "kr_m2", "us_m2")


def normalize_points(points: Iterable[TimePoint]) -> List[TimePoint]:
    """Sort points by date and drop duplicate dates (the last one wins)."""
    by_date: Dict = {}
    for p in points:
        by_date[p.date] = p
    return [by_date[d] for d in sorted(by_date)]


def load_series_from_csv(csv_path: Path | str, value_column: str = "value") -> List[TimePoint]:
    """Load a single series CSV into a list of `TimePoint`.

    Parameters
    ----------
    csv_path : Path | str
        CSV with a DATE column and a value column. Column names are matched
        case-insensitively.
    value_column : str
        Name of the value column, "value" by default.

    Returns
    -------
    List[TimePoint]
        Sorted, deduplicated observations. Blank values and FRED-style "."
        placeholders are skipped.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"Series CSV file not found: {path}")

    df = pd.read_csv(path, dtype=str)
    df.columns = [str(c).strip().upper() for c in df.columns]

    value_col = value_column.strip().upper()
    missing = {"DATE", value_col} - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns in {path.name}: {sorted(missing)}")

    values = pd.to_numeric(df[value_col].str.strip(), errors="coerce")
    dates = pd.to_datetime(df["DATE"].str.strip(), errors="coerce")

    points: List[TimePoint] = []
    skipped = 0
    for d, v in zip(dates, values):
        if pd.isna(d) or pd.isna(v):
            skipped += 1
            continue
        points.append(TimePoint(date=d.date(), value=float(v)))

    if skipped:
        logger.warning("Skipped %d rows without a date or numeric value in %s", skipped, path)

    points = normalize_points(points)
    logger.info("Loaded %d points from %s", len(points), path)
    return points


def load_raw_bundle_from_dir(directory: Path | str) -> RawSeriesBundle:
    """Load a `RawSeriesBundle` from one CSV per series (`kr_m2.csv`, ...).

    The required series files must exist; optional ones may be absent.
    """
    root = Path(directory)
    series: Dict[str, List[TimePoint]] = {}
    for field in RawSeriesBundle.model_fields:
        path = root / f"{field}.csv"
        if not path.exists():
            if field in REQUIRED_SERIES:
                raise FileNotFoundError(f"Required series file not found: {path}")
            logger.info("Optional series %s not found in %s; leaving it empty", field, root)
            continue
        series[field] = load_series_from_csv(path)
    return RawSeriesBundle(**series)


def write_raw_bundle_to_dir(bundle: RawSeriesBundle, directory: Path | str) -> None:
    """Write every non-empty series of `bundle` as `<field>.csv` under `directory`."""
    root = Path(directory)
    root.mkdir(parents=True, exist_ok=True)
    for field in RawSeriesBundle.model_fields:
        points = getattr(bundle, field)
        if not points:
            continue
        df = pd.DataFrame([{"date": p.date.isoformat(), "value": p.value} for p in points])
        df.to_csv(root / f"{field}.csv", index=False)
