"""Refresh the persisted KRW valuation dataset.

Intended to be invoked once per day by an external scheduler.
"""
# Example:
#
# krw-refresh --source api --exchange-history data/raw/exchange_rates.csv --output data/krw-data.json
# krw-refresh --source csv --input-dir data/raw
# krw-refresh --source sample
from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path
import argparse
import logging
import sys

from krw_valuation.config import AssemblyConfig, load_settings
from krw_valuation.errors import KrwValuationError
from krw_valuation.providers.collector import fetch_raw_bundle
from krw_valuation.services.dataset_assembly_service import assemble_dataset, save_dataset
from krw_valuation.services.sample_data_service import generate_sample_bundle
from krw_valuation.services.series_ingestion_service import (
    load_raw_bundle_from_dir,
    load_series_from_csv,
    normalize_points,
)

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r}; use YYYY-MM-DD") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Assemble the USD/KRW M2 valuation dataset.")
    parser.add_argument("--source", choices=("api", "csv", "sample"), default="api",
                        help="Where raw series come from: provider APIs, a CSV directory, or synthetic data.")
    parser.add_argument("--input-dir", dest="input_dir", type=str, default="data/raw",
                        help="Directory with one <series>.csv per series (used with --source csv).")
    parser.add_argument("--exchange-history", dest="exchange_history", type=str, default=None,
                        help="CSV of historical USD/KRW rates merged with the live rate (used with --source api).")
    parser.add_argument("--output", dest="output", type=str, default=None,
                        help="Dataset JSON path (default: KRW_DATA_PATH or data/krw-data.json).")
    parser.add_argument("--base-date", dest="base_date", type=_parse_date, default=None,
                        help="Base date of the fair-rate model (YYYY-MM-DD).")
    parser.add_argument("--base-rate", dest="base_rate", type=float, default=None,
                        help="USD/KRW rate at the base date.")
    parser.add_argument("--env-file", dest="env_file", type=str, default=None,
                        help="Optional .env file with API keys and defaults.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except KrwValuationError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error("%s", exc)
        return 2

    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # provider timestamps are UTC
    today = datetime.now(timezone.utc).date()
    output = Path(args.output) if args.output else settings.data_path

    try:
        config = AssemblyConfig(
            base_date=args.base_date or settings.base_date,
            base_rate=args.base_rate or settings.base_rate,
        )
        if args.source == "api":
            raw = fetch_raw_bundle(settings, config.base_date, today)
            if args.exchange_history:
                history = load_series_from_csv(args.exchange_history)
                raw.exchange_rates = normalize_points(history + raw.exchange_rates)
        elif args.source == "csv":
            raw = load_raw_bundle_from_dir(args.input_dir)
        else:
            raw = generate_sample_bundle(config.base_date, today)

        if raw.exchange_rates:
            # the latest market rate must fall inside the assembly window
            today = max(today, max(p.date for p in raw.exchange_rates))
        dataset = assemble_dataset(raw, config, today=today)
    except (KrwValuationError, FileNotFoundError, ValueError) as exc:
        logger.error("Dataset refresh failed: %s", exc)
        return 1

    if not dataset.data:
        logger.error("Assembled dataset has no records; keeping the previous snapshot at %s", output)
        return 1

    try:
        save_dataset(dataset, output)
    except OSError as exc:
        logger.error("Could not write dataset to %s: %s", output, exc)
        return 1

    latest = dataset.data[-1]
    logger.info(
        "Latest %s: market %.2f, fair %.0f, gap %+.1f%%",
        latest.date.isoformat(), latest.market_rate, latest.calculated_rate, latest.gap,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
