"""Print the investment verdict for the latest record of the dataset."""
from __future__ import annotations

from pathlib import Path
import argparse
import logging
import sys

from krw_valuation.config import load_settings
from krw_valuation.data_models.daily_record import DailyRecord
from krw_valuation.data_models.investment_environment import InvestmentEnvironment
from krw_valuation.errors import KrwValuationError
from krw_valuation.services.dataset_assembly_service import load_dataset
from krw_valuation.services.investment_signal_service import evaluate_latest

logger = logging.getLogger(__name__)

STATUS_ICONS = {"PASS": "[PASS]", "FAIL": "[FAIL]", "N/A": "[ -- ]"}


def render_text(record: DailyRecord, env: InvestmentEnvironment) -> str:
    lines = [
        f"Date:        {record.date.isoformat()}",
        f"Market rate: {record.market_rate:,.2f} KRW",
        f"Fair rate:   {record.calculated_rate:,.0f} KRW (M2 basis)",
        f"Gap:         {record.gap:+.1f}%",
        "",
        f"Signal:      {env.overall_signal.value} - {env.overall_message}",
        "",
    ]
    for cond in env.conditions.values():
        marker = " (critical)" if cond.is_critical else ""
        lines.append(f"{STATUS_ICONS[cond.status.value]} {cond.name}{marker}")
        lines.append(f"       {cond.message}")
    if env.blockers:
        lines.append("")
        lines.append("Blockers:")
        lines.extend(f"  - {b}" for b in env.blockers)
    lines.append("")
    lines.append(env.timing_guidance)
    return "\n".join(lines)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Show the investment signal for the latest dataset record.")
    parser.add_argument("--dataset", dest="dataset", type=str, default=None,
                        help="Dataset JSON path (default: KRW_DATA_PATH or data/krw-data.json).")
    parser.add_argument("--json", dest="as_json", action="store_true",
                        help="Print the investment environment as JSON.")
    parser.add_argument("--env-file", dest="env_file", type=str, default=None)
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file)
        logging.basicConfig(level=settings.log_level.upper())
        path = Path(args.dataset) if args.dataset else settings.data_path
        dataset = load_dataset(path)
        env = evaluate_latest(dataset)
    except KrwValuationError as exc:
        # never fall back to stale or partial numbers
        print(f"Error: the valuation dataset is unavailable ({exc}).", file=sys.stderr)
        return 1

    if args.as_json:
        print(env.model_dump_json(indent=2, by_alias=True))
    else:
        print(render_text(dataset.data[-1], env))
    return 0


if __name__ == "__main__":
    sys.exit(main())
