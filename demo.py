"""End-to-end demo on synthetic data.

Generates sample series, assembles the dataset, writes it to disk and
prints the investment verdict for the latest record.
"""
from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
import logging
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), "src"))

import typer

from krw_valuation.cli.show_signal import render_text
from krw_valuation.config import AssemblyConfig
from krw_valuation.services.dataset_assembly_service import assemble_dataset, save_dataset
from krw_valuation.services.investment_signal_service import evaluate_latest
from krw_valuation.services.sample_data_service import generate_sample_bundle


def run_demo(
    base_date: str = "2010-01-01",
    base_rate: float = 1167.0,
    output: str = "out/krw-data-sample.json",
    seed: int = 42,
):
    logging.basicConfig(level=logging.INFO)

    start = datetime.strptime(base_date, "%Y-%m-%d").date()
    today = date.today()

    print("Generating sample series...")
    raw = generate_sample_bundle(start, today, seed=seed)
    print(f"Generated {len(raw.exchange_rates)} exchange-rate points and {len(raw.kr_m2)} monthly M2 points")

    print("Assembling dataset...")
    dataset = assemble_dataset(raw, AssemblyConfig(base_date=start, base_rate=base_rate), today=today)
    print(f"Assembled {len(dataset.data)} daily records")

    path = save_dataset(dataset, Path(output))
    print(f"Wrote dataset to {path}")

    env = evaluate_latest(dataset)
    print()
    print(render_text(dataset.data[-1], env))


if __name__ == "__main__":
    typer.run(run_demo)
