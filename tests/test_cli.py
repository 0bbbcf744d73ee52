from datetime import datetime, timedelta, timezone
import json

from krw_valuation.cli import refresh_dataset, show_signal
from krw_valuation.data_models.time_series import RawSeriesBundle, TimePoint
from krw_valuation.services import dataset_assembly_service


def test_refresh_from_sample_data_writes_dataset(clean_env):
    output = clean_env / "out" / "krw-data.json"

    code = refresh_dataset.main(["--source", "sample", "--base-date", "2024-01-01", "--output", str(output)])

    assert code == 0
    doc = json.loads(output.read_text(encoding="utf-8"))
    assert doc["metadata"]["baseDate"] == "2024-01-01"
    assert doc["data"]


def test_refresh_from_missing_csv_dir_fails(clean_env):
    output = clean_env / "krw-data.json"

    code = refresh_dataset.main(["--source", "csv", "--input-dir", str(clean_env / "raw"), "--output", str(output)])

    assert code == 1
    assert not output.exists()


def test_refresh_api_without_keys_fails(clean_env):
    code = refresh_dataset.main(["--source", "api", "--output", str(clean_env / "krw-data.json")])
    assert code == 1


def test_show_signal_prints_verdict(clean_env, capsys):
    output = clean_env / "krw-data.json"
    assert refresh_dataset.main(["--source", "sample", "--base-date", "2024-01-01", "--output", str(output)]) == 0
    capsys.readouterr()

    assert show_signal.main(["--dataset", str(output)]) == 0
    text = capsys.readouterr().out
    assert "Signal:" in text
    assert "Valuation (M2 basis)" in text


def test_show_signal_json_output(clean_env, capsys):
    output = clean_env / "krw-data.json"
    assert refresh_dataset.main(["--source", "sample", "--base-date", "2024-01-01", "--output", str(output)]) == 0
    capsys.readouterr()

    assert show_signal.main(["--dataset", str(output), "--json"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["overallSignal"] in {"STRONG_BUY", "BUY", "HOLD", "SELL", "STRONG_SELL"}
    assert set(doc["conditions"]) == {"value", "rate_diff", "dxy", "vix", "fundamental"}


def test_show_signal_missing_dataset_reports_error(clean_env, capsys):
    code = show_signal.main(["--dataset", str(clean_env / "missing.json")])

    assert code == 1
    assert "Error: the valuation dataset is unavailable" in capsys.readouterr().err


def test_show_signal_non_utf8_dataset_reports_error(clean_env, capsys):
    path = clean_env / "krw-data.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    assert show_signal.main(["--dataset", str(path)]) == 1
    assert "Error: the valuation dataset is unavailable" in capsys.readouterr().err


def test_refresh_api_keeps_live_rate_dated_after_today(clean_env, monkeypatch):
    utc_today = datetime.now(timezone.utc).date()
    base = utc_today.replace(day=1)
    live_date = utc_today + timedelta(days=1)

    def fake_fetch(settings, start, end):
        return RawSeriesBundle(
            exchange_rates=[TimePoint(date=live_date, value=1350.0)],
            kr_m2=[TimePoint(date=base, value=3000.0)],
            us_m2=[TimePoint(date=base, value=20.0)],
        )

    monkeypatch.setattr(refresh_dataset, "fetch_raw_bundle", fake_fetch)
    output = clean_env / "krw-data.json"

    code = refresh_dataset.main(["--source", "api", "--base-date", base.isoformat(), "--output", str(output)])

    assert code == 0
    doc = json.loads(output.read_text(encoding="utf-8"))
    assert doc["data"][-1]["date"] == live_date.isoformat()
    assert doc["data"][-1]["marketRate"] == 1350.0


def test_refresh_write_failure_returns_error(clean_env, monkeypatch):
    def failing_replace(src, dst):
        raise OSError("read-only file system")

    monkeypatch.setattr(dataset_assembly_service.os, "replace", failing_replace)
    output = clean_env / "out" / "krw-data.json"

    code = refresh_dataset.main(["--source", "sample", "--base-date", "2024-01-01", "--output", str(output)])

    assert code == 1
    assert not output.exists()
    assert not (clean_env / "out" / "krw-data.json.tmp").exists()
