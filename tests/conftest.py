"""Pytest configuration helpers.

Ensure the project's `src/` directory is on `sys.path` so imports like
`from krw_valuation...` work during test collection.
"""
from pathlib import Path
import os
import sys

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    # Insert at front so tests prefer local package sources
    sys.path.insert(0, str(SRC))


SETTINGS_ENV_VARS = (
    "ECOS_API_KEY",
    "FRED_API_KEY",
    "EXCHANGE_RATE_API_KEY",
    "BASE_DATE",
    "BASE_RATE",
    "KRW_DATA_PATH",
    "KRW_LOG_LEVEL",
    "KRW_HTTP_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run in an empty directory with none of the settings variables set.

    Each variable is set then deleted so monkeypatch also removes anything
    python-dotenv writes into os.environ during the test.
    """
    for var in SETTINGS_ENV_VARS:
        monkeypatch.setenv(var, "placeholder")
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)
    assert not any(os.environ.get(var) for var in SETTINGS_ENV_VARS)
    return tmp_path
