"""Configuration for dataset assembly and the refresh/signal commands.

Settings come from the process environment, optionally seeded from a
`.env` file via python-dotenv.
"""
from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List, Optional
import logging
import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError

from krw_valuation.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_DATE = date(2010, 1, 1)
DEFAULT_BASE_RATE = 1167.0
DEFAULT_DATA_PATH = Path("data/krw-data.json")


class AssemblyConfig(BaseModel):
    """Base period of the fair-rate model.

    `base_kr_m2` / `base_us_m2` override the interpolated M2 levels at
    `base_date` when given.
    """

    base_date: date = DEFAULT_BASE_DATE
    base_rate: float = Field(default=DEFAULT_BASE_RATE, gt=0.0)
    base_kr_m2: Optional[float] = Field(default=None, gt=0.0)
    base_us_m2: Optional[float] = Field(default=None, gt=0.0)


class Settings(BaseModel):
    ecos_api_key: Optional[str] = None
    fred_api_key: Optional[str] = None
    exchange_rate_api_key: Optional[str] = None

    base_date: date = DEFAULT_BASE_DATE
    base_rate: float = Field(default=DEFAULT_BASE_RATE, gt=0.0)
    data_path: Path = DEFAULT_DATA_PATH
    log_level: str = "INFO"
    http_timeout: float = Field(default=30.0, gt=0.0)

    def assembly_config(self) -> AssemblyConfig:
        return AssemblyConfig(base_date=self.base_date, base_rate=self.base_rate)

    def require_api_keys(self) -> None:
        """Raise `ConfigurationError` listing every missing provider key."""
        missing: List[str] = []
        if not self.ecos_api_key:
            missing.append("ECOS_API_KEY")
        if not self.fred_api_key:
            missing.append("FRED_API_KEY")
        if not self.exchange_rate_api_key:
            missing.append("EXCHANGE_RATE_API_KEY")
        if missing:
            raise ConfigurationError(f"Missing API keys: {', '.join(missing)}")


_ENV_FIELDS = {
    "ECOS_API_KEY": "ecos_api_key",
    "FRED_API_KEY": "fred_api_key",
    "EXCHANGE_RATE_API_KEY": "exchange_rate_api_key",
    "BASE_DATE": "base_date",
    "BASE_RATE": "base_rate",
    "KRW_DATA_PATH": "data_path",
    "KRW_LOG_LEVEL": "log_level",
    "KRW_HTTP_TIMEOUT": "http_timeout",
}


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Build `Settings` from the environment.

    If `env_file` is given it must exist; otherwise a `.env` in the current
    directory is loaded when present. Variables already set in the process
    environment take precedence over the file.
    """
    if env_file is not None:
        path = Path(env_file)
        if not path.exists():
            raise ConfigurationError(f"Env file not found: {path}")
        load_dotenv(path)
    else:
        load_dotenv(find_dotenv(usecwd=True))

    values = {field: os.environ[var] for var, field in _ENV_FIELDS.items() if os.environ.get(var)}
    try:
        settings = Settings(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc

    logger.debug("Loaded settings (base_date=%s, base_rate=%s)", settings.base_date, settings.base_rate)
    return settings
