"""Settings and logging setup."""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

from .errors import ValidationError

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass
class Settings:
    """Runtime configuration, normally read from the environment."""

    data_dir: Path = Path("data")
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    gemini_base_url: str = DEFAULT_BASE_URL
    advisor_timeout: float = 30.0
    trip_fuel_price: float = 5.80
    log_level: str = "WARNING"
    secret_key: str = "dev-secret-key-change-in-prod"


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {value!r}")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from environment variables (and a .env file if present)."""
    load_dotenv(env_file)
    return Settings(
        data_dir=Path(os.getenv("FUELLOG_DATA_DIR", "data")),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        gemini_base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
        advisor_timeout=_float_env("FUELLOG_ADVISOR_TIMEOUT", 30.0),
        trip_fuel_price=_float_env("FUELLOG_TRIP_FUEL_PRICE", 5.80),
        log_level=os.getenv("FUELLOG_LOG_LEVEL", "WARNING").upper(),
        secret_key=os.getenv("SECRET_KEY", "dev-secret-key-change-in-prod"),
    )


def configure_logging(level: str = "WARNING") -> None:
    """Replace loguru's default sink with a single stderr sink at `level`."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
