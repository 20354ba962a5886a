"""Environment configuration for the dashboard."""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from weather_data import Coordinates

DEFAULT_STORAGE_PATH = "~/.weather_dashboard.json"


class ConfigError(Exception):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class DashboardConfig:
    api_key: Optional[str]
    location: Optional[Coordinates]
    lang: str = "en"
    timeout: int = 10
    storage_path: str = DEFAULT_STORAGE_PATH
    telemetry_url: Optional[str] = None
    telemetry_token: Optional[str] = None


def _parse_location(lat: Optional[str], lon: Optional[str]) -> Optional[Coordinates]:
    if not lat and not lon:
        return None
    if not lat or not lon:
        raise ConfigError("WEATHER_LAT and WEATHER_LON must be set together")
    try:
        return Coordinates(latitude=float(lat), longitude=float(lon))
    except ValueError as exc:
        raise ConfigError(f"Invalid coordinates: {exc}") from exc


def load_config(env_file: Optional[str] = None) -> DashboardConfig:
    """
    Read configuration from the environment, after loading a .env file.

    OPENWEATHER_API_KEY may be absent: the key is then taken from the
    credential store.
    """
    load_dotenv(env_file)

    timeout = os.getenv("WEATHER_TIMEOUT", "10")
    try:
        timeout_val = int(timeout)
    except ValueError as exc:
        raise ConfigError(f"Invalid WEATHER_TIMEOUT: {timeout!r}") from exc

    config = DashboardConfig(
        api_key=os.getenv("OPENWEATHER_API_KEY") or None,
        location=_parse_location(os.getenv("WEATHER_LAT"), os.getenv("WEATHER_LON")),
        lang=os.getenv("WEATHER_LANG", "en"),
        timeout=timeout_val,
        storage_path=os.getenv("WEATHER_STORAGE_PATH", DEFAULT_STORAGE_PATH),
        telemetry_url=os.getenv("WEATHER_TELEMETRY_URL") or None,
        telemetry_token=os.getenv("WEATHER_TELEMETRY_TOKEN") or None,
    )
    logging.info(
        "Configuration loaded: location=%s lang=%s storage=%s telemetry=%s",
        config.location,
        config.lang,
        config.storage_path,
        bool(config.telemetry_url and config.telemetry_token),
    )
    return config
