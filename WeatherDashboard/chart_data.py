"""Chart series built from a forecast - pure functions, no plotting."""
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import List, Optional, Sequence

from weather_data import ForecastPoint
from weather_utils import round_half_up

CHART_POINTS = 24  # three days of three-hour samples

COMPASS_8 = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


@dataclass(frozen=True)
class TemperatureSample:
    time: str
    temperature: int
    feels_like: int
    humidity: float
    timestamp: int


@dataclass(frozen=True)
class PrecipitationSample:
    time: str
    precipitation: int  # percent chance
    rain: float
    snow: float
    timestamp: int


@dataclass(frozen=True)
class WindSample:
    time: str
    speed: float
    gust: float
    direction: float
    timestamp: int


@dataclass(frozen=True)
class PressureSample:
    time: str
    pressure: Optional[float]
    timestamp: int


@dataclass(frozen=True)
class WindShare:
    direction: str
    count: int
    percentage: int


def _window(points: Sequence[ForecastPoint], limit: int) -> Sequence[ForecastPoint]:
    return list(points)[:limit]


def _clock(timestamp: int, tz: Optional[tzinfo]) -> str:
    """HH:MM label in tz, or local time like group_forecast_by_day."""
    return datetime.fromtimestamp(timestamp, tz=tz).strftime("%H:%M")


def temperature_series(
    points: Sequence[ForecastPoint],
    limit: int = CHART_POINTS,
    tz: Optional[tzinfo] = None,
) -> List[TemperatureSample]:
    return [
        TemperatureSample(
            time=_clock(p.timestamp, tz),
            temperature=round_half_up(p.temperature),
            feels_like=round_half_up(p.feels_like),
            humidity=p.humidity,
            timestamp=p.timestamp,
        )
        for p in _window(points, limit)
    ]


def precipitation_series(
    points: Sequence[ForecastPoint],
    limit: int = CHART_POINTS,
    tz: Optional[tzinfo] = None,
) -> List[PrecipitationSample]:
    return [
        PrecipitationSample(
            time=_clock(p.timestamp, tz),
            precipitation=round_half_up(p.pop * 100),
            rain=p.rain_3h,
            snow=p.snow_3h,
            timestamp=p.timestamp,
        )
        for p in _window(points, limit)
    ]


def wind_series(
    points: Sequence[ForecastPoint],
    limit: int = CHART_POINTS,
    tz: Optional[tzinfo] = None,
) -> List[WindSample]:
    """Wind speed and gust rounded to one decimal; a missing gust plots as 0."""
    return [
        WindSample(
            time=_clock(p.timestamp, tz),
            speed=round_half_up(p.wind.speed * 10) / 10,
            gust=round_half_up(p.wind.gust * 10) / 10 if p.wind.gust else 0,
            direction=p.wind.direction,
            timestamp=p.timestamp,
        )
        for p in _window(points, limit)
    ]


def pressure_series(
    points: Sequence[ForecastPoint],
    limit: int = CHART_POINTS,
    tz: Optional[tzinfo] = None,
) -> List[PressureSample]:
    return [
        PressureSample(time=_clock(p.timestamp, tz), pressure=p.pressure, timestamp=p.timestamp)
        for p in _window(points, limit)
    ]


def wind_distribution(points: Sequence[ForecastPoint], limit: int = CHART_POINTS) -> List[WindShare]:
    """
    Share of samples blowing from each of the eight main compass points.

    Returns one entry per point in N, NE, ... NW order, including empty ones.
    """
    window = _window(points, limit)
    counts = dict.fromkeys(COMPASS_8, 0)
    for p in window:
        counts[COMPASS_8[round_half_up(p.wind.direction / 45) % 8]] += 1

    total = len(window)
    return [
        WindShare(
            direction=direction,
            count=count,
            percentage=round_half_up(count / total * 100) if total else 0,
        )
        for direction, count in counts.items()
    ]
