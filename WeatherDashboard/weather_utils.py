"""Formatting and classification helpers for weather display - pure functions for testability."""
import math
import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional

from weather_data import Condition, DailyForecast, ForecastPoint

ICON_URL = "https://openweathermap.org/img/w/{code}{size}.png"

WIND_DIRECTIONS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]


@dataclass(frozen=True)
class Classification:
    """Qualitative level with a display color token and a short explanation."""
    level: str
    color: str
    description: str


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, as JavaScript's Math.round does."""
    return int(math.floor(value + 0.5))


def celsius_to_fahrenheit(temp_c: float) -> float:
    return temp_c * 9 / 5 + 32


def format_temperature(temp: float, unit: str = "C") -> str:
    """
    Format a Celsius temperature for display.

    Args:
        temp: Temperature in Celsius
        unit: "C" or "F" - the display unit

    Returns:
        Rounded temperature with unit suffix, e.g. "21°C" or "70°F"
    """
    if unit == "F":
        return f"{round_half_up(celsius_to_fahrenheit(temp))}°F"
    return f"{round_half_up(temp)}°C"


def format_time(timestamp: int, timezone_offset: Optional[int] = None) -> str:
    """Format a UNIX timestamp as HH:MM, shifted to the location's UTC offset when given."""
    offset = timezone(timedelta(seconds=timezone_offset or 0))
    return datetime.fromtimestamp(timestamp, tz=offset).strftime("%H:%M")


def format_date(timestamp: int, tz: Optional[tzinfo] = None) -> str:
    """Short date label such as "Mon, Jan 5"."""
    moment = datetime.fromtimestamp(timestamp, tz=tz)
    return f"{moment.strftime('%a, %b')} {moment.day}"


def format_visibility(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def get_weather_icon(icon_code: str, large: bool = False) -> str:
    """Build the provider icon URL; large selects the @2x variant."""
    size = "@2x" if large else ""
    return ICON_URL.format(code=icon_code, size=size)


def get_weather_animation(condition: Condition) -> str:
    """Animation class for a condition category."""
    animations = {
        "clear": "animate-weather-pulse",
        "clouds": "animate-float",
        "rain": "animate-bounce",
        "drizzle": "animate-bounce",
        "thunderstorm": "animate-pulse",
        "snow": "animate-float",
        "mist": "animate-pulse",
        "fog": "animate-pulse",
        "haze": "animate-pulse",
    }
    return animations.get(condition.category.lower(), "animate-weather-pulse")


def get_weather_background(condition: Condition, is_night: bool = False) -> str:
    """Background gradient class for a condition category, with a separate night palette."""
    main = condition.category.lower()

    if is_night:
        night_backgrounds = {
            "clear": "bg-gradient-to-br from-indigo-900 via-purple-900 to-pink-900",
            "clouds": "bg-gradient-storm",
            "rain": "bg-gradient-to-br from-gray-900 via-blue-900 to-indigo-900",
            "drizzle": "bg-gradient-to-br from-gray-900 via-blue-900 to-indigo-900",
            "thunderstorm": "bg-gradient-to-br from-gray-900 via-blue-900 to-indigo-900",
        }
        return night_backgrounds.get(main, "bg-gradient-atmospheric")

    day_backgrounds = {
        "clear": "bg-gradient-sky",
        "clouds": "bg-gradient-to-br from-gray-600 via-blue-700 to-blue-800",
        "rain": "bg-gradient-to-br from-gray-700 via-blue-800 to-blue-900",
        "drizzle": "bg-gradient-to-br from-gray-700 via-blue-800 to-blue-900",
        "thunderstorm": "bg-gradient-storm",
        "snow": "bg-gradient-to-br from-blue-200 via-blue-300 to-blue-400",
    }
    return day_backgrounds.get(main, "bg-gradient-sky")


def get_wind_direction(degrees: float) -> str:
    """
    Get the 16-point compass label for a wind direction.

    Each point covers 22.5°, centred on its heading, so 11° is still "N"
    and 360° wraps back to "N".
    """
    index = round_half_up(degrees / 22.5) % 16
    return WIND_DIRECTIONS[index]


def heat_index(temp_f: float, humidity: float) -> float:
    """
    NWS heat index in °F.

    Uses Steadman's simple approximation, switching to the Rothfusz regression
    (with its humidity adjustments) once the simple result averaged with the
    air temperature reaches 80°F.
    """
    simple = 0.5 * (temp_f + 61.0 + ((temp_f - 68.0) * 1.2) + (humidity * 0.094))
    if (simple + temp_f) / 2 < 80:
        return simple

    t, rh = temp_f, humidity
    hi = (
        -42.379
        + 2.04901523 * t
        + 10.14333127 * rh
        - 0.22475541 * t * rh
        - 0.00683783 * t * t
        - 0.05481717 * rh * rh
        + 0.00122874 * t * t * rh
        + 0.00085282 * t * rh * rh
        - 0.00000199 * t * t * rh * rh
    )
    if rh < 13 and 80 <= t <= 112:
        hi -= ((13 - rh) / 4) * math.sqrt((17 - abs(t - 95.0)) / 17)
    elif rh > 85 and 80 <= t <= 87:
        hi += ((rh - 85) / 10) * ((87 - t) / 5)
    return hi


def get_comfort_index(temp: float, humidity: float, legacy: bool = False) -> Classification:
    """
    Classify thermal comfort from temperature and relative humidity.

    Args:
        temp: Air temperature in Celsius
        humidity: Relative humidity in percent
        legacy: Use the first release's formula, which adds the Celsius value
            to the simple heat index with no unit conversion

    Returns:
        Classification with level Comfortable, Caution, Extreme Caution or Danger
    """
    if legacy:
        index = temp + (0.5 * (temp + 61.0 + ((temp - 68.0) * 1.2) + (humidity * 0.094)))
    else:
        index = heat_index(celsius_to_fahrenheit(temp), humidity)

    if index < 80:
        return Classification("Comfortable", "text-success", "Pleasant conditions")
    elif index < 90:
        return Classification("Caution", "text-warning", "Possible fatigue with prolonged exposure")
    elif index < 105:
        return Classification("Extreme Caution", "text-destructive", "Heat exhaustion possible")
    else:
        return Classification("Danger", "text-destructive", "Heat stroke highly likely")


def get_uv_level(uv_index: float) -> Classification:
    if uv_index < 3:
        return Classification("Low", "text-success", "Minimal protection required")
    elif uv_index < 6:
        return Classification("Moderate", "text-warning", "Some protection required")
    elif uv_index < 8:
        return Classification("High", "text-destructive", "Protection essential")
    elif uv_index < 11:
        return Classification("Very High", "text-destructive", "Extra protection required")
    else:
        return Classification("Extreme", "text-destructive", "Avoid sun exposure")


AIR_QUALITY_LEVELS = {
    1: Classification("Good", "text-success", "Air quality is satisfactory"),
    2: Classification("Fair", "text-warning", "Acceptable air quality"),
    3: Classification("Moderate", "text-warning", "Sensitive individuals may experience symptoms"),
    4: Classification("Poor", "text-destructive", "Everyone may experience symptoms"),
    5: Classification("Very Poor", "text-destructive", "Health warnings"),
}

UNKNOWN_AIR_QUALITY = Classification("Unknown", "text-muted-foreground", "No data available")


def get_air_quality_level(aqi: int) -> Classification:
    """Map the provider's 1-5 AQI to a level; anything else is Unknown."""
    return AIR_QUALITY_LEVELS.get(aqi, UNKNOWN_AIR_QUALITY)


def is_night(sunrise: int, sunset: int, now: Optional[float] = None) -> bool:
    """True when now (default: current time) is before sunrise or after sunset."""
    if now is None:
        now = time.time()
    return now < sunrise or now > sunset


def group_forecast_by_day(
    points: Iterable[ForecastPoint],
    days: int = 5,
    tz: Optional[tzinfo] = None,
) -> List[DailyForecast]:
    """
    Group forecast points by calendar date.

    Dates are taken in local time unless tz is given. Order within each day
    follows the input, and only the first `days` distinct dates are kept.
    The representative condition is the point at the middle index of the
    day, not the most frequent or the midday one.

    Args:
        points: Chronologically ordered forecast points
        days: Maximum number of days to return
        tz: Time zone used to determine calendar dates

    Returns:
        One DailyForecast per date, earliest first
    """
    grouped: Dict[date, List[ForecastPoint]] = {}
    for point in points:
        day = datetime.fromtimestamp(point.timestamp, tz=tz).date()
        grouped.setdefault(day, []).append(point)

    daily = []
    for day, day_points in list(grouped.items())[:days]:
        temps = [p.temperature for p in day_points]
        daily.append(
            DailyForecast(
                day=day,
                points=tuple(day_points),
                temp_min=min(temps),
                temp_max=max(temps),
                avg_pop=sum(p.pop for p in day_points) / len(day_points),
                condition=day_points[len(day_points) // 2].condition,
            )
        )
    return daily
