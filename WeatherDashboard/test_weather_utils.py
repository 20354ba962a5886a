"""Tests for formatting and classification helpers."""
import pytest
from datetime import date, datetime, timezone
from weather_data import Condition, ForecastPoint, Wind
from weather_utils import (
    format_date,
    format_temperature,
    format_time,
    format_visibility,
    get_air_quality_level,
    get_comfort_index,
    get_uv_level,
    get_weather_animation,
    get_weather_background,
    get_weather_icon,
    get_wind_direction,
    group_forecast_by_day,
    heat_index,
    is_night,
)

DAY_START = int(datetime(2024, 7, 1, tzinfo=timezone.utc).timestamp())
THREE_HOURS = 3 * 3600


def make_point(timestamp, temp, pop=0.0, category="Clear"):
    return ForecastPoint(
        timestamp=timestamp,
        temperature=temp,
        feels_like=temp,
        humidity=50.0,
        pop=pop,
        wind=Wind(speed=3.0, direction=180.0),
        condition=Condition(category=category, description=category.lower(), icon="01d"),
    )


def test_format_temperature_celsius():
    assert format_temperature(21.4) == "21°C"
    assert format_temperature(21.4) == format_temperature(21.4)


def test_format_temperature_rounds_half_up():
    assert format_temperature(21.5) == "22°C"
    assert format_temperature(-0.5) == "0°C"
    assert format_temperature(-3.6) == "-4°C"


def test_format_temperature_fahrenheit():
    assert format_temperature(0, "F") == "32°F"
    assert format_temperature(21.4, "F") == "71°F"


def test_format_time_with_offset():
    ts = int(datetime(2024, 7, 1, 12, 30, tzinfo=timezone.utc).timestamp())
    assert format_time(ts) == "12:30"
    assert format_time(ts, 7200) == "14:30"
    assert format_time(ts, -18000) == "07:30"


def test_format_date():
    ts = int(datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc).timestamp())
    assert format_date(ts, tz=timezone.utc) == "Fri, Jan 5"


def test_format_visibility():
    assert format_visibility(10000) == "10.0 km"
    assert format_visibility(2460) == "2.5 km"


def test_weather_icon():
    assert get_weather_icon("04d") == "https://openweathermap.org/img/w/04d.png"
    assert get_weather_icon("04d", large=True) == "https://openweathermap.org/img/w/04d@2x.png"


@pytest.mark.parametrize("degrees,expected", [
    (0, "N"),
    (11, "N"),
    (12, "NNE"),
    (45, "NE"),
    (90, "E"),
    (180, "S"),
    (270, "W"),
    (348.75, "N"),
    (337.5, "NNW"),
    (360, "N"),
])
def test_wind_direction(degrees, expected):
    assert get_wind_direction(degrees) == expected


def test_comfort_index_bands():
    assert get_comfort_index(20, 50).level == "Comfortable"
    assert get_comfort_index(35, 80).level == "Danger"
    assert get_comfort_index(35, 80).color == "text-destructive"


def test_comfort_index_intermediate_bands():
    # heat index about 88°F and 99°F
    assert get_comfort_index(29, 60).level == "Caution"
    assert get_comfort_index(32, 60).level == "Extreme Caution"


def test_comfort_index_legacy_formula():
    """Celsius fed straight into the formula, as the first release did."""
    assert get_comfort_index(20, 50, legacy=True).level == "Comfortable"
    assert get_comfort_index(35, 80, legacy=True).level == "Comfortable"
    assert get_comfort_index(45, 50, legacy=True).level == "Caution"


def test_heat_index_uses_simple_formula_below_80f():
    assert heat_index(68.0, 50.0) == pytest.approx(66.85)


def test_uv_level_bands():
    assert get_uv_level(2).level == "Low"
    assert get_uv_level(3).level == "Moderate"
    assert get_uv_level(6).level == "High"
    assert get_uv_level(8).level == "Very High"
    assert get_uv_level(11).level == "Extreme"


def test_air_quality_levels():
    assert get_air_quality_level(1).level == "Good"
    assert get_air_quality_level(3).level == "Moderate"
    assert get_air_quality_level(5).level == "Very Poor"
    assert get_air_quality_level(9).level == "Unknown"
    assert get_air_quality_level(0).color == "text-muted-foreground"


def test_animation_and_background():
    rain = Condition("Rain", "light rain", "10d")
    clear = Condition("Clear", "clear sky", "01n")
    unknown = Condition("Tornado", "tornado", "50d")

    assert get_weather_animation(rain) == "animate-bounce"
    assert get_weather_animation(unknown) == "animate-weather-pulse"
    assert get_weather_background(clear) == "bg-gradient-sky"
    assert get_weather_background(clear, is_night=True).startswith("bg-gradient-to-br from-indigo-900")
    assert get_weather_background(unknown, is_night=True) == "bg-gradient-atmospheric"


def test_is_night():
    sunrise, sunset = 1000, 2000
    assert is_night(sunrise, sunset, now=500) is True
    assert is_night(sunrise, sunset, now=1500) is False
    assert is_night(sunrise, sunset, now=2500) is True


def test_group_forecast_by_day():
    """8 points of one day plus 2 of the next give two groups."""
    temps = [12.0, 10.5, 11.0, 15.0, 19.5, 21.0, 17.0, 14.0, 13.0, 12.5]
    points = [make_point(DAY_START + i * THREE_HOURS, t, pop=i / 10) for i, t in enumerate(temps)]

    days = group_forecast_by_day(points, tz=timezone.utc)

    assert len(days) == 2
    first = days[0]
    assert first.day == date(2024, 7, 1)
    assert list(first.points) == points[:8]
    assert first.temp_min == min(temps[:8])
    assert first.temp_max == max(temps[:8])
    assert first.avg_pop == pytest.approx(sum(i / 10 for i in range(8)) / 8)
    assert len(days[1].points) == 2


def test_group_forecast_uses_middle_point_condition():
    categories = ["Clear", "Clouds", "Rain", "Snow"]
    points = [
        make_point(DAY_START + i * THREE_HOURS, 10.0, category=c)
        for i, c in enumerate(categories)
    ]

    days = group_forecast_by_day(points, tz=timezone.utc)

    assert days[0].condition.category == "Rain"


def test_group_forecast_keeps_first_five_days():
    points = [make_point(DAY_START + i * 12 * 3600, 10.0) for i in range(14)]

    days = group_forecast_by_day(points, tz=timezone.utc)

    assert len(days) == 5
    assert days[0].day == date(2024, 7, 1)
    assert days[-1].day == date(2024, 7, 5)
