"""Tests for the terminal dashboard entry point."""
import asyncio
from unittest.mock import patch
from config import DashboardConfig
from main import favorite_from_snapshot, format_snapshot, parse_args, run
from storage import FavoritesStore, JsonFileStore
from test_weather_service import MockProvider, make_current, make_forecast
from weather_data import AirQualityReading, Coordinates, LocationCandidate, UVReading
from weather_service import DashboardSnapshot, SelectedLocation
from weather_utils import group_forecast_by_day

COORDS = Coordinates(51.51, -0.13)


def make_snapshot(uv=None, air_quality=None):
    forecast = make_forecast()
    return DashboardSnapshot(
        location=SelectedLocation(lat=51.51, lon=-0.13, name="London, GB"),
        current=make_current(),
        forecast=forecast,
        uv=uv,
        air_quality=air_quality,
        days=group_forecast_by_day(forecast.points),
    )


def make_config(tmp_path, api_key="test_key"):
    return DashboardConfig(
        api_key=api_key,
        location=COORDS,
        storage_path=str(tmp_path / "store.json"),
    )


def test_parse_args_coords():
    args = parse_args(["--coords", "51.5", "-0.12", "--fahrenheit"])
    assert args.coords == [51.5, -0.12]
    assert args.fahrenheit is True


def test_format_snapshot_lines():
    lines = format_snapshot(make_snapshot())

    assert lines[0] == "London, GB"
    assert "18°C" in lines[1]
    assert "Visibility 10.0 km" in lines[3]
    assert "WSW" in lines[4]
    assert any(line.startswith("  Comfort: Comfortable") for line in lines)
    assert not any("UV" in line for line in lines)
    assert "5-day forecast" in lines


def test_format_snapshot_enrichment_and_fahrenheit():
    lines = format_snapshot(
        make_snapshot(uv=UVReading(COORDS, 6.5), air_quality=AirQualityReading(COORDS, 4)),
        unit="F",
    )

    assert "64°F" in lines[1]
    assert any("UV 6.5: High" in line for line in lines)
    assert any("Air quality: Poor" in line for line in lines)


def test_run_without_api_key(tmp_path):
    args = parse_args([])
    assert asyncio.run(run(args, make_config(tmp_path, api_key=None))) == 2


def test_run_search_and_save(tmp_path, capsys):
    match = LocationCandidate("London", "GB", COORDS)
    args = parse_args(["--search", "London", "--save"])
    config = make_config(tmp_path)

    with patch("main.OpenWeatherProvider", return_value=MockProvider(matches=[match])):
        assert asyncio.run(run(args, config)) == 0

    assert "London, GB" in capsys.readouterr().out
    saved = FavoritesStore(JsonFileStore(config.storage_path)).list()
    assert [s.label for s in saved] == ["London, GB"]


def test_run_save_key_and_logout(tmp_path):
    config = make_config(tmp_path, api_key=None)

    asyncio.run(run(parse_args(["--save-key", "abc", "--list-favorites"]), config))
    assert JsonFileStore(config.storage_path).get("openweather_api_key") == "abc"

    assert asyncio.run(run(parse_args(["--logout"]), config)) == 0
    assert JsonFileStore(config.storage_path).get("openweather_api_key") is None


def test_saved_favorite_keeps_chosen_candidate(tmp_path):
    match = LocationCandidate("Greater London", "GB", COORDS, state="England")
    args = parse_args(["--search", "Greater London", "--save"])
    config = make_config(tmp_path)

    with patch("main.OpenWeatherProvider", return_value=MockProvider(matches=[match])):
        assert asyncio.run(run(args, config)) == 0

    saved = FavoritesStore(JsonFileStore(config.storage_path)).list()
    assert saved == [match]


def test_favorite_without_candidate_uses_loaded_weather():
    favorite = favorite_from_snapshot(make_snapshot())

    assert favorite.label == "London, GB"
    assert favorite.coordinates == COORDS
