"""Terminal weather dashboard."""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from config import ConfigError, DashboardConfig, load_config
from geolocation import StaticGeolocator
from openweather_provider import OpenWeatherProvider
from storage import CredentialStore, FavoritesStore, JsonFileStore, StorageError
from telemetry import RemoteSearchLog
from weather_data import Coordinates, LocationCandidate
from weather_service import DashboardSnapshot, Notification, WeatherDashboardService
from weather_utils import (
    format_date,
    format_temperature,
    format_time,
    format_visibility,
    get_air_quality_level,
    get_comfort_index,
    get_uv_level,
    get_wind_direction,
    is_night,
    round_half_up,
)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Weather dashboard")
    location = parser.add_mutually_exclusive_group()
    location.add_argument("--search", help="Place name to search for; the best match is shown")
    location.add_argument("--here", action="store_true", help="Use the configured device location")
    location.add_argument("--favorite", type=int, help="Show saved favorite number N (from --list-favorites)")
    location.add_argument("--coords", nargs=2, type=float, metavar=("LAT", "LON"))
    parser.add_argument("--save", action="store_true", help="Add the shown location to favorites")
    parser.add_argument("--list-favorites", action="store_true")
    parser.add_argument("--save-key", metavar="API_KEY", help="Store an OpenWeather API key")
    parser.add_argument("--logout", action="store_true", help="Forget the stored API key")
    parser.add_argument("--fahrenheit", action="store_true")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def print_notification(notification: Notification) -> None:
    prefix = "!" if notification.variant == "destructive" else "*"
    print(f"{prefix} {notification.title}: {notification.description}", file=sys.stderr)


def format_snapshot(snapshot: DashboardSnapshot, unit: str = "C") -> List[str]:
    current = snapshot.current
    night = is_night(current.sunrise, current.sunset)
    comfort = get_comfort_index(current.temperature, current.humidity)
    wind = current.wind

    lines = [
        snapshot.location.name,
        f"  {format_temperature(current.temperature, unit)}  {current.condition.description}"
        f"{' (night)' if night else ''}",
        f"  Feels like {format_temperature(current.feels_like, unit)}  "
        f"Low {format_temperature(current.temp_min, unit)}  High {format_temperature(current.temp_max, unit)}",
        f"  Humidity {current.humidity:.0f}%  Pressure {current.pressure:.0f} hPa  "
        f"Visibility {format_visibility(current.visibility)}",
        f"  Wind {wind.speed:.1f} m/s {get_wind_direction(wind.direction)}"
        + (f", gusts {wind.gust:.1f} m/s" if wind.gust else ""),
        f"  Sunrise {format_time(current.sunrise, current.timezone_offset)}  "
        f"Sunset {format_time(current.sunset, current.timezone_offset)}",
        f"  Comfort: {comfort.level} - {comfort.description}",
    ]
    if snapshot.uv is not None:
        uv = get_uv_level(snapshot.uv.value)
        lines.append(f"  UV {snapshot.uv.value:.1f}: {uv.level} - {uv.description}")
    if snapshot.air_quality is not None:
        aq = get_air_quality_level(snapshot.air_quality.index)
        lines.append(f"  Air quality: {aq.level} - {aq.description}")

    lines.append("")
    lines.append("5-day forecast")
    for day in snapshot.days:
        first = day.points[0].timestamp
        condition = day.condition.description if day.condition else ""
        lines.append(
            f"  {format_date(first):<12} {format_temperature(day.temp_min, unit):>6} / "
            f"{format_temperature(day.temp_max, unit):<6} {round_half_up(day.avg_pop * 100):>3}%  {condition}"
        )
    return lines


async def run(args: argparse.Namespace, config: DashboardConfig) -> int:
    store = JsonFileStore(config.storage_path)
    credentials = CredentialStore(store)
    favorites = FavoritesStore(store)

    if args.logout:
        credentials.remove()
        print("API key removed")
        return 0
    if args.save_key:
        credentials.save(args.save_key)
        print("API key saved")
    if args.list_favorites:
        for number, saved in enumerate(favorites.list(), start=1):
            print(f"{number}. {saved.label}")
        return 0

    api_key = config.api_key or credentials.get()
    if not api_key:
        print("No API key: pass --save-key or set OPENWEATHER_API_KEY", file=sys.stderr)
        return 2

    provider = OpenWeatherProvider(api_key=api_key, lang=config.lang, timeout=config.timeout)
    service = WeatherDashboardService(
        provider,
        notifier=print_notification,
        telemetry=RemoteSearchLog(config.telemetry_url, config.telemetry_token),
    )

    snapshot = None
    candidate = None
    if args.search:
        matches = await service.search(args.search)
        if not matches:
            print(f"No places found for {args.search!r}", file=sys.stderr)
            return 1
        candidate = matches[0]
        snapshot = await service.select_candidate(candidate)
    elif args.favorite is not None:
        saved = favorites.list()
        if not 1 <= args.favorite <= len(saved):
            print(f"No favorite number {args.favorite}", file=sys.stderr)
            return 1
        candidate = saved[args.favorite - 1]
        snapshot = await service.select_candidate(candidate)
    elif args.coords:
        snapshot = await service.select_coordinates(*args.coords)
    else:
        snapshot = await service.use_current_location(StaticGeolocator(config.location))

    if snapshot is None:
        return 1
    if args.save and favorites.add(favorite_from_snapshot(snapshot, candidate)):
        print(f"Saved {snapshot.location.name} to favorites", file=sys.stderr)
    print("\n".join(format_snapshot(snapshot, "F" if args.fahrenheit else "C")))
    await service.flush_telemetry()
    return 0


def favorite_from_snapshot(
    snapshot: DashboardSnapshot, candidate: Optional[LocationCandidate] = None
) -> LocationCandidate:
    """The place to save: the chosen search result as is, else one built from the loaded weather."""
    if candidate is not None:
        return candidate
    current = snapshot.current
    return LocationCandidate(
        name=current.location_name or snapshot.location.name,
        country=current.country,
        coordinates=Coordinates(latitude=snapshot.location.lat, longitude=snapshot.location.lon),
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    try:
        config = load_config()
        return asyncio.run(run(args, config))
    except (ConfigError, StorageError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
