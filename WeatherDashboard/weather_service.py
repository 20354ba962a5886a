"""Dashboard service - coordinates location selection and weather loads."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from geolocation import GeolocatorBase, LocationUnavailableError
from telemetry import RemoteSearchLog
from weather_data import (
    AirQualityReading,
    CurrentConditions,
    DailyForecast,
    ForecastSeries,
    LocationCandidate,
    UVReading,
)
from weather_provider import ProviderError, WeatherProviderBase
from weather_utils import group_forecast_by_day


@dataclass(frozen=True)
class SelectedLocation:
    lat: float
    lon: float
    name: str


@dataclass(frozen=True)
class Notification:
    """User-visible message, e.g. a toast."""
    title: str
    description: str
    variant: str = "default"  # or "destructive"


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything one load produced. UV and air quality are optional enrichment."""
    location: SelectedLocation
    current: CurrentConditions
    forecast: ForecastSeries
    uv: Optional[UVReading] = None
    air_quality: Optional[AirQualityReading] = None
    days: List[DailyForecast] = field(default_factory=list)
    request_token: int = 0


Notifier = Callable[[Notification], None]


class WeatherDashboardService:
    """
    Service that drives the dashboard from a weather provider.

    Holds the selected location and the latest snapshot. Each load fires the
    current-conditions and forecast requests together; UV and air quality go
    out alongside and resolve to None on failure instead of failing the load.
    Loads are stamped with an increasing token so a slow, superseded load never
    overwrites the result of a newer one. Completed loads are reported to
    telemetry in the background; call flush_telemetry before the loop closes.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        notifier: Optional[Notifier] = None,
        telemetry: Optional[RemoteSearchLog] = None,
        include_air_quality: bool = True,
    ):
        """
        Initialize dashboard service.

        Args:
            provider: Weather provider to fetch through
            notifier: Receives user-visible notifications (defaults to logging them)
            telemetry: Optional remote log of completed fetches
            include_air_quality: Also request air quality alongside UV
        """
        self.provider = provider
        self.notifier = notifier or self._log_notification
        self.telemetry = telemetry
        self.include_air_quality = include_air_quality

        self.location: Optional[SelectedLocation] = None
        self.snapshot: Optional[DashboardSnapshot] = None
        self._latest_token = 0
        self._telemetry_tasks: Set[asyncio.Task] = set()

    @staticmethod
    def _log_notification(notification: Notification) -> None:
        level = logging.ERROR if notification.variant == "destructive" else logging.INFO
        logging.log(level, "%s: %s", notification.title, notification.description)

    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        self.notifier(Notification(title=title, description=description, variant=variant))

    async def _optional(self, fetch, label: str):
        try:
            return await fetch
        except ProviderError as e:
            logging.warning(f"{label} unavailable, continuing without it: {e}")
            return None

    async def _none(self):
        return None

    async def select_location(self, location: SelectedLocation) -> Optional[DashboardSnapshot]:
        """Make location current and load weather for it."""
        logging.info("Location selected: %s (%s, %s)", location.name, location.lat, location.lon)
        self.location = location
        return await self.load()

    async def select_candidate(self, candidate: LocationCandidate) -> Optional[DashboardSnapshot]:
        return await self.select_location(
            SelectedLocation(
                lat=candidate.coordinates.latitude,
                lon=candidate.coordinates.longitude,
                name=candidate.label,
            )
        )

    async def load(self) -> Optional[DashboardSnapshot]:
        """
        Fetch weather for the selected location.

        Returns:
            The new snapshot, or None when there is no location, the load
            failed (a notification was sent), or a newer load superseded it.
        """
        location = self.location
        if location is None:
            logging.debug("No location selected, nothing to load")
            return None

        self._latest_token += 1
        token = self._latest_token
        lat, lon = location.lat, location.lon
        logging.info(f"Load {token}: fetching weather for {location.name}")

        air_quality_fetch = (
            self._optional(self.provider.get_air_quality(lat, lon), "Air quality")
            if self.include_air_quality
            else self._none()
        )
        results = await asyncio.gather(
            self.provider.get_current_conditions(lat, lon),
            self.provider.get_forecast(lat, lon),
            self._optional(self.provider.get_uv_index(lat, lon), "UV index"),
            air_quality_fetch,
            return_exceptions=True,
        )
        current, forecast, uv, air_quality = results

        if token != self._latest_token:
            logging.info(f"Load {token} superseded by load {self._latest_token}, discarding result")
            return None

        for outcome in (current, forecast):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, ProviderError):
                    raise outcome
                logging.error(f"Load {token} failed: {outcome}")
                self._notify(
                    "Error Loading Weather",
                    "Failed to load weather data. Please check your API key and try again.",
                    variant="destructive",
                )
                return None

        snapshot = DashboardSnapshot(
            location=location,
            current=current,
            forecast=forecast,
            uv=uv,
            air_quality=air_quality,
            days=group_forecast_by_day(forecast.points),
            request_token=token,
        )
        self.snapshot = snapshot
        self._notify("Weather Updated", f"Weather data loaded for {location.name}")
        self._schedule_record(location, current)
        return snapshot

    async def refresh(self) -> Optional[DashboardSnapshot]:
        return await self.load()

    def _schedule_record(self, location: SelectedLocation, current: CurrentConditions) -> None:
        if self.telemetry is None:
            return
        task = asyncio.create_task(self._record(location, current))
        self._telemetry_tasks.add(task)
        task.add_done_callback(self._telemetry_tasks.discard)

    async def _record(self, location: SelectedLocation, current: CurrentConditions) -> None:
        try:
            await asyncio.to_thread(self.telemetry.record, location.name, current)
        except Exception as exc:
            logging.warning("Telemetry failed: %s", exc)

    async def flush_telemetry(self) -> None:
        """Wait for telemetry posts still in flight, e.g. before the event loop closes."""
        if self._telemetry_tasks:
            await asyncio.gather(*self._telemetry_tasks)

    async def search(self, query: str) -> List[LocationCandidate]:
        """Search places by name; blank queries and failures yield an empty list."""
        if not query.strip():
            return []
        try:
            return await self.provider.search_locations(query.strip())
        except ProviderError as e:
            logging.error(f"Location search failed: {e}")
            self._notify(
                "Search Error",
                "Failed to search for locations. Please try again.",
                variant="destructive",
            )
            return []

    async def use_current_location(self, geolocator: GeolocatorBase) -> Optional[DashboardSnapshot]:
        """Select the device's position, named by reverse geocoding."""
        try:
            coordinates = await geolocator.locate()
        except LocationUnavailableError as e:
            logging.error(f"Could not get current location: {e}")
            self._notify(
                "Location Error",
                "Failed to get your current location. Please enable location services.",
                variant="destructive",
            )
            return None

        return await self.select_coordinates(coordinates.latitude, coordinates.longitude)

    async def select_coordinates(self, lat: float, lon: float) -> Optional[DashboardSnapshot]:
        """
        Select raw coordinates, named by reverse geocoding.

        Falls back to "lat, lon" to two decimals when no place is found there.
        """
        try:
            matches = await self.provider.reverse_geocode(lat, lon)
        except ProviderError as e:
            logging.warning(f"Reverse geocoding failed, using coordinates as name: {e}")
            matches = []

        name = matches[0].label if matches else f"{lat:.2f}, {lon:.2f}"
        return await self.select_location(SelectedLocation(lat=lat, lon=lon, name=name))

    def clear(self) -> None:
        """Forget the selected location and loaded data."""
        self.location = None
        self.snapshot = None
