"""Device location sources."""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from weather_data import Coordinates

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAXIMUM_AGE_SECONDS = 300.0


class LocationUnavailableError(Exception):
    """Raised when the device denies, lacks, or cannot resolve its location."""


class GeolocatorBase(ABC):
    """Single-shot source of the device's current coordinates."""

    @abstractmethod
    async def locate(
        self,
        high_accuracy: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        maximum_age: float = DEFAULT_MAXIMUM_AGE_SECONDS,
    ) -> Coordinates:
        """
        Resolve the current position.

        Args:
            high_accuracy: Prefer a precise fix over a fast one
            timeout: Seconds to wait for a fix
            maximum_age: Accept a cached fix up to this many seconds old

        Raises:
            LocationUnavailableError: If no position can be determined
        """


class StaticGeolocator(GeolocatorBase):
    """Reports fixed coordinates, e.g. WEATHER_LAT/WEATHER_LON from the environment."""

    def __init__(self, coordinates: Optional[Coordinates]):
        self.coordinates = coordinates

    async def locate(
        self,
        high_accuracy: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        maximum_age: float = DEFAULT_MAXIMUM_AGE_SECONDS,
    ) -> Coordinates:
        if self.coordinates is None:
            raise LocationUnavailableError("No device location configured (set WEATHER_LAT/WEATHER_LON)")
        logging.debug(
            "Using configured location lat=%s lon=%s",
            self.coordinates.latitude,
            self.coordinates.longitude,
        )
        return self.coordinates


class UnavailableGeolocator(GeolocatorBase):
    """Geolocator for environments without location support."""

    def __init__(self, reason: str = "Geolocation is not supported"):
        self.reason = reason

    async def locate(
        self,
        high_accuracy: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        maximum_age: float = DEFAULT_MAXIMUM_AGE_SECONDS,
    ) -> Coordinates:
        raise LocationUnavailableError(self.reason)
