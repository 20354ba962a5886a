"""Weather provider abstraction - the contract the dashboard fetches through."""
from abc import ABC, abstractmethod
from typing import List, Optional

from weather_data import (
    AirQualityReading,
    CurrentConditions,
    ForecastSeries,
    LocationCandidate,
    UVReading,
)


class ProviderError(Exception):
    """Exception raised when a weather provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(ProviderError):
    """Connection failure or timeout before a response arrived."""


class AuthError(ProviderError):
    """The provider rejected the API key (HTTP 401/403)."""


class NotFoundError(ProviderError):
    """The provider has no data for the requested coordinates."""


class MalformedResponseError(ProviderError):
    """The response body could not be parsed into the expected shape."""


class WeatherProviderBase(ABC):
    """
    Abstract base class for weather data providers.

    Every operation is a coroutine performing a single round trip. Implementations
    raise a ProviderError subclass on any failure and never retry.
    """

    @abstractmethod
    async def get_current_conditions(self, lat: float, lon: float) -> CurrentConditions:
        """
        Fetch current weather for a location.

        Raises:
            ProviderError: If the provider fails to fetch or parse data
        """

    @abstractmethod
    async def get_forecast(self, lat: float, lon: float) -> ForecastSeries:
        """Fetch the 5 day / 3 hour forecast for a location."""

    @abstractmethod
    async def search_locations(self, query: str) -> List[LocationCandidate]:
        """Return up to five places matching a free-text query."""

    @abstractmethod
    async def reverse_geocode(self, lat: float, lon: float) -> List[LocationCandidate]:
        """Return at most one place at the coordinates; an empty list is not an error."""

    @abstractmethod
    async def get_uv_index(self, lat: float, lon: float) -> UVReading:
        pass

    @abstractmethod
    async def get_air_quality(self, lat: float, lon: float) -> AirQualityReading:
        pass
