"""OpenWeather API provider implementation."""
import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

import requests

from weather_data import (
    AirQualityReading,
    Condition,
    Coordinates,
    CurrentConditions,
    ForecastPoint,
    ForecastSeries,
    LocationCandidate,
    UVReading,
    Wind,
)
from weather_provider import (
    AuthError,
    MalformedResponseError,
    NetworkError,
    NotFoundError,
    ProviderError,
    WeatherProviderBase,
)


def format_param(value: Any) -> str:
    """Serialize a query parameter, writing floats in positional decimal (never 1e-05)."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        return format(Decimal(repr(value)), "f")
    return str(value)


def _number(data: Mapping[str, Any], key: str, context: str, default: Optional[float] = None) -> float:
    value = data.get(key, default)
    if value is None:
        raise MalformedResponseError(f"Response missing '{key}' in {context}")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponseError(f"Field '{key}' in {context} is not numeric: {value!r}")
    return float(value)


def _string(data: Mapping[str, Any], key: str, context: str, default: Optional[str] = None) -> str:
    value = data.get(key, default)
    if value is None:
        raise MalformedResponseError(f"Response missing '{key}' in {context}")
    if not isinstance(value, str):
        raise MalformedResponseError(f"Field '{key}' in {context} is not a string: {value!r}")
    return value


def _block(data: Mapping[str, Any], key: str, context: str) -> Mapping[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict) or not value:
        raise MalformedResponseError(f"Response missing '{key}' block in {context}")
    return value


def _coordinates(data: Mapping[str, Any], context: str) -> Coordinates:
    return Coordinates(
        latitude=_number(data, "lat", context),
        longitude=_number(data, "lon", context),
    )


def _condition(data: Mapping[str, Any], context: str) -> Condition:
    weather_array = data.get("weather")
    if not isinstance(weather_array, list) or not weather_array:
        raise MalformedResponseError(f"Response missing 'weather' array in {context}")
    weather = weather_array[0]
    if not isinstance(weather, dict):
        raise MalformedResponseError(f"Malformed 'weather' entry in {context}")
    return Condition(
        category=_string(weather, "main", context, default="Unknown"),
        description=_string(weather, "description", context, default=""),
        icon=_string(weather, "icon", context, default=""),
    )


def _wind(data: Mapping[str, Any], context: str) -> Wind:
    wind_data = _block(data, "wind", context)
    gust = wind_data.get("gust")
    return Wind(
        speed=_number(wind_data, "speed", context),
        direction=_number(wind_data, "deg", context, default=0.0),
        gust=float(gust) if gust is not None else None,
    )


def _volume(data: Mapping[str, Any], key: str) -> float:
    precip = data.get(key) or {}
    return float(precip.get("3h", 0.0))


def parse_current_conditions(data: Mapping[str, Any]) -> CurrentConditions:
    """Map a /data/2.5/weather payload to CurrentConditions."""
    context = "current weather"
    main_data = _block(data, "main", context)
    sys_data = _block(data, "sys", context)
    temperature = _number(main_data, "temp", context)

    return CurrentConditions(
        location_name=_string(data, "name", context, default=""),
        country=_string(sys_data, "country", context, default=""),
        coordinates=_coordinates(_block(data, "coord", context), context),
        temperature=temperature,
        feels_like=_number(main_data, "feels_like", context),
        temp_min=_number(main_data, "temp_min", context, default=temperature),
        temp_max=_number(main_data, "temp_max", context, default=temperature),
        humidity=_number(main_data, "humidity", context),
        pressure=_number(main_data, "pressure", context),
        # OpenWeather omits visibility above its 10 km cap
        visibility=int(data.get("visibility", 10000)),
        wind=_wind(data, context),
        condition=_condition(data, context),
        sunrise=int(_number(sys_data, "sunrise", context)),
        sunset=int(_number(sys_data, "sunset", context)),
        timezone_offset=int(data.get("timezone", 0)),
        timestamp=int(data.get("dt", 0)),
    )


def parse_forecast_point(item: Mapping[str, Any]) -> ForecastPoint:
    context = "forecast entry"
    main_data = _block(item, "main", context)
    return ForecastPoint(
        timestamp=int(_number(item, "dt", context)),
        temperature=_number(main_data, "temp", context),
        feels_like=_number(main_data, "feels_like", context),
        humidity=_number(main_data, "humidity", context),
        pop=_number(item, "pop", context, default=0.0),
        wind=_wind(item, context),
        condition=_condition(item, context),
        pressure=main_data.get("pressure"),
        rain_3h=_volume(item, "rain"),
        snow_3h=_volume(item, "snow"),
    )


def parse_forecast(data: Mapping[str, Any], max_points: int = 40) -> ForecastSeries:
    """Map a /data/2.5/forecast payload to a chronologically ordered ForecastSeries."""
    entries = data.get("list")
    if not isinstance(entries, list):
        raise MalformedResponseError("Response missing 'list' array in forecast")

    points = sorted((parse_forecast_point(item) for item in entries), key=lambda p: p.timestamp)
    city = data.get("city") or {}
    coord = city.get("coord")

    return ForecastSeries(
        points=tuple(points[:max_points]),
        city_name=_string(city, "name", "forecast city", default=""),
        country=_string(city, "country", "forecast city", default=""),
        coordinates=_coordinates(coord, "forecast city") if coord else None,
        timezone_offset=int(city.get("timezone", 0)),
    )


def parse_locations(data: Any, limit: int) -> List[LocationCandidate]:
    """Map a geocoding payload (a JSON array) to location candidates."""
    if not isinstance(data, list):
        raise MalformedResponseError("Geocoding response is not a list")

    candidates = []
    for item in data[:limit]:
        candidates.append(
            LocationCandidate(
                name=_string(item, "name", "geocoding entry"),
                country=_string(item, "country", "geocoding entry", default=""),
                state=item.get("state"),
                coordinates=_coordinates(item, "geocoding entry"),
            )
        )
    return candidates


def parse_uv_index(data: Mapping[str, Any]) -> UVReading:
    context = "uv index"
    return UVReading(coordinates=_coordinates(data, context), value=_number(data, "value", context))


def parse_air_quality(data: Mapping[str, Any]) -> AirQualityReading:
    context = "air pollution"
    entries = data.get("list")
    if not isinstance(entries, list):
        raise MalformedResponseError("Response missing 'list' array in air pollution")
    if not entries:
        raise NotFoundError("No air quality data for these coordinates")

    main_data = _block(entries[0], "main", context)
    return AirQualityReading(
        coordinates=_coordinates(_block(data, "coord", context), context),
        index=int(_number(main_data, "aqi", context)),
    )


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using the free OpenWeather endpoints.

    Current Weather and 5 day / 3 hour Forecast: https://openweathermap.org/api
    Geocoding: https://openweathermap.org/api/geocoding-api

    The provider keeps no state between calls beyond its settings, so one
    instance can serve overlapping requests. Each request is a single blocking
    HTTP round trip run in a worker thread.
    """

    BASE_URL = "https://api.openweathermap.org"
    CURRENT_PATH = "/data/2.5/weather"
    FORECAST_PATH = "/data/2.5/forecast"
    DIRECT_GEOCODING_PATH = "/geo/1.0/direct"
    REVERSE_GEOCODING_PATH = "/geo/1.0/reverse"
    UV_PATH = "/data/2.5/uvi"
    AIR_POLLUTION_PATH = "/data/2.5/air_pollution"

    SEARCH_LIMIT = 5
    REVERSE_LIMIT = 1

    def __init__(self, api_key: str, lang: str = "en", timeout: int = 10):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            lang: Language code for condition descriptions (e.g., "en", "de")
            timeout: HTTP request timeout in seconds
        """
        if not api_key:
            raise ValueError("An OpenWeather API key is required")
        self.api_key = api_key
        self.lang = lang
        self.timeout = timeout

    def build_params(self, params: Mapping[str, Any]) -> Dict[str, str]:
        """Return the serialized query string parameters, credential first."""
        query = {"appid": self.api_key}
        query.update({key: format_param(value) for key, value in params.items()})
        return query

    def _request(self, path: str, params: Mapping[str, Any]) -> Any:
        url = f"{self.BASE_URL}{path}"
        query = self.build_params(params)

        try:
            logging.info(f"Making OpenWeather API request: {url}")
            logging.debug(f"Request parameters: {dict(query, appid='***')}")

            response = requests.get(url, params=query, timeout=self.timeout)

            logging.info(f"API response status: {response.status_code}")
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise NetworkError(f"Network error: {str(e)}")

        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            self._handle_error_response(response)

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to decode API response: {e}", exc_info=True)
            raise MalformedResponseError(f"Failed to parse response: {str(e)}")

        logging.debug(f"API response (truncated): {str(data)[:500]}...")
        return data

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        status = response.status_code
        try:
            error_data = response.json()
            logging.error(f"OpenWeather API error response: {error_data}")
            cod = error_data.get("cod", status)
            message = error_data.get("message", "Unknown error")
            error_msg = f"OpenWeather API error {cod}: {message}"
        except (ValueError, AttributeError):
            logging.error(f"Non-JSON error response: HTTP {status}, body: {response.text[:500]}")
            error_msg = f"HTTP {status}: {response.text[:200]}"

        if status in (401, 403):
            raise AuthError(error_msg, status_code=status)
        if status == 404:
            raise NotFoundError(error_msg, status_code=status)
        raise ProviderError(error_msg, status_code=status)

    async def _fetch(self, path: str, parser, **params):
        data = await asyncio.to_thread(self._request, path, params)
        try:
            return parser(data)
        except ProviderError:
            raise
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logging.error(f"Failed to parse API response from {path}: {e}", exc_info=True)
            raise MalformedResponseError(f"Failed to parse response: {str(e)}")

    async def get_current_conditions(self, lat: float, lon: float) -> CurrentConditions:
        weather = await self._fetch(
            self.CURRENT_PATH, parse_current_conditions,
            lat=lat, lon=lon, units="metric", lang=self.lang,
        )
        logging.info(
            f"Successfully parsed current weather: {weather.temperature}°C, {weather.condition.category}"
        )
        return weather

    async def get_forecast(self, lat: float, lon: float) -> ForecastSeries:
        forecast = await self._fetch(
            self.FORECAST_PATH, parse_forecast,
            lat=lat, lon=lon, units="metric", lang=self.lang,
        )
        logging.info(f"Successfully parsed forecast: {len(forecast)} points")
        return forecast

    async def search_locations(self, query: str) -> List[LocationCandidate]:
        return await self._fetch(
            self.DIRECT_GEOCODING_PATH,
            lambda data: parse_locations(data, self.SEARCH_LIMIT),
            q=query, limit=self.SEARCH_LIMIT,
        )

    async def reverse_geocode(self, lat: float, lon: float) -> List[LocationCandidate]:
        return await self._fetch(
            self.REVERSE_GEOCODING_PATH,
            lambda data: parse_locations(data, self.REVERSE_LIMIT),
            lat=lat, lon=lon, limit=self.REVERSE_LIMIT,
        )

    async def get_uv_index(self, lat: float, lon: float) -> UVReading:
        return await self._fetch(self.UV_PATH, parse_uv_index, lat=lat, lon=lon)

    async def get_air_quality(self, lat: float, lon: float) -> AirQualityReading:
        return await self._fetch(self.AIR_POLLUTION_PATH, parse_air_quality, lat=lat, lon=lon)
