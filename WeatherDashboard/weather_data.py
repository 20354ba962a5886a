"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Tuple


@dataclass(frozen=True)
class Coordinates:
    """A point on the globe in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class LocationCandidate:
    """A named place returned by direct or reverse geocoding."""
    name: str
    country: str  # ISO 3166 country code, e.g. "GB"
    coordinates: Coordinates
    state: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name}, {self.country}"


@dataclass(frozen=True)
class Wind:
    speed: float  # m/s
    direction: float  # meteorological degrees
    gust: Optional[float] = None


@dataclass(frozen=True)
class Condition:
    category: str  # e.g., "Clouds", "Rain", "Clear"
    description: str  # e.g., "broken clouds", "light rain"
    icon: str  # provider icon code, e.g. "04d"


@dataclass(frozen=True)
class CurrentConditions:
    """Domain model for current weather, independent of any specific API."""
    location_name: str
    country: str
    coordinates: Coordinates
    temperature: float
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: float
    pressure: float  # hPa
    visibility: int  # meters
    wind: Wind
    condition: Condition
    sunrise: int  # UNIX timestamp (UTC)
    sunset: int  # UNIX timestamp (UTC)
    timezone_offset: int  # Offset from UTC in seconds
    timestamp: int = 0  # observation time, UNIX timestamp (UTC)

    def is_stale(self, max_age_seconds: int = 900) -> bool:
        """Check if this observation is older than max_age_seconds."""
        current_time = int(datetime.now(timezone.utc).timestamp())
        age = current_time - self.timestamp
        return age > max_age_seconds


@dataclass(frozen=True)
class ForecastPoint:
    """One three-hour forecast sample."""
    timestamp: int
    temperature: float
    feels_like: float
    humidity: float
    pop: float  # probability of precipitation, 0..1
    wind: Wind
    condition: Condition
    pressure: Optional[float] = None
    rain_3h: float = 0.0  # mm over the 3h window
    snow_3h: float = 0.0


@dataclass(frozen=True)
class ForecastSeries:
    """Chronologically ordered forecast points for a single city."""
    points: Tuple[ForecastPoint, ...]
    city_name: str = ""
    country: str = ""
    coordinates: Optional[Coordinates] = None
    timezone_offset: int = 0

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)


@dataclass(frozen=True)
class UVReading:
    coordinates: Coordinates
    value: float

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"UV index cannot be negative: {self.value}")


@dataclass(frozen=True)
class AirQualityReading:
    coordinates: Coordinates
    index: int  # 1 (Good) .. 5 (Very Poor)


@dataclass(frozen=True)
class DailyForecast:
    """Aggregate of the forecast points falling on one calendar day."""
    day: date
    points: Tuple[ForecastPoint, ...] = ()
    temp_min: float = 0.0
    temp_max: float = 0.0
    avg_pop: float = 0.0
    condition: Optional[Condition] = None
