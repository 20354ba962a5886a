"""Key-value persistence for the API key and favorite locations."""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from weather_data import Coordinates, LocationCandidate

API_KEY_KEY = "openweather_api_key"
FAVORITES_KEY = "saved_weather_locations"


class StorageError(Exception):
    """Raised when the backing store cannot be read or written."""


class KeyValueStore(ABC):
    """String-to-string store with no transactions and no expiry."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class MemoryStore(KeyValueStore):
    """In-process store, used in tests and when no storage path is configured."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Store backed by a flat JSON object on disk.

    The file is re-read on every access and rewritten through a temporary
    sibling file, so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path):
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self.path} does not hold a JSON object")
        return data

    def _save(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
                fh.write("\n")
            tmp_path.replace(self.path)
        except OSError as exc:
            raise StorageError(f"Could not write {self.path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class CredentialStore:
    """Persists the provider API key; absence means the user has not onboarded."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> Optional[str]:
        return self.store.get(API_KEY_KEY) or None

    def save(self, api_key: str) -> None:
        api_key = api_key.strip()
        if not api_key:
            raise ValueError("API key must not be blank")
        self.store.set(API_KEY_KEY, api_key)
        logging.info("API key stored")

    def remove(self) -> None:
        self.store.remove(API_KEY_KEY)
        logging.info("API key removed")


def location_to_record(location: LocationCandidate) -> Dict:
    return {
        "name": location.name,
        "country": location.country,
        "state": location.state,
        "lat": location.coordinates.latitude,
        "lon": location.coordinates.longitude,
    }


def location_from_record(record: Dict) -> LocationCandidate:
    return LocationCandidate(
        name=record["name"],
        country=record.get("country", ""),
        state=record.get("state"),
        coordinates=Coordinates(latitude=float(record["lat"]), longitude=float(record["lon"])),
    )


class FavoritesStore:
    """Ordered list of saved locations, unique by coordinates."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def list(self) -> List[LocationCandidate]:
        raw = self.store.get(FAVORITES_KEY)
        if not raw:
            return []
        try:
            return [location_from_record(record) for record in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as exc:
            raise StorageError(f"Saved locations are corrupt: {exc}") from exc

    def _write(self, locations: List[LocationCandidate]) -> None:
        self.store.set(FAVORITES_KEY, json.dumps([location_to_record(loc) for loc in locations]))

    def contains(self, coordinates: Coordinates) -> bool:
        return any(saved.coordinates == coordinates for saved in self.list())

    def add(self, location: LocationCandidate) -> bool:
        """Append a location; returns False if one with the same coordinates is already saved."""
        saved = self.list()
        if any(s.coordinates == location.coordinates for s in saved):
            logging.debug("Location %s already saved", location.label)
            return False
        saved.append(location)
        self._write(saved)
        logging.info("Saved location %s", location.label)
        return True

    def remove(self, coordinates: Coordinates) -> bool:
        saved = self.list()
        remaining = [s for s in saved if s.coordinates != coordinates]
        if len(remaining) == len(saved):
            return False
        self._write(remaining)
        return True
