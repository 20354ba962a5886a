"""Best-effort remote log of completed weather fetches."""
import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from weather_data import CurrentConditions


class RemoteSearchLog:
    """
    Appends each completed fetch to a remote endpoint.

    Recording only happens for an authenticated user (a token is configured).
    Failures are logged and never raised to the caller.
    """

    def __init__(self, url: Optional[str], token: Optional[str] = None, timeout: int = 5):
        self.url = url
        self.token = token
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.token)

    def build_payload(self, location_name: str, weather: CurrentConditions) -> dict:
        return {
            "location": location_name,
            "lat": weather.coordinates.latitude,
            "lon": weather.coordinates.longitude,
            "temperature": weather.temperature,
            "condition": weather.condition.category,
            "fetched_at": datetime.now(timezone.utc).isoformat(),
        }

    def record(self, location_name: str, weather: CurrentConditions) -> bool:
        """Send one entry; returns True when the endpoint accepted it."""
        if not self.enabled:
            logging.debug("Telemetry disabled, skipping search log")
            return False

        payload = self.build_payload(location_name, weather)
        try:
            response = requests.post(
                self.url,
                json=payload,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logging.warning(f"Failed to record weather search: {e}")
            return False

        if not response.ok:
            logging.warning(f"Search log rejected with status {response.status_code}")
            return False
        logging.debug(f"Recorded weather search for {location_name}")
        return True
