# sensors_api.py - client for the weather/sensor API
import logging
import urllib.error
import urllib.parse
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict

import http_client

LOG = logging.getLogger(__name__)

SENSOR_TEMPERATURE = "temperature"
SENSOR_ABSOLUTE_PRESSURE = "absolutepressure"
SENSOR_SEA_LEVEL_PRESSURE = "seaLevelPressure"


class SensorApiError(Exception):
    pass


class MalformedReadingError(ValueError):
    pass


def parse_timestamp(value) -> datetime:
    """ISO-8601 string or epoch milliseconds -> aware datetime."""
    if isinstance(value, bool):
        raise MalformedReadingError("Invalid timestamp: %r" % value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError as e:
            raise MalformedReadingError("Invalid timestamp: %r" % value) from e
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts
    raise MalformedReadingError("Invalid timestamp: %r" % (value,))


def _number(value):
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Reading:
    name: str
    timestamp: datetime
    sensors: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data) -> "Reading":
        if isinstance(data, list):
            if not data:
                raise MalformedReadingError("Empty reading list")
            data = data[0]
        if not isinstance(data, dict):
            raise MalformedReadingError("Reading is not an object: %r" % (data,))
        if "timestamp" not in data:
            raise MalformedReadingError("Reading has no timestamp")

        # First numeric entry per type wins; other entries are ignored.
        sensors = {}
        for sensor in data.get("sensors") or []:
            if not isinstance(sensor, dict) or sensor.get("type") in sensors:
                continue
            value = _number(sensor.get("value"))
            if sensor.get("type") is not None and value is not None:
                sensors[sensor["type"]] = value

        return cls(
            name=str(data.get("name") or data.get("id") or ""),
            timestamp=parse_timestamp(data["timestamp"]),
            sensors=sensors,
        )

    def value(self, sensor_type: str) -> float:
        try:
            return self.sensors[sensor_type]
        except KeyError:
            raise MalformedReadingError("%s has no %s reading" % (self.name, sensor_type)) from None


class SensorClient:
    def __init__(self, base_url: str, timeout: float = 10, http=http_client.request):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http

    def get_device_current(self, device_id: str) -> Reading:
        return Reading.from_json(self._get("/data/%s/current" % urllib.parse.quote(device_id, safe="")))

    def get_location_latest(self, location: str) -> Reading:
        return Reading.from_json(self._get("/locations/%s/latest" % urllib.parse.quote(location, safe="")))

    def _get(self, path: str):
        if not self.base_url:
            raise SensorApiError("SENSORS_API is not configured")
        url = self.base_url + path
        LOG.info("Fetching sensor data %s", url)
        try:
            resp = self.http(url, method="GET", headers={"Accept": "application/json"},
                             timeout=self.timeout)
        except (urllib.error.URLError, OSError) as e:
            raise SensorApiError("Sensor API unreachable: %s" % e) from e
        if not 200 <= resp.status < 300:
            raise SensorApiError("Sensor API returned HTTP %s for %s" % (resp.status, path))
        try:
            return resp.json()
        except ValueError as e:
            raise SensorApiError("Sensor API returned invalid JSON for %s" % path) from e
