"""
location.py — Resolves the best available reference point for a session.

Precedence: device fix > profile city centroid > default centroid.

The city-based query is available the instant a session opens; the device
fix only improves it later. Sensor failures (permission denied, position
unavailable, timeout) are soft: they are logged and recorded, and the
last known query stays in place.

The sensor itself lives on the phone. ReportedPositionSensor is the
server-side end of it: the client posts its fix (or its error code) and
the pending read() resolves.

USAGE
─────
    resolver = LocationResolver(city="Mumbai", sensor=sensor)
    async for query in resolver.resolve(sensor_timeout_ms=5000):
        ...   # Named("Mumbai") immediately, then Precise(...) if a fix arrives
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Optional, Protocol, Union

from gigmate.core.result import ErrorKind
from gigmate.models.hotspot import Coordinates
from gigmate.models.location import DefaultLocation, LocationQuery, Named, Precise

logger = logging.getLogger(__name__)

# Chandigarh. Used when the profile has no city or an unknown one.
DEFAULT_CENTER = Coordinates(lat=30.7333, lng=76.7794)

# Exact, case-sensitive match on the profile's city string.
CITY_CENTROIDS: dict[str, Coordinates] = {
    "Bangalore":  Coordinates(lat=12.9716, lng=77.5946),
    "Chandigarh": Coordinates(lat=30.7333, lng=76.7794),
    "Bengaluru":  Coordinates(lat=12.9716, lng=77.5946),
    "Hyderabad":  Coordinates(lat=17.3850, lng=78.4867),
    "Mumbai":     Coordinates(lat=19.0760, lng=72.8777),
    "Delhi":      Coordinates(lat=28.7041, lng=77.1025),
    "Chennai":    Coordinates(lat=13.0827, lng=80.2707),
    "Pune":       Coordinates(lat=18.5204, lng=73.8567),
    "Kolkata":    Coordinates(lat=22.5726, lng=88.3639),
}

# Browser Geolocation API codes and their string names.
_SENSOR_ERROR_CODES: dict[Union[str, int], ErrorKind] = {
    1: ErrorKind.SENSOR_DENIED,
    2: ErrorKind.SENSOR_UNAVAILABLE,
    3: ErrorKind.SENSOR_TIMEOUT,
    "permission-denied": ErrorKind.SENSOR_DENIED,
    "position-unavailable": ErrorKind.SENSOR_UNAVAILABLE,
    "timeout": ErrorKind.SENSOR_TIMEOUT,
}


def centroid_for(query: LocationQuery) -> Coordinates:
    """Map a query to the coordinate the map should centre on."""
    if isinstance(query, Precise):
        return Coordinates(lat=query.lat, lng=query.lng)
    if isinstance(query, Named):
        return CITY_CENTROIDS.get(query.city_name, DEFAULT_CENTER)
    return DEFAULT_CENTER


class SensorError(Exception):
    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind

    @classmethod
    def from_code(cls, code: Union[str, int]) -> "SensorError":
        kind = _SENSOR_ERROR_CODES.get(code)
        if kind is None:
            raise ValueError(f"Unknown geolocation error code: {code!r}")
        return cls(kind, f"device reported {code}")


class PositionSensor(Protocol):
    async def read(self, timeout_ms: int, high_accuracy: bool) -> Coordinates:
        """Return a fix or raise SensorError."""
        ...


class ReportedPositionSensor:
    """
    A sensor whose readings are pushed in by the device over HTTP.

    A report that arrives before read() is held and returned straight away.
    report() returns False when nobody is waiting any more (the read timed
    out or already resolved) so the caller can apply the fix directly.
    """

    def __init__(self) -> None:
        self._future: Optional[asyncio.Future] = None

    def _current_future(self) -> asyncio.Future:
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    async def read(self, timeout_ms: int, high_accuracy: bool) -> Coordinates:
        # A timed-out read leaves a cancelled future behind; start over.
        if self._future is not None and self._future.cancelled():
            self._future = None
        future = self._current_future()
        try:
            return await asyncio.wait_for(future, timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            raise SensorError(ErrorKind.SENSOR_TIMEOUT, f"no fix within {timeout_ms} ms") from None

    def report(self, coords: Coordinates) -> bool:
        future = self._current_future()
        if future.done():
            return False
        future.set_result(coords)
        return True

    def report_error(self, error: SensorError) -> bool:
        future = self._current_future()
        if future.done():
            return False
        future.set_exception(error)
        return True


class LocationResolver:
    """Holds the session's current LocationQuery and upgrades it on a device fix."""

    def __init__(
        self,
        city: Optional[str] = None,
        sensor: Optional[PositionSensor] = None,
        default_city: Optional[str] = None,
    ) -> None:
        self._sensor = sensor
        self._default_city = default_city
        self._query: LocationQuery = self._city_query(city)
        self.last_sensor_error: Optional[ErrorKind] = None

    def _city_query(self, city: Optional[str]) -> LocationQuery:
        """Profile city, else the deployment's default city, else the default centroid."""
        city = city or self._default_city
        return Named(city) if city else DefaultLocation()

    @property
    def query(self) -> LocationQuery:
        return self._query

    @property
    def has_fix(self) -> bool:
        return isinstance(self._query, Precise)

    def center(self) -> Coordinates:
        return centroid_for(self._query)

    def label(self) -> str:
        if isinstance(self._query, Precise):
            return "Precise Location"
        if isinstance(self._query, Named):
            return f"{self._query.city_name} Central"
        return "Default Location"

    def _set_query(self, query: LocationQuery) -> bool:
        if query == self._query:
            return False
        self._query = query
        return True

    def set_city(self, city: Optional[str]) -> bool:
        """
        Change the profile city. A held device fix is kept; the city only
        takes effect if the sensor never delivers.

        Returns True when the effective query changed.
        """
        if self.has_fix:
            return False
        return self._set_query(self._city_query(city))

    def apply_fix(self, lat: float, lng: float) -> bool:
        # Validates range before it can reach the map.
        coords = Coordinates(lat=lat, lng=lng)
        return self._set_query(Precise(lat=coords.lat, lng=coords.lng))

    def record_sensor_error(self, kind: ErrorKind) -> None:
        self.last_sensor_error = kind
        logger.warning("Location check skipped (%s); keeping %s", kind.value, self.label())

    async def resolve(
        self,
        sensor_timeout_ms: int = 5000,
        high_accuracy: bool = False,
    ) -> AsyncIterator[LocationQuery]:
        """
        Yield the immediately usable query, then the device fix if one
        arrives within `sensor_timeout_ms` and changes anything.
        """
        yield self._query

        if self._sensor is None:
            self.record_sensor_error(ErrorKind.SENSOR_UNAVAILABLE)
            return

        try:
            coords = await self._sensor.read(sensor_timeout_ms, high_accuracy)
        except SensorError as exc:
            self.record_sensor_error(exc.kind)
            return

        if self.apply_fix(coords.lat, coords.lng):
            logger.info("Device fix acquired (%.4f, %.4f)", coords.lat, coords.lng)
            yield self._query
