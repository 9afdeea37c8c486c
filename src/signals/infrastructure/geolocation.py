"""
Turns the device position into a human readable intersection name.

The outcome is delivered as a stream of tagged results: zero or more
Pending status messages followed by exactly one Success or Failure.
A failed street lookup still succeeds with a coordinate-only label.
"""
import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union

import httpx

from ..domain import Coordinates, PositionOptions, PositionProvider, ReverseLookup
from ...common.exceptions import GeocodingError, PositionError
from ...common.logging import setup_logger

logger = setup_logger(__name__)

NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"

CITY_KEYS = ("city", "county", "town", "district", "village")
ROAD_KEYS = ("road", "street", "pedestrian", "highway", "path", "suburb", "neighbourhood")
LANDMARK_KEYS = ("amenity", "building", "shop")

POSITION_ERROR_MESSAGES = {
    PositionError.PERMISSION_DENIED: "Permission denied: allow this device to share its location",
    PositionError.POSITION_UNAVAILABLE: "Poor signal: unable to detect the current position",
    PositionError.TIMEOUT: "Timed out: check the network or move outdoors",
}

@dataclass(frozen=True)
class Pending:
    message: str
    kind: str = "pending"

@dataclass(frozen=True)
class Success:
    label: str
    kind: str = "success"

@dataclass(frozen=True)
class Failure:
    reason: str
    kind: str = "failure"

LocationOutcome = Union[Pending, Success, Failure]

def outcome_to_dict(outcome: LocationOutcome) -> dict:
    if isinstance(outcome, Pending):
        return {"kind": outcome.kind, "message": outcome.message}
    if isinstance(outcome, Success):
        return {"kind": outcome.kind, "label": outcome.label}
    return {"kind": outcome.kind, "reason": outcome.reason}

def coordinate_label(coordinates: Coordinates) -> str:
    return f"GPS coordinates ({coordinates.latitude:.4f}, {coordinates.longitude:.4f})"

def _first(address: dict, keys: tuple) -> str:
    for key in keys:
        value = address.get(key)
        if value and isinstance(value, str):
            return value
    return ""

def derive_label(payload: Optional[dict], fallback: str) -> str:
    """
    Picks a name from a Nominatim reverse payload:
    "city road", else "city landmark附近", else the first segment of
    display_name, else the fallback.
    """
    address = payload.get("address") if isinstance(payload, dict) else None
    if not address or not isinstance(address, dict):
        return fallback

    city = _first(address, CITY_KEYS)
    road = _first(address, ROAD_KEYS)
    landmark = _first(address, LANDMARK_KEYS)

    if road:
        return f"{city} {road}"
    if landmark:
        return f"{city} {landmark}附近"
    display_name = payload.get("display_name")
    if display_name and isinstance(display_name, str):
        return display_name.split(",")[0]
    return fallback

def position_error_message(error: PositionError) -> str:
    return POSITION_ERROR_MESSAGES.get(error.code, f"Location error: {error.message}")

class ReverseGeocoder(ReverseLookup):
    """
    Nominatim reverse lookup over httpx with its own timeout.
    """
    def __init__(
        self,
        url: str = NOMINATIM_REVERSE_URL,
        zoom: int = 18,
        language: str = "zh-TW",
        timeout_seconds: float = 5.0,
        user_agent: str = "traffic-light-scheduler",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.zoom = zoom
        self.language = language
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.transport = transport

    def build_params(self, coordinates: Coordinates) -> dict:
        return {
            "format": "json",
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
            "zoom": self.zoom,
            "addressdetails": 1,
            "accept-language": self.language,
        }

    async def reverse(self, coordinates: Coordinates) -> dict:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self.transport,
                headers={"User-Agent": self.user_agent},
            ) as client:
                response = await client.get(self.url, params=self.build_params(coordinates))
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            raise GeocodingError(f"Reverse lookup timed out after {self.timeout_seconds}s") from e
        except httpx.HTTPStatusError as e:
            raise GeocodingError(f"API error: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise GeocodingError(f"Reverse lookup failed: {e}") from e

        if not isinstance(payload, dict):
            raise GeocodingError(f"Unexpected reverse lookup body: {type(payload).__name__}")
        return payload

class ReportedPositionProvider(PositionProvider):
    """
    Position reported by the client device: either coordinates or the
    error code it got from its own geolocation API.
    """
    def __init__(
        self,
        coordinates: Optional[Coordinates] = None,
        error_code: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.coordinates = coordinates
        self.error_code = error_code
        self.message = message

    async def current_position(self, options: PositionOptions) -> Coordinates:
        if self.error_code is not None:
            raise PositionError(self.error_code, self.message)
        if self.coordinates is None:
            raise PositionError(PositionError.POSITION_UNAVAILABLE, "No coordinates reported")
        return self.coordinates

class LocationResolver:
    """
    Single attempt, no retries: the caller re-invokes locate() to try again.
    """
    def __init__(self, geocoder: ReverseLookup, options: Optional[PositionOptions] = None):
        self.geocoder = geocoder
        self.options = options or PositionOptions()

    async def locate(self, provider: Optional[PositionProvider]) -> AsyncIterator[LocationOutcome]:
        if provider is None:
            yield Failure("Geolocation is not supported on this device")
            return

        yield Pending("Acquiring GPS coordinates...")
        try:
            coordinates = await asyncio.wait_for(
                provider.current_position(self.options),
                timeout=self.options.timeout_seconds,
            )
        except asyncio.TimeoutError:
            error = PositionError(PositionError.TIMEOUT, "Position request timed out")
            logger.warning(f"Geolocation error: {error.message}")
            yield Failure(position_error_message(error))
            return
        except PositionError as e:
            logger.warning(f"Geolocation error: {e.message}")
            yield Failure(position_error_message(e))
            return

        yield Pending("Coordinates acquired, looking up street name...")

        label = coordinate_label(coordinates)
        try:
            payload = await self.geocoder.reverse(coordinates)
            label = derive_label(payload, fallback=label)
        except GeocodingError as e:
            # Coordinates alone are still a usable name
            logger.error(f"Geocoding failed: {e}")
        yield Success(label)

    async def resolve(self, provider: Optional[PositionProvider]) -> dict:
        """Drains locate() and returns every status plus the final outcome."""
        statuses = []
        outcome = None
        async for item in self.locate(provider):
            if isinstance(item, Pending):
                statuses.append(item.message)
            else:
                outcome = item
        return {"statuses": statuses, "outcome": outcome_to_dict(outcome)}
