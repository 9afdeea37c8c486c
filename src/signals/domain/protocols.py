"""
Domain protocols for the traffic signal module.
"""
from dataclasses import dataclass
from typing import Protocol

@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

@dataclass(frozen=True)
class PositionOptions:
    """
    Position request preferences. maximum_age=0 means a cached fix is never reused.
    """
    high_accuracy: bool = True
    timeout_seconds: float = 10.0
    maximum_age: float = 0.0

class PositionProvider(Protocol):
    """
    Protocol for acquiring the device position.
    Raises PositionError on failure.
    """
    async def current_position(self, options: PositionOptions) -> Coordinates:
        ...

class ReverseLookup(Protocol):
    """
    Protocol for turning coordinates into an address payload.
    Raises GeocodingError on failure.
    """
    async def reverse(self, coordinates: Coordinates) -> dict:
        ...
