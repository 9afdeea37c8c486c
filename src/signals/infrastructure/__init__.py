"""
Infrastructure module initialization.
"""
from .persistence import JsonFileIntersectionStore, SqlIntersectionStore, InMemoryIntersectionStore
from .broadcast.phase_broadcaster import PhaseBroadcaster
from .geolocation import ReverseGeocoder, ReportedPositionProvider, LocationResolver

__all__ = [
    "JsonFileIntersectionStore",
    "SqlIntersectionStore",
    "InMemoryIntersectionStore",
    "PhaseBroadcaster",
    "ReverseGeocoder",
    "ReportedPositionProvider",
    "LocationResolver"
]
