"""
Domain repositories for the traffic signal module.
"""
from typing import List, Protocol
from .entities import IntersectionRecord

class IntersectionStore(Protocol):
    """
    Single key-value slot holding the whole ordered collection of intersections.
    """
    def load(self) -> List[IntersectionRecord]:
        """Returns the stored collection. Raises PersistenceError if it is unreadable."""
        ...

    def save(self, records: List[IntersectionRecord]) -> bool:
        """Overwrites the stored collection. Returns False if the write failed."""
        ...
