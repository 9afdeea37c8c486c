from typing import List, Optional

from pydantic import ValidationError

from ...domain import IntersectionStore, IntersectionRecord
from ....common.exceptions import PersistenceError
from ....common.schemas import dump_records, load_records

class InMemoryIntersectionStore(IntersectionStore):
    """
    Process-local slot. Keeps the serialized payload so loads go through
    the same validation as the file and database stores.
    """
    def __init__(self, payload: Optional[object] = None):
        self.payload = payload
        self.saves = 0

    def load(self) -> List[IntersectionRecord]:
        if self.payload is None:
            return []
        try:
            return load_records(self.payload)
        except ValidationError as e:
            raise PersistenceError(f"Stored payload is malformed: {e}") from e

    def save(self, records: List[IntersectionRecord]) -> bool:
        self.payload = dump_records(records)
        self.saves += 1
        return True
