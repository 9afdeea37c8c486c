import json
import os
import tempfile
from typing import List

from pydantic import ValidationError

from ...domain import IntersectionStore, IntersectionRecord
from ....common.exceptions import PersistenceError
from ....common.logging import setup_logger, log_execution_time
from ....common.schemas import dump_records, load_records

logger = setup_logger(__name__)

class JsonFileIntersectionStore(IntersectionStore):
    """
    Keeps the collection under a single key of a JSON object file.
    Every save rewrites the whole file (last write wins).
    """
    def __init__(self, path: str, key: str = "trafficLightsData"):
        self.path = path
        self.key = key

    def _read_slots(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                slots = json.load(f)
        except (OSError, ValueError) as e:
            # ValueError covers bad JSON and bytes that are not UTF-8
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(slots, dict):
            raise PersistenceError(f"{self.path} does not hold a key-value object")
        return slots

    @log_execution_time(logger)
    def load(self) -> List[IntersectionRecord]:
        slots = self._read_slots()
        if self.key not in slots or slots[self.key] is None:
            return []
        payload = slots[self.key]
        # The slot may hold the array itself or its JSON text
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except ValueError as e:
                raise PersistenceError(f"Slot {self.key} is not valid JSON: {e}") from e
        try:
            return load_records(payload)
        except ValidationError as e:
            raise PersistenceError(f"Slot {self.key} is malformed: {e}") from e

    def save(self, records: List[IntersectionRecord]) -> bool:
        try:
            try:
                slots = self._read_slots()
            except PersistenceError:
                slots = {}
            slots[self.key] = dump_records(records)

            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(slots, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
            return True
        except OSError as e:
            logger.error(f"Failed to save intersections to {self.path}: {e}")
            return False
