"""
Ordered in-memory collection of intersections backed by a store port.
"""
import math
import time
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..domain import IntersectionStore, IntersectionRecord, Durations, DEFAULT_DURATIONS
from ...common.exceptions import PersistenceError
from ...common.logging import setup_logger

logger = setup_logger(__name__)

RawDurations = Union[Durations, Dict[str, object], None]

def coerce_duration(value: object, default: int) -> int:
    """
    Missing, blank, zero or non-numeric input falls back to the default;
    any other number is truncated to an integer and clamped to >= 1.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number) or number == 0:
        return default
    return max(1, int(number))

def normalize_durations(raw: RawDurations, defaults: Durations = DEFAULT_DURATIONS) -> Durations:
    if isinstance(raw, Durations):
        raw = raw.to_dict()
    raw = raw or {}
    return Durations(
        green=coerce_duration(raw.get("green"), defaults.green),
        yellow=coerce_duration(raw.get("yellow"), defaults.yellow),
        red=coerce_duration(raw.get("red"), defaults.red),
    )

class MillisecondIdFactory:
    """Creation timestamp in ms, bumped past the last issued id on collisions."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._last = 0

    def __call__(self) -> int:
        candidate = int(self.clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate

    def observe(self, existing_id: int):
        self._last = max(self._last, existing_id)

class IntersectionRegistry:
    """
    Owns the ordered collection. Views get immutable records and must go
    through create/update/delete; each mutation rewrites the whole store slot.
    """

    def __init__(
        self,
        store: IntersectionStore,
        id_factory: Optional[Callable[[], int]] = None,
        defaults: Durations = DEFAULT_DURATIONS,
    ):
        self.store = store
        self.id_factory = id_factory or MillisecondIdFactory()
        self.defaults = defaults
        self._records: List[IntersectionRecord] = []
        self.load()

    def load(self) -> Tuple[IntersectionRecord, ...]:
        """Reads the store, failing open to an empty collection."""
        try:
            self._records = list(self.store.load())
        except PersistenceError as e:
            logger.warning(f"Could not read saved intersections, starting empty: {e}")
            self._records = []

        if hasattr(self.id_factory, "observe"):
            for record in self._records:
                self.id_factory.observe(record.id)
        logger.info(f"Loaded {len(self._records)} intersections")
        return self.list()

    def _persist(self):
        if not self.store.save(list(self._records)):
            logger.error("Saving intersections failed; keeping in-memory state")

    def list(self) -> Tuple[IntersectionRecord, ...]:
        return tuple(self._records)

    def get(self, intersection_id: int) -> Optional[IntersectionRecord]:
        for record in self._records:
            if record.id == intersection_id:
                return record
        return None

    def __len__(self) -> int:
        return len(self._records)

    def create(self, name: str, schedule_time: str, durations: RawDurations = None) -> Optional[IntersectionRecord]:
        """Appends a new record. Blank names are ignored (returns None)."""
        if not name or not name.strip():
            logger.debug("Ignoring create with blank name")
            return None

        record = IntersectionRecord(
            id=self.id_factory(),
            name=name,
            schedule_time=schedule_time or "",
            durations=normalize_durations(durations, self.defaults),
        )
        self._records.append(record)
        self._persist()
        logger.info(f"Created intersection {record.id} ({record.name})")
        return record

    def update(self, intersection_id: int, record: IntersectionRecord, durations: RawDurations = None) -> Optional[IntersectionRecord]:
        """
        Replaces the record with the given id. `durations` overrides the
        record's own (e.g. raw form input) before coercion.
        """
        for index, current in enumerate(self._records):
            if current.id == intersection_id:
                raw = durations if durations is not None else record.durations
                replacement = replace(
                    record,
                    id=intersection_id,
                    schedule_time=record.schedule_time or "",
                    durations=normalize_durations(raw, self.defaults),
                )
                self._records[index] = replacement
                self._persist()
                logger.info(f"Updated intersection {intersection_id}")
                return replacement
        logger.debug(f"Update ignored, unknown intersection {intersection_id}")
        return None

    def delete(self, intersection_id: int) -> bool:
        remaining = [r for r in self._records if r.id != intersection_id]
        if len(remaining) == len(self._records):
            logger.debug(f"Delete ignored, unknown intersection {intersection_id}")
            return False
        self._records = remaining
        self._persist()
        logger.info(f"Deleted intersection {intersection_id}")
        return True
