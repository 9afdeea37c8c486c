import json
from typing import List

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ...domain import IntersectionStore, IntersectionRecord
from ....common.database import KeyValueEntryDB
from ....common.exceptions import PersistenceError
from ....common.logging import setup_logger, log_execution_time
from ....common.schemas import dump_records, load_records

logger = setup_logger(__name__)

class SqlIntersectionStore(IntersectionStore):
    """
    Stores the serialized collection as one row of a key-value table.
    """
    def __init__(self, session_factory: sessionmaker, key: str = "trafficLightsData"):
        self.session_factory = session_factory
        self.key = key

    @log_execution_time(logger)
    def load(self) -> List[IntersectionRecord]:
        db = self.session_factory()
        try:
            entry = db.get(KeyValueEntryDB, self.key)
            if entry is None:
                return []
            return load_records(json.loads(entry.value))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Cannot read slot {self.key}: {e}") from e
        except (json.JSONDecodeError, ValidationError) as e:
            raise PersistenceError(f"Slot {self.key} is malformed: {e}") from e
        finally:
            db.close()

    def save(self, records: List[IntersectionRecord]) -> bool:
        db = self.session_factory()
        try:
            value = json.dumps(dump_records(records), ensure_ascii=False)
            entry = db.get(KeyValueEntryDB, self.key)
            if entry is None:
                db.add(KeyValueEntryDB(key=self.key, value=value))
            else:
                entry.value = value
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save slot {self.key}: {e}")
            return False
        finally:
            db.close()
