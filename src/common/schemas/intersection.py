from typing import Any, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from ...signals.domain.entities import Durations, IntersectionRecord

class DurationsSchema(BaseModel):
    """
    Stored durations. Values are whole seconds, at least 1.
    """
    green: int = Field(..., ge=1, description="Green light duration in seconds")
    yellow: int = Field(..., ge=1, description="Yellow light duration in seconds")
    red: int = Field(..., ge=1, description="Red light duration in seconds")

class IntersectionSchema(BaseModel):
    """
    One element of the persisted array:
    {id, name, scheduleTime: "HH:MM:SS", durations: {green, yellow, red}}
    """
    id: int = Field(..., description="Unique id, creation timestamp in milliseconds")
    name: str = Field(..., description="Display name of the intersection")
    schedule_time: str = Field("", alias="scheduleTime", description="Daily schedule time HH:MM:SS")
    durations: DurationsSchema

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_record(cls, record: IntersectionRecord) -> "IntersectionSchema":
        return cls(
            id=record.id,
            name=record.name,
            schedule_time=record.schedule_time,
            durations=DurationsSchema(**record.durations.to_dict()),
        )

    def to_record(self) -> IntersectionRecord:
        return IntersectionRecord(
            id=self.id,
            name=self.name,
            schedule_time=self.schedule_time,
            durations=Durations(**self.durations.model_dump()),
        )

_collection = TypeAdapter(List[IntersectionSchema])

def dump_records(records: List[IntersectionRecord]) -> list:
    """Serializes records to the JSON-ready wire format (camelCase keys)."""
    return [IntersectionSchema.from_record(r).model_dump(by_alias=True) for r in records]

def load_records(payload: Any) -> List[IntersectionRecord]:
    """Parses the wire format. Raises pydantic.ValidationError on malformed input."""
    return [item.to_record() for item in _collection.validate_python(payload)]

# --- API payloads ---

RawDuration = Optional[Union[int, float, str]]

class DurationsInput(BaseModel):
    """
    Durations as typed by the user. Coercion to positive integers is done by
    the registry, so any value is accepted here.
    """
    green: RawDuration = None
    yellow: RawDuration = None
    red: RawDuration = None

class IntersectionInput(BaseModel):
    name: str = Field("", description="Display name, ignored when blank on create")
    schedule_time: str = Field("", alias="scheduleTime", description="Daily schedule time HH:MM:SS")
    durations: DurationsInput = Field(default_factory=DurationsInput)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("schedule_time", mode="before")
    @classmethod
    def none_means_unset(cls, v):
        return "" if v is None else v

class ResolveLocationRequest(BaseModel):
    """
    Position reported by the client device, or the error it hit.
    """
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    error_code: Optional[int] = Field(None, description="1 denied, 2 unavailable, 3 timeout")
    message: Optional[str] = None

class RecorderSessionRequest(BaseModel):
    snap_schedule: bool = Field(False, description="Set schedule time to now when recording starts")
