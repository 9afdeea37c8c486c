"""
Domain entities for the traffic signal module.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

class LightColor(Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"

class Phase(Enum):
    STANDBY = "standby"
    ACTIVE = "active"

@dataclass(frozen=True)
class Durations:
    """
    Seconds each light stays on during one cycle. All values are >= 1.
    """
    green: int
    yellow: int
    red: int

    def of(self, color: LightColor) -> int:
        return getattr(self, color.value)

    def to_dict(self) -> dict:
        return {"green": self.green, "yellow": self.yellow, "red": self.red}

DEFAULT_DURATIONS = Durations(green=15, yellow=3, red=15)

@dataclass(frozen=True)
class IntersectionRecord:
    """
    Persisted configuration of one simulated traffic light.
    Replaced wholesale on update, never mutated in place.
    """
    id: int
    name: str
    schedule_time: str  # "HH:MM:SS", may be empty
    durations: Durations

@dataclass(frozen=True)
class CycleState:
    """
    Derived runtime state of an intersection. Never persisted.
    """
    phase: Phase = Phase.STANDBY
    light: Optional[LightColor] = None
    time_left: int = 0

    @property
    def is_active(self) -> bool:
        return self.phase is Phase.ACTIVE

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "light": self.light.value if self.light else None,
            "time_left": self.time_left,
        }

STANDBY = CycleState()
