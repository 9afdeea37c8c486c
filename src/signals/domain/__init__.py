"""
Domain module initialization.
"""
from .entities import (
    LightColor,
    Phase,
    Durations,
    IntersectionRecord,
    CycleState,
    DEFAULT_DURATIONS,
    STANDBY
)
from .protocols import Coordinates, PositionOptions, PositionProvider, ReverseLookup
from .repositories import IntersectionStore
from .schedule_gate import ScheduleGate, GateEdge, is_within_window, format_window
from .cycle_engine import CycleEngine
from .duration_recorder import DurationRecorder, RecorderStep
