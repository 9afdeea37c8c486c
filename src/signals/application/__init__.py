"""
Application module initialization.
"""
from .registry import IntersectionRegistry, normalize_durations, coerce_duration
from .scheduler import IntersectionScheduler, SchedulerManager
from .recorder_service import RecorderService, RecorderSession
