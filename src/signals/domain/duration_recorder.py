"""
Stopwatch-style capture of the green, yellow and red durations.

The user repeatedly triggers a single "advance" action:
step 0 -> 1 starts the green interval, 1 -> 2 and 2 -> 3 close green and
yellow, and the fourth advance closes red and emits the full triple.
"""
import math
import time
from enum import IntEnum
from typing import Callable, Dict, Optional

from .entities import Durations
from ...common.exceptions import RecorderStateError

class RecorderStep(IntEnum):
    NOT_STARTED = 0
    IN_GREEN = 1
    IN_YELLOW = 2
    IN_RED = 3

PROMPTS = {
    RecorderStep.NOT_STARTED: "Start (green)",
    RecorderStep.IN_GREEN: "Switch to yellow",
    RecorderStep.IN_YELLOW: "Switch to red",
    RecorderStep.IN_RED: "Finish",
}

STEP_COLORS = {
    RecorderStep.IN_GREEN: "green",
    RecorderStep.IN_YELLOW: "yellow",
    RecorderStep.IN_RED: "red",
}

def whole_seconds(elapsed: float) -> int:
    """Rounds to the nearest second (halves round up) with a floor of 1."""
    return max(1, math.floor(elapsed + 0.5))

class DurationRecorder:
    """
    Captured values are computed only at step boundaries; elapsed() is a
    display readout and has no effect on them.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, on_start: Optional[Callable[[], None]] = None):
        self.clock = clock
        self.on_start = on_start
        self.step = RecorderStep.NOT_STARTED
        self.start_time: Optional[float] = None
        self.partial: Dict[str, int] = {}
        self.result: Optional[Durations] = None
        self.cancelled = False

    @property
    def is_recording(self) -> bool:
        return self.step > RecorderStep.NOT_STARTED and not self.is_closed

    @property
    def is_closed(self) -> bool:
        return self.cancelled or self.result is not None

    @property
    def prompt(self) -> str:
        return PROMPTS[self.step]

    @property
    def current_color(self) -> Optional[str]:
        return STEP_COLORS.get(self.step)

    def advance(self) -> Optional[Durations]:
        """Handles one user click. Returns the durations on the final click."""
        if self.is_closed:
            raise RecorderStateError("Recorder already finished or cancelled")

        now = self.clock()
        if self.step == RecorderStep.NOT_STARTED:
            self.step = RecorderStep.IN_GREEN
            self.start_time = now
            if self.on_start:
                self.on_start()
            return None

        captured = whole_seconds(now - self.start_time)
        color = STEP_COLORS[self.step]
        self.partial[color] = captured

        if self.step == RecorderStep.IN_RED:
            self.result = Durations(**self.partial)
            return self.result

        self.step = RecorderStep(self.step + 1)
        self.start_time = now
        return None

    def cancel(self):
        """Aborts without emitting; partial values are dropped."""
        self.cancelled = True
        self.partial = {}

    def elapsed(self) -> float:
        """Seconds in the current step, to one decimal, for the live readout."""
        if not self.is_recording or self.start_time is None:
            return 0.0
        return round(self.clock() - self.start_time, 1)

    def snapshot(self) -> dict:
        return {
            "step": int(self.step),
            "prompt": self.prompt,
            "light": self.current_color,
            "elapsed": self.elapsed(),
            "partial": dict(self.partial),
            "result": self.result.to_dict() if self.result else None,
            "cancelled": self.cancelled,
        }
