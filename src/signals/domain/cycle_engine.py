"""
Green -> yellow -> red -> green countdown ring.
"""
from typing import Optional
from .entities import CycleState, Durations, LightColor, Phase, STANDBY

NEXT_LIGHT = {
    LightColor.GREEN: LightColor.YELLOW,
    LightColor.YELLOW: LightColor.RED,
    LightColor.RED: LightColor.GREEN,
}

class CycleEngine:
    """
    State machine with states {standby, green, yellow, red}.
    Durations are read at each phase boundary, so an edit made while a light
    is running only takes effect when the next light is seeded.
    """

    def __init__(self):
        self._state: CycleState = STANDBY

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    def activate(self, durations: Durations) -> CycleState:
        self._state = CycleState(Phase.ACTIVE, LightColor.GREEN, durations.green)
        return self._state

    def reset(self) -> CycleState:
        self._state = STANDBY
        return self._state

    def tick(self, durations: Durations) -> CycleState:
        """Advances one second. No-op while in standby."""
        state = self._state
        if not state.is_active:
            return state

        if state.time_left <= 1:
            light = NEXT_LIGHT[state.light]
            self._state = CycleState(Phase.ACTIVE, light, durations.of(light))
        else:
            self._state = CycleState(Phase.ACTIVE, state.light, state.time_left - 1)
        return self._state

    @property
    def light(self) -> Optional[LightColor]:
        return self._state.light
