"""
Duration recorder sessions served over the API.
"""
import asyncio
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional

from ..domain import DurationRecorder, Durations
from ..infrastructure.broadcast.phase_broadcaster import PhaseBroadcaster
from ...common.logging import setup_logger

logger = setup_logger(__name__)

@dataclass
class RecorderSession:
    session_id: str
    snap_schedule: bool = False
    recorder: Optional[DurationRecorder] = None
    schedule_time: Optional[str] = None
    readout_task: Optional[asyncio.Task] = None
    last_activity: float = 0.0

    @property
    def channel(self) -> str:
        return f"recorder:{self.session_id}"

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "schedule_time": self.schedule_time,
            **self.recorder.snapshot(),
        }

class RecorderService:
    """
    Each open session runs a 100 ms readout task while it is recording.
    The task is cancelled as soon as the session completes, is cancelled,
    or sits without a click for longer than idle_timeout_seconds.
    """

    def __init__(
        self,
        broadcaster: PhaseBroadcaster,
        refresh_seconds: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
        idle_timeout_seconds: float = 300.0,
    ):
        self.broadcaster = broadcaster
        self.refresh_seconds = refresh_seconds
        self.clock = clock
        self.wall_clock = wall_clock
        self.idle_timeout_seconds = idle_timeout_seconds
        self.sessions: Dict[str, RecorderSession] = {}

    def open(self, snap_schedule: bool = False) -> RecorderSession:
        self.expire_idle()
        session_id = uuid.uuid4().hex
        session = RecorderSession(session_id=session_id, snap_schedule=snap_schedule)
        session.last_activity = self.clock()

        def on_start():
            # Creation flow: the schedule time becomes the moment recording began
            if session.snap_schedule:
                session.schedule_time = self.wall_clock().strftime("%H:%M:%S")

        session.recorder = DurationRecorder(clock=self.clock, on_start=on_start)
        self.sessions[session_id] = session
        return session

    def get(self, session_id: str) -> Optional[RecorderSession]:
        return self.sessions.get(session_id)

    def is_idle(self, session: RecorderSession) -> bool:
        return self.clock() - session.last_activity > self.idle_timeout_seconds

    def expire_idle(self) -> int:
        """
        Drops sessions nobody clicked for idle_timeout_seconds.
        Returns the number of sessions dropped.
        """
        stale = [s for s in self.sessions.values() if self.is_idle(s)]
        for session in stale:
            session.recorder.cancel()
            self.sessions.pop(session.session_id, None)
            task = session.readout_task
            session.readout_task = None
            if task is not None and task is not asyncio.current_task():
                task.cancel()
            self.broadcaster.close(session.channel, session.to_dict())
            logger.info(f"Recorder {session.session_id} expired after {self.idle_timeout_seconds}s idle")
        return len(stale)

    async def advance(self, session_id: str) -> Optional[RecorderSession]:
        """
        Applies one click. Raises RecorderStateError if the session is closed.
        The session is dropped once it produced its durations.
        """
        self.expire_idle()
        session = self.sessions.get(session_id)
        if session is None:
            return None

        result: Optional[Durations] = session.recorder.advance()
        session.last_activity = self.clock()
        if result is not None:
            await self._close(session)
            logger.info(f"Recorder {session_id} captured {result.to_dict()}")
            return session

        if session.readout_task is None:
            session.readout_task = asyncio.create_task(self._readout(session))
        await self.broadcaster.broadcast(session.channel, session.to_dict())
        return session

    async def cancel(self, session_id: str) -> bool:
        session = self.sessions.get(session_id)
        if session is None:
            return False
        session.recorder.cancel()
        await self._close(session)
        return True

    async def _readout(self, session: RecorderSession):
        while session.recorder.is_recording:
            if self.is_idle(session):
                logger.info(f"Recorder {session.session_id} abandoned, cancelling")
                await self.cancel(session.session_id)
                return
            await self.broadcaster.broadcast(session.channel, session.to_dict())
            await asyncio.sleep(self.refresh_seconds)

    async def _close(self, session: RecorderSession):
        """Stops the readout, publishes the final snapshot and drops the channel."""
        self.sessions.pop(session.session_id, None)
        task = session.readout_task
        session.readout_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.broadcaster.close(session.channel, session.to_dict())

    async def close_all(self):
        for session in list(self.sessions.values()):
            session.recorder.cancel()
            await self._close(session)
