"""
One authoritative scheduler per intersection record.
Each scheduler owns a single 1 s timer that evaluates the schedule gate and
advances the cycle engine, then publishes the (phase, light, time_left)
snapshot for subscribers.
"""
import asyncio
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

from ..domain import CycleEngine, CycleState, GateEdge, IntersectionRecord, ScheduleGate, format_window
from ..infrastructure.broadcast.phase_broadcaster import PhaseBroadcaster
from ...common.logging import setup_logger

logger = setup_logger(__name__)

class IntersectionScheduler:
    """
    Drives one intersection. step() is the synchronous tick so it can be
    exercised without an event loop; start()/stop() manage the timer task.
    """

    def __init__(
        self,
        record: IntersectionRecord,
        broadcaster: Optional[PhaseBroadcaster] = None,
        clock: Callable[[], datetime] = datetime.now,
        tick_seconds: float = 1.0,
        window_minutes: int = 30,
    ):
        self.record = record
        self.broadcaster = broadcaster
        self.clock = clock
        self.tick_seconds = tick_seconds
        self.gate = ScheduleGate(window_minutes)
        self.engine = CycleEngine()
        self._task: Optional[asyncio.Task] = None
        self._snapshot: Optional[dict] = None

    @property
    def channel(self) -> str:
        return str(self.record.id)

    @property
    def state(self) -> CycleState:
        return self.engine.state

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def update_record(self, record: IntersectionRecord):
        """New durations are picked up at the next phase boundary."""
        self.record = record

    def step(self, now: Optional[datetime] = None) -> CycleState:
        now = now or self.clock()
        was_active = self.engine.is_active
        edge = self.gate.evaluate(self.record.schedule_time, now)

        if edge is GateEdge.OPENED:
            state = self.engine.activate(self.record.durations)
            logger.info(f"Intersection {self.record.id} entered its schedule window")
        elif edge is GateEdge.CLOSED:
            state = self.engine.reset()
            logger.info(f"Intersection {self.record.id} left its schedule window")
        elif was_active:
            state = self.engine.tick(self.record.durations)
        else:
            state = self.engine.state

        self._snapshot = self.serialize(now)
        return state

    def serialize(self, now: datetime) -> dict:
        return {
            "intersection_id": self.record.id,
            "name": self.record.name,
            **self.engine.state.to_dict(),
            "window": format_window(self.record.schedule_time, now, self.gate.window_minutes),
            "timestamp": now.isoformat(),
        }

    def snapshot(self) -> dict:
        return self._snapshot or self.serialize(self.clock())

    async def publish(self):
        if self.broadcaster is not None:
            await self.broadcaster.broadcast(self.channel, self.snapshot())

    async def _run(self):
        while True:
            try:
                self.step()
                await self.publish()
            except Exception as e:
                # A failing tick must not take down other intersections
                logger.error(f"Tick failed for intersection {self.record.id}: {e}", exc_info=True)
            await asyncio.sleep(self.tick_seconds)

    def start(self):
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name=f"scheduler-{self.record.id}")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.gate.reset()
        self.engine.reset()

class SchedulerManager:
    """
    Keeps one running scheduler per record in the registry.
    """

    def __init__(
        self,
        broadcaster: PhaseBroadcaster,
        clock: Callable[[], datetime] = datetime.now,
        tick_seconds: float = 1.0,
        window_minutes: int = 30,
    ):
        self.broadcaster = broadcaster
        self.clock = clock
        self.tick_seconds = tick_seconds
        self.window_minutes = window_minutes
        self.schedulers: Dict[int, IntersectionScheduler] = {}

    def _build(self, record: IntersectionRecord) -> IntersectionScheduler:
        return IntersectionScheduler(
            record,
            broadcaster=self.broadcaster,
            clock=self.clock,
            tick_seconds=self.tick_seconds,
            window_minutes=self.window_minutes,
        )

    async def sync(self, records: Iterable[IntersectionRecord]):
        """Starts, updates and stops schedulers to match the given records."""
        wanted = {record.id: record for record in records}

        for intersection_id in list(self.schedulers):
            if intersection_id not in wanted:
                await self.remove(intersection_id)

        for intersection_id, record in wanted.items():
            scheduler = self.schedulers.get(intersection_id)
            if scheduler is None:
                scheduler = self._build(record)
                self.schedulers[intersection_id] = scheduler
                scheduler.start()
                logger.info(f"Started scheduler for intersection {intersection_id}")
            elif scheduler.record != record:
                scheduler.update_record(record)

    async def remove(self, intersection_id: int):
        scheduler = self.schedulers.pop(intersection_id, None)
        if scheduler is None:
            return
        await scheduler.stop()
        self.broadcaster.close(scheduler.channel)
        logger.info(f"Stopped scheduler for intersection {intersection_id}")

    async def stop_all(self):
        tasks = [self.remove(intersection_id) for intersection_id in list(self.schedulers)]
        await asyncio.gather(*tasks)

    def get_state(self, intersection_id: int) -> Optional[dict]:
        scheduler = self.schedulers.get(intersection_id)
        if scheduler is None:
            return None
        return scheduler.snapshot()

    def get_status(self) -> Dict[int, dict]:
        return {
            intersection_id: {"running": scheduler.is_running, **scheduler.snapshot()}
            for intersection_id, scheduler in self.schedulers.items()
        }
