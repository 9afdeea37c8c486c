"""
API for managing intersections.
"""
from fastapi import FastAPI, HTTPException
from typing import Optional

from .....common.schemas import IntersectionInput, IntersectionSchema
from ....application.registry import IntersectionRegistry
from ....application.scheduler import SchedulerManager
from ....domain import IntersectionRecord, STANDBY, format_window

app = FastAPI()

# Singletons
_registry: Optional[IntersectionRegistry] = None
_manager: Optional[SchedulerManager] = None

def init_intersections(registry: IntersectionRegistry, manager: SchedulerManager):
    global _registry, _manager
    _registry = registry
    _manager = manager

def get_registry() -> IntersectionRegistry:
    if _registry is None:
        raise HTTPException(500, "Registry not initialized")
    return _registry

def get_manager() -> SchedulerManager:
    if _manager is None:
        raise HTTPException(500, "Scheduler not initialized")
    return _manager

def serialize_record(record: IntersectionRecord, manager: SchedulerManager) -> dict:
    state = manager.get_state(record.id) or STANDBY.to_dict()
    return {
        **IntersectionSchema.from_record(record).model_dump(by_alias=True),
        "window": format_window(record.schedule_time, window_minutes=manager.window_minutes),
        "state": state,
    }

@app.get("/intersections")
async def list_intersections():
    """Intersections in display order with their live cycle state."""
    registry = get_registry()
    manager = get_manager()
    return [serialize_record(r, manager) for r in registry.list()]

@app.post("/intersections")
async def create_intersection(payload: IntersectionInput):
    """
    Creates an intersection. A blank name is ignored.

    Body example:
    {
        "name": "Main St & 1st Ave",
        "scheduleTime": "08:00:00",
        "durations": {"green": 15, "yellow": 3, "red": 15}
    }
    """
    registry = get_registry()
    manager = get_manager()
    record = registry.create(payload.name, payload.schedule_time, payload.durations.model_dump())
    if record is None:
        return {"status": "ignored"}
    await manager.sync(registry.list())
    return {"status": "created", "intersection": serialize_record(record, manager)}

@app.put("/intersections/{intersection_id}")
async def update_intersection(intersection_id: int, payload: IntersectionInput):
    """Replaces name, schedule and durations; durations are clamped to at least 1 second."""
    registry = get_registry()
    manager = get_manager()
    current = registry.get(intersection_id)
    if current is None:
        raise HTTPException(404, "Intersection not found")

    replacement = IntersectionRecord(
        id=intersection_id,
        name=payload.name,
        schedule_time=payload.schedule_time,
        durations=current.durations,
    )
    # Omitted durations keep the current ones
    raw = payload.durations.model_dump() if "durations" in payload.model_fields_set else None
    record = registry.update(intersection_id, replacement, durations=raw)
    await manager.sync(registry.list())
    return {"status": "updated", "intersection": serialize_record(record, manager)}

@app.delete("/intersections/{intersection_id}")
async def delete_intersection(intersection_id: int):
    registry = get_registry()
    manager = get_manager()
    if not registry.delete(intersection_id):
        raise HTTPException(404, "Intersection not found")
    await manager.sync(registry.list())
    return {"status": "deleted", "intersection_id": intersection_id}

@app.get("/intersections/{intersection_id}/state")
async def get_intersection_state(intersection_id: int):
    """Latest (phase, light, time_left) snapshot (polling fallback)."""
    registry = get_registry()
    manager = get_manager()
    if registry.get(intersection_id) is None:
        raise HTTPException(404, "Intersection not found")
    return manager.get_state(intersection_id) or STANDBY.to_dict()
