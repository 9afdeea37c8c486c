"""
API for interactive duration recording.
"""
from fastapi import FastAPI, HTTPException
from typing import Optional

from .....common.exceptions import RecorderStateError
from .....common.schemas import RecorderSessionRequest
from ....application.recorder_service import RecorderService

app = FastAPI()

_service: Optional[RecorderService] = None

def init_recorder(service: RecorderService):
    global _service
    _service = service

def get_recorder_service() -> RecorderService:
    if _service is None:
        raise HTTPException(500, "Recorder not initialized")
    return _service

@app.post("/recorder/sessions")
async def open_session(payload: Optional[RecorderSessionRequest] = None):
    """
    Opens a recorder. With snap_schedule the session's schedule_time is set
    to the wall-clock time of the first click (creation flow).
    """
    service = get_recorder_service()
    snap = payload.snap_schedule if payload else False
    session = service.open(snap_schedule=snap)
    return session.to_dict()

@app.get("/recorder/sessions/{session_id}")
async def get_session(session_id: str):
    service = get_recorder_service()
    session = service.get(session_id)
    if session is None:
        raise HTTPException(404, "Recorder session not found")
    return session.to_dict()

@app.post("/recorder/sessions/{session_id}/advance")
async def advance_session(session_id: str):
    """One click: start, switch to yellow, switch to red, finish."""
    service = get_recorder_service()
    try:
        session = await service.advance(session_id)
    except RecorderStateError as e:
        raise HTTPException(409, str(e))
    if session is None:
        raise HTTPException(404, "Recorder session not found")
    return session.to_dict()

@app.delete("/recorder/sessions/{session_id}")
async def cancel_session(session_id: str):
    service = get_recorder_service()
    if not await service.cancel(session_id):
        raise HTTPException(404, "Recorder session not found")
    return {"status": "cancelled", "session_id": session_id}
