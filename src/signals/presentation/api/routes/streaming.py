"""
Endpoints for realtime streaming.
"""
from fastapi import FastAPI
from sse_starlette.sse import EventSourceResponse
import json
from typing import Optional
from ....infrastructure.broadcast.phase_broadcaster import END_OF_STREAM, PhaseBroadcaster

app = FastAPI()

_broadcaster: Optional[PhaseBroadcaster] = None

def init_broadcaster(broadcaster: PhaseBroadcaster):
    global _broadcaster
    _broadcaster = broadcaster

def get_broadcaster() -> PhaseBroadcaster:
    global _broadcaster
    if _broadcaster is None:
        _broadcaster = PhaseBroadcaster()
    return _broadcaster

def sse_response(channel: str, event: str) -> EventSourceResponse:
    broadcaster = get_broadcaster()

    async def event_generator():
        queue = await broadcaster.subscribe(channel)
        try:
            while True:
                data = await queue.get()
                if data is END_OF_STREAM:
                    break
                yield {
                    "event": event,
                    "data": json.dumps(data, ensure_ascii=False)
                }
        finally:
            await broadcaster.unsubscribe(channel, queue)

    return EventSourceResponse(event_generator())

@app.get("/stream/{intersection_id}")
async def stream_intersection(intersection_id: int):
    """
    Server-Sent Events endpoint for an intersection's cycle.

    Frontend usage:
    ```javascript
    const eventSource = new EventSource('/stream/1700000000000');
    eventSource.addEventListener('cycle', (event) => {
        const data = JSON.parse(event.data);
        console.log(data.light, data.time_left);
    });
    ```
    """
    return sse_response(str(intersection_id), "cycle")

@app.get("/recorder/sessions/{session_id}/stream")
async def stream_recorder(session_id: str):
    """Elapsed-time readout of a recorder session, refreshed every 100 ms."""
    return sse_response(f"recorder:{session_id}", "readout")
