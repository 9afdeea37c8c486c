import asyncio
from typing import Dict, Optional, Set

from ....common.logging import setup_logger

logger = setup_logger(__name__)

# Queued after the last snapshot of a closed channel
END_OF_STREAM = None

class PhaseBroadcaster:
    """
    Pub/sub system to transmit intersection snapshots to connected clients.
    Channels are intersection ids or "recorder:<session>" readouts.
    """

    def __init__(self):
        # Subscribers per channel
        self._subscribers: Dict[str, Set[asyncio.Queue]] = {}
        self._lock = asyncio.Lock()

        # Cache latest state per channel (for new subscribers)
        self._latest_state: Dict[str, dict] = {}

    async def subscribe(self, channel: str, queue_size: int = 50) -> asyncio.Queue:
        """
        Subscribes a client to updates from a channel.
        Returns an async queue that will receive the data.
        """
        queue = asyncio.Queue(maxsize=queue_size)

        async with self._lock:
            if channel not in self._subscribers:
                self._subscribers[channel] = set()
            self._subscribers[channel].add(queue)

        # Send latest known state immediately
        if channel in self._latest_state:
            try:
                queue.put_nowait(self._latest_state[channel])
            except asyncio.QueueFull:
                pass

        return queue

    async def unsubscribe(self, channel: str, queue: asyncio.Queue):
        """Removes a subscriber."""
        async with self._lock:
            if channel in self._subscribers:
                self._subscribers[channel].discard(queue)
                if not self._subscribers[channel]:
                    del self._subscribers[channel]

    async def broadcast(self, channel: str, data: dict):
        """
        Transmits a snapshot to all subscribers of a channel.
        Non-blocking: if a client is slow, it is skipped.
        """
        self._latest_state[channel] = data

        async with self._lock:
            subscribers = self._subscribers.get(channel, set()).copy()

        for queue in subscribers:
            try:
                queue.put_nowait(data)
            except asyncio.QueueFull:
                logger.warning(f"Skipping slow client for {channel}")

    def latest(self, channel: str) -> Optional[dict]:
        return self._latest_state.get(channel)

    def close(self, channel: str, final: Optional[dict] = None):
        """
        Ends a channel that no longer exists: subscribers get `final` (if any)
        followed by END_OF_STREAM, then the subscribers and the cached state
        are dropped.
        """
        subscribers = self._subscribers.pop(channel, set())
        self._latest_state.pop(channel, None)
        tail = ([final] if final is not None else []) + [END_OF_STREAM]
        for queue in subscribers:
            for item in tail:
                if queue.full():
                    # Make room, the end marker must get through
                    queue.get_nowait()
                queue.put_nowait(item)

    def channels(self) -> list:
        return list(self._subscribers.keys())
