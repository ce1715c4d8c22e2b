import asyncio
import json
from typing import Set

from pitchdeck.infra.config.logging_config import get_logger

logger = get_logger(__name__)

SUBSCRIBER_QUEUE_SIZE = 256


def sse_event(event: str, data: dict) -> str:
    """Serialize one Server-Sent Events frame."""
    return (
        f"event: {event}\n" + "data: " + json.dumps(data, ensure_ascii=False) + "\n\n"
    )


class EventBus:
    """Fan-out of state-change events to SSE subscribers."""

    def __init__(self) -> None:
        self._subscribers: Set[asyncio.Queue[str]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[str]:
        q: asyncio.Queue[str] = asyncio.Queue(maxsize=SUBSCRIBER_QUEUE_SIZE)
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue[str]) -> None:
        self._subscribers.discard(q)

    def publish(self, event: str, data: dict) -> None:
        payload = sse_event(event, data)
        for q in list(self._subscribers):
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                logger.warning("eventbus.subscriber_lagging", topic=event)
