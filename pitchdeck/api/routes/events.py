import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from pitchdeck.api.dependencies import get_app_controller, get_event_bus
from pitchdeck.application.app_controller import AppController
from pitchdeck.infra.config.logging_config import get_logger
from pitchdeck.infra.eventbus import EventBus, sse_event

router = APIRouter(tags=["events"])
log = get_logger("api.events")

KEEPALIVE_SECONDS = 15.0

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/events", response_class=StreamingResponse)
async def events(
    request: Request,
    controller: AppController = Depends(get_app_controller),
    bus: EventBus = Depends(get_event_bus),
) -> StreamingResponse:
    """State changes as Server-Sent Events, starting with the current snapshot."""
    queue = bus.subscribe()
    log.info("events.subscribed", subscribers=bus.subscriber_count)

    async def event_generator():
        try:
            yield sse_event("app", controller.snapshot())
            while not await request.is_disconnected():
                try:
                    frame = await asyncio.wait_for(queue.get(), KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield frame
        finally:
            bus.unsubscribe(queue)
            log.info("events.unsubscribed", subscribers=bus.subscriber_count)

    return StreamingResponse(
        event_generator(), media_type="text/event-stream", headers=SSE_HEADERS
    )
