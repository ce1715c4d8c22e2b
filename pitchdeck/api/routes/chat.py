from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from pitchdeck.api.dependencies import get_chat_session
from pitchdeck.api.routes.events import SSE_HEADERS
from pitchdeck.api.schemas import ChatHistory, ChatRequest
from pitchdeck.application.chat import ChatSession
from pitchdeck.infra.eventbus import sse_event

router = APIRouter(prefix="/chat", tags=["chat"])


def _history(chat: ChatSession) -> ChatHistory:
    return ChatHistory(messages=chat.history(), is_loading=chat.is_loading)


@router.get("/messages", response_model=ChatHistory)
async def get_messages(chat: ChatSession = Depends(get_chat_session)) -> ChatHistory:
    return _history(chat)


@router.post("/messages", response_class=StreamingResponse)
async def send_message(
    body: ChatRequest,
    chat: ChatSession = Depends(get_chat_session),
) -> StreamingResponse:
    """
    Send a message and stream the reply as SSE.

    Frames: ``delta`` per chunk, ``apology`` if the reply failed, then ``done``.
    Empty or concurrent sends are rejected before the stream opens.
    """
    updates = chat.send(body.text)
    try:
        first = await updates.__anext__()
    except StopAsyncIteration:
        first = None

    async def event_generator():
        try:
            if first is not None:
                yield sse_event(first.kind, {"text": first.text})
                async for update in updates:
                    yield sse_event(update.kind, {"text": update.text})
            yield sse_event("done", {"messages": len(chat.messages)})
        finally:
            await updates.aclose()

    return StreamingResponse(
        event_generator(), media_type="text/event-stream", headers=SSE_HEADERS
    )


@router.delete("/messages", response_model=ChatHistory)
async def reset_messages(chat: ChatSession = Depends(get_chat_session)) -> ChatHistory:
    chat.reset()
    return _history(chat)
