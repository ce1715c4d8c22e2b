"""
Voice WebSocket: binary PCM16 frames in both directions plus JSON control.

Client -> server: binary capture frames, ``{"type": "mute"|"unmute"|"stop"}``.
Server -> client: binary playback frames, ``{"type": "interrupted"}``,
``{"type": "transcript", "text": ...}``, ``{"type": "muted", "muted": ...}``,
``{"type": "error", "message": ...}`` and ``{"type": "closed"}``.
"""

import asyncio
import json
from uuid import uuid4

from fastapi import APIRouter, Depends, WebSocket
from starlette.websockets import WebSocketState

from pitchdeck.api.dependencies import get_voice_assistant
from pitchdeck.application.voice import (
    QueueAudioSource,
    VoiceAssistant,
    VoiceEvent,
    VoiceSession,
    pcm16_duration,
)
from pitchdeck.domain.exceptions import DomainError
from pitchdeck.infra.config.logging_config import bind_context, get_logger, unbind_context

router = APIRouter(tags=["voice"])
log = get_logger("api.voice")

START_FAILED_MESSAGE = "No se pudo iniciar la sesión de voz."


class WebSocketAudioSink:
    """Plays frames by handing them to the browser, paced at real time."""

    def __init__(self, websocket: WebSocket, sample_rate: int):
        self.websocket = websocket
        self.sample_rate = sample_rate

    @property
    def connected(self) -> bool:
        return self.websocket.client_state == WebSocketState.CONNECTED

    async def play(self, frame: bytes) -> None:
        await self.websocket.send_bytes(frame)
        await asyncio.sleep(pcm16_duration(frame, self.sample_rate))

    async def stop(self) -> None:
        if self.connected:
            await self.websocket.send_json({"type": "interrupted"})

    async def close(self) -> None:
        return None


async def _send(websocket: WebSocket, payload: dict) -> None:
    if websocket.client_state == WebSocketState.CONNECTED:
        await websocket.send_json(payload)


async def _read_client(
    websocket: WebSocket,
    source: QueueAudioSource,
    assistant: VoiceAssistant,
    session: VoiceSession,
) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
        data = message.get("bytes")
        if data:
            source.push(data)
            continue
        text = message.get("text")
        if not text:
            continue
        try:
            control = json.loads(text).get("type")
        except (ValueError, AttributeError):
            log.warning("voice.control.invalid")
            continue
        if control == "stop":
            return
        if control in ("mute", "unmute") and assistant.session is session:
            muted = assistant.set_muted(control == "mute")
            await _send(websocket, {"type": "muted", "muted": muted})


@router.websocket("/ws/voice")
async def voice(
    websocket: WebSocket,
    assistant: VoiceAssistant = Depends(get_voice_assistant),
) -> None:
    await websocket.accept()
    bind_context(voice_session=uuid4().hex[:12])
    try:
        await _serve(websocket, assistant)
    finally:
        unbind_context("voice_session")


async def _serve(websocket: WebSocket, assistant: VoiceAssistant) -> None:
    source = QueueAudioSource()
    sink = WebSocketAudioSink(websocket, websocket.app.state.settings.playback_sample_rate)

    async def forward(event: VoiceEvent) -> None:
        if event.kind == "transcript":
            await _send(websocket, {"type": "transcript", "text": event.data})
        elif event.kind == "error":
            await _send(websocket, {"type": "error", "message": str(event.data)})
        elif event.kind == "closed":
            await _send(websocket, {"type": "closed"})

    try:
        session = await assistant.start(source, sink, on_event=forward)
    except Exception as e:
        message = e.message if isinstance(e, DomainError) else START_FAILED_MESSAGE
        log.warning("voice.start_failed", error=str(e))
        await _send(websocket, {"type": "error", "message": message})
        await websocket.close()
        return

    reader = asyncio.create_task(
        _read_client(websocket, source, assistant, session), name="voice-client"
    )
    ended = asyncio.create_task(session.wait_closed(), name="voice-ended")
    try:
        await asyncio.wait({reader, ended}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (reader, ended):
            task.cancel()
        await asyncio.wait({reader, ended})
        if reader.done() and not reader.cancelled() and reader.exception():
            log.info("voice.client_gone", error=str(reader.exception()))
        if assistant.session is session:
            await assistant.stop()
        else:
            await session.close()
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()
