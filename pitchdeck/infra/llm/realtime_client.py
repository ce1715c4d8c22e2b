"""
OpenAI Realtime adapter for voice sessions.

Translates between raw PCM16 frames and the realtime event protocol; the
voice application layer only sees ``VoiceEvent`` values.
"""

import base64
from typing import Any, AsyncIterator, Dict, Optional

from openai import AsyncOpenAI

from pitchdeck.application.voice import VoiceEvent
from pitchdeck.infra.config.logging_config import get_logger
from pitchdeck.infra.config.settings import Settings

logger = get_logger(__name__)


def map_server_event(event: Any) -> Optional[VoiceEvent]:
    """Map one realtime server event to a ``VoiceEvent``; ``None`` to ignore it."""
    kind = getattr(event, "type", "")
    if kind == "response.audio.delta":
        return VoiceEvent("audio", base64.b64decode(event.delta))
    if kind == "input_audio_buffer.speech_started":
        return VoiceEvent("interrupted")
    if kind == "response.audio_transcript.delta":
        return VoiceEvent("transcript", event.delta)
    if kind == "error":
        error = getattr(event, "error", None)
        return VoiceEvent("error", getattr(error, "message", None) or str(error))
    return None


class OpenAIRealtimeSession:
    def __init__(self, connection: Any):
        self._connection = connection

    async def send_audio(self, frame: bytes) -> None:
        await self._connection.input_audio_buffer.append(
            audio=base64.b64encode(frame).decode("ascii")
        )

    async def events(self) -> AsyncIterator[VoiceEvent]:
        async for event in self._connection:
            mapped = map_server_event(event)
            if mapped is not None:
                yield mapped
        yield VoiceEvent("closed")

    async def close(self) -> None:
        await self._connection.close()


class OpenAIRealtimeConnector:
    """Opens realtime sessions; the credential is checked on every connect."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.require_api_key(),
                base_url=self.settings.openai_base_url,
            )
        return self._client

    def session_config(self, instruction: str) -> Dict[str, Any]:
        return {
            "instructions": instruction,
            "voice": self.settings.realtime_voice,
            "modalities": ["audio", "text"],
            "input_audio_format": "pcm16",
            "output_audio_format": "pcm16",
            "turn_detection": {"type": "server_vad"},
        }

    async def connect(self, instruction: str) -> OpenAIRealtimeSession:
        model = self.settings.realtime_model
        connection = await self.client.beta.realtime.connect(model=model).enter()
        try:
            await connection.session.update(session=self.session_config(instruction))
        except Exception:
            await connection.close()
            raise
        logger.info("voice.backend.connected", model=model)
        return OpenAIRealtimeSession(connection)
