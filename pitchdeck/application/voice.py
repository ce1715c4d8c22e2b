"""
Realtime voice conversation.

Three resources are held while a session is live: the microphone
(``AudioSource``), the audio pipeline (``PlaybackQueue`` and its
``AudioSink``) and the backend session handle. ``VoiceSession.close`` releases
all three, each attempt independent of the others.

Playback is a FIFO with one consumer. A barge-in from the backend clears the
queue and cuts the frame that is currently playing.
"""

import asyncio
import struct
from collections import deque
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Deque,
    Iterable,
    List,
    Optional,
    Protocol,
)

from pitchdeck.infra import metrics
from pitchdeck.infra.config.logging_config import get_logger

logger = get_logger(__name__)

PLAYBACK_TASK_NAME = "voice-playback"


def float_to_pcm16(samples: Iterable[float]) -> bytes:
    """Convert float samples in [-1, 1] to little-endian signed 16-bit PCM."""
    out = []
    for s in samples:
        s = max(-1.0, min(1.0, float(s)))
        out.append(int(s * 0x8000) if s < 0 else int(s * 0x7FFF))
    return struct.pack(f"<{len(out)}h", *out)


def pcm16_duration(frame: bytes, sample_rate: int) -> float:
    """Seconds of mono PCM16 audio held in ``frame``."""
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    return (len(frame) // 2) / float(sample_rate)


@dataclass(frozen=True)
class VoiceEvent:
    # audio | interrupted | transcript | closed | error
    kind: str
    data: Any = None


class AudioSource(Protocol):
    def frames(self) -> AsyncIterator[bytes]: ...

    async def close(self) -> None: ...


class AudioSink(Protocol):
    async def play(self, frame: bytes) -> None: ...

    async def stop(self) -> None: ...

    async def close(self) -> None: ...


class RealtimeSession(Protocol):
    async def send_audio(self, frame: bytes) -> None: ...

    def events(self) -> AsyncIterator[VoiceEvent]: ...

    async def close(self) -> None: ...


class RealtimeConnector(Protocol):
    async def connect(self, instruction: str) -> RealtimeSession: ...


class QueueAudioSource:
    """Capture frames pushed in by a transport, yielded in push order."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Optional[bytes]] = asyncio.Queue()
        self._closed = False

    def push(self, frame: bytes) -> None:
        if not self._closed:
            self._queue.put_nowait(frame)

    async def frames(self) -> AsyncIterator[bytes]:
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)


class PlaybackQueue:
    def __init__(self, sink: AudioSink):
        self.sink = sink
        self._frames: Deque[bytes] = deque()
        self._drain: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def pending(self) -> int:
        return len(self._frames)

    @property
    def playing(self) -> bool:
        return self._drain is not None and not self._drain.done()

    def enqueue(self, frame: bytes) -> None:
        if self._closed:
            return
        self._frames.append(frame)
        if not self.playing:
            self._drain = asyncio.get_running_loop().create_task(
                self._drain_frames(), name=PLAYBACK_TASK_NAME
            )

    async def interrupt(self) -> None:
        """Drop queued frames, cut the current one and silence the sink."""
        dropped = await self._cancel()
        await self.sink.stop()
        logger.info("voice.playback.interrupted", dropped=dropped)

    async def close(self) -> None:
        """Stop draining and release the sink; the sink gets no stop signal."""
        self._closed = True
        try:
            dropped = await self._cancel()
            logger.info("voice.playback.closed", dropped=dropped)
        finally:
            await self.sink.close()

    async def _cancel(self) -> int:
        dropped = len(self._frames)
        self._frames.clear()
        task, self._drain = self._drain, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
        return dropped

    async def _drain_frames(self) -> None:
        try:
            while self._frames:
                frame = self._frames.popleft()
                try:
                    await self.sink.play(frame)
                except Exception as e:
                    logger.error("voice.playback.failed", error=str(e))
        finally:
            if self._drain is asyncio.current_task():
                self._drain = None


EventCallback = Callable[[VoiceEvent], Awaitable[None]]


class VoiceSession:
    def __init__(
        self,
        connector: RealtimeConnector,
        source: AudioSource,
        sink: AudioSink,
        instruction: str,
        on_event: Optional[EventCallback] = None,
    ):
        self.connector = connector
        self.source = source
        self.playback = PlaybackQueue(sink)
        self.instruction = instruction
        self.muted = False
        self.transcript: List[str] = []
        self._on_event = on_event
        self._session: Optional[RealtimeSession] = None
        self._tasks: List[asyncio.Task] = []
        self._started = False
        self._closed = False
        self._done = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        try:
            self._session = await self.connector.connect(self.instruction)
        except Exception as e:
            logger.error("voice.session.connect_failed", error=str(e))
            await self.close()
            raise

        loop = asyncio.get_running_loop()
        self._tasks = [
            loop.create_task(self._pump_capture(), name="voice-capture"),
            loop.create_task(self._receive_events(), name="voice-receive"),
        ]
        self._started = True
        metrics.VOICE_SESSIONS_ACTIVE.inc()
        logger.info("voice.session.started")

    async def wait_closed(self) -> None:
        await self._done.wait()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        current = asyncio.current_task()
        pending = [t for t in self._tasks if t is not current and not t.done()]
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.wait(pending)

        await self._release("microphone", self.source.close)
        await self._release("audio_pipeline", self.playback.close)
        if self._session is not None:
            await self._release("session", self._session.close)

        if self._started:
            metrics.VOICE_SESSIONS_ACTIVE.dec()
        self._done.set()
        logger.info("voice.session.closed")

    async def _release(self, resource: str, release: Callable[[], Awaitable[None]]) -> None:
        try:
            await release()
        except Exception as e:
            logger.error("voice.release_failed", resource=resource, error=str(e))

    async def _pump_capture(self) -> None:
        try:
            async for frame in self.source.frames():
                if self.muted:
                    continue
                await self._session.send_audio(frame)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("voice.capture.failed", error=str(e))
            await self.close()

    async def _receive_events(self) -> None:
        try:
            async for event in self._session.events():
                if event.kind == "audio":
                    self.playback.enqueue(event.data)
                elif event.kind == "interrupted":
                    await self.playback.interrupt()
                elif event.kind == "transcript":
                    self.transcript.append(event.data)
                elif event.kind == "error":
                    logger.error("voice.session.error", error=str(event.data))
                await self._emit(event)
                if event.kind in ("closed", "error"):
                    break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("voice.receive.failed", error=str(e))
        await self.close()

    async def _emit(self, event: VoiceEvent) -> None:
        if self._on_event is None or event.kind == "audio":
            return
        try:
            await self._on_event(event)
        except Exception as e:
            logger.warning("voice.event_callback_failed", kind=event.kind, error=str(e))


class VoiceAssistant:
    """Holds the single active voice session of the process."""

    def __init__(self, connector: RealtimeConnector, instruction: str):
        self.connector = connector
        self.instruction = instruction
        self.session: Optional[VoiceSession] = None

    @property
    def active(self) -> bool:
        return self.session is not None and not self.session.closed

    async def start(
        self,
        source: AudioSource,
        sink: AudioSink,
        on_event: Optional[EventCallback] = None,
    ) -> VoiceSession:
        await self.stop()
        session = VoiceSession(
            self.connector, source, sink, self.instruction, on_event=on_event
        )
        self.session = session
        try:
            await session.start()
        except Exception:
            if self.session is session:
                self.session = None
            raise
        return session

    def toggle_mute(self) -> bool:
        if not self.active:
            return False
        self.session.muted = not self.session.muted
        logger.info("voice.mute", muted=self.session.muted)
        return self.session.muted

    def set_muted(self, muted: bool) -> bool:
        if self.active and self.session.muted != muted:
            self.toggle_mute()
        return self.active and self.session.muted

    async def stop(self) -> None:
        session, self.session = self.session, None
        if session is not None:
            await session.close()
