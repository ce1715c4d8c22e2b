"""
Unit tests for voice playback, sessions and the assistant singleton.
"""

import asyncio
import struct

import pytest

from pitchdeck.application.voice import (
    PLAYBACK_TASK_NAME,
    PlaybackQueue,
    QueueAudioSource,
    VoiceAssistant,
    VoiceEvent,
    VoiceSession,
    float_to_pcm16,
    pcm16_duration,
)
from pitchdeck.domain.exceptions import ConfigurationError

from tests._helpers.fakes import FakeConnector, FakeSink, FakeSource

pytestmark = pytest.mark.asyncio


async def settle(times=10):
    for _ in range(times):
        await asyncio.sleep(0)


class TestPcm:
    async def test_float_to_pcm16_clamps(self):
        data = float_to_pcm16([2.0, -2.0, 0.0, 0.5])

        assert struct.unpack("<4h", data) == (32767, -32768, 0, 16383)

    async def test_duration_from_length_and_rate(self):
        assert pcm16_duration(b"\x00" * 48000, 24000) == 1.0
        assert pcm16_duration(b"", 24000) == 0.0
        with pytest.raises(ValueError):
            pcm16_duration(b"\x00\x00", 0)


class TestPlaybackQueue:
    async def test_frames_play_in_order(self):
        sink = FakeSink()
        queue = PlaybackQueue(sink)

        for frame in (b"a", b"b", b"c"):
            queue.enqueue(frame)
        await settle()

        assert sink.finished == [b"a", b"b", b"c"]
        assert queue.playing is False

    async def test_frame_enqueued_during_playback_waits(self):
        sink = FakeSink(blocking=True)
        queue = PlaybackQueue(sink)
        queue.enqueue(b"a")
        await settle()

        queue.enqueue(b"b")
        await settle()

        assert sink.started == [b"a"]
        assert queue.pending == 1
        sink.release()
        await settle()
        assert sink.finished == [b"a", b"b"]

    async def test_interrupt_clears_queue_and_stops_playback(self):
        sink = FakeSink(blocking=True)
        queue = PlaybackQueue(sink)
        queue.enqueue(b"a")
        await settle()
        queue.enqueue(b"b")
        queue.enqueue(b"c")
        assert queue.pending == 2

        await queue.interrupt()

        assert queue.pending == 0
        assert queue.playing is False
        assert sink.stops == 1
        assert sink.finished == []
        assert [t for t in asyncio.all_tasks() if t.get_name() == PLAYBACK_TASK_NAME and not t.done()] == []

    async def test_next_frame_after_interrupt_starts_fresh_drain(self):
        sink = FakeSink(blocking=True)
        queue = PlaybackQueue(sink)
        queue.enqueue(b"a")
        queue.enqueue(b"b")
        await settle()
        await queue.interrupt()

        queue.enqueue(b"d")
        await settle()

        assert sink.started == [b"a", b"d"]
        assert queue.playing is True
        sink.release()
        await settle()
        assert sink.finished == [b"d"]

    async def test_close_cuts_playback_without_stop_signal(self):
        sink = FakeSink(blocking=True)
        queue = PlaybackQueue(sink)
        queue.enqueue(b"a")
        queue.enqueue(b"b")
        await settle()

        await queue.close()

        assert queue.playing is False
        assert queue.pending == 0
        assert sink.stops == 0
        assert sink.closed is True
        assert sink.finished == []

    async def test_closed_queue_ignores_frames(self):
        sink = FakeSink()
        queue = PlaybackQueue(sink)
        await queue.close()

        queue.enqueue(b"a")
        await settle()

        assert sink.closed is True
        assert sink.started == []


class TestVoiceSession:
    async def test_capture_frames_sent_in_order_unless_muted(self):
        connector = FakeConnector()
        source = QueueAudioSource()
        session = VoiceSession(connector, source, FakeSink(), "instr")
        await session.start()

        source.push(b"1")
        source.push(b"2")
        await settle()
        session.muted = True
        source.push(b"3")
        await settle()
        session.muted = False
        source.push(b"4")
        await settle()

        assert connector.sessions[0].sent == [b"1", b"2", b"4"]
        assert connector.instructions == ["instr"]
        await session.close()

    async def test_inbound_audio_interrupt_and_transcript(self):
        connector = FakeConnector()
        sink = FakeSink(blocking=True)
        seen = []

        async def on_event(event):
            seen.append(event.kind)

        session = VoiceSession(connector, FakeSource(), sink, "instr", on_event=on_event)
        await session.start()
        backend = connector.sessions[0]

        backend.emit(VoiceEvent("audio", b"x"))
        backend.emit(VoiceEvent("audio", b"y"))
        backend.emit(VoiceEvent("audio", b"z"))
        backend.emit(VoiceEvent("transcript", "Hola"))
        await settle()
        assert sink.started == [b"x"]
        assert session.playback.pending == 2

        backend.emit(VoiceEvent("interrupted"))
        await settle()

        assert session.playback.pending == 0
        assert sink.stops == 1
        assert session.transcript == ["Hola"]
        assert seen == ["transcript", "interrupted"]
        await session.close()

    async def test_backend_close_tears_down(self):
        connector = FakeConnector()
        source = FakeSource()
        sink = FakeSink()
        session = VoiceSession(connector, source, sink, "instr")
        await session.start()

        connector.sessions[0].emit(VoiceEvent("closed"))
        await asyncio.wait_for(session.wait_closed(), 1)

        assert session.closed is True
        assert source.closed and sink.closed and connector.sessions[0].closed

    async def test_close_releases_everything_even_if_one_release_fails(self):
        connector = FakeConnector()
        source = FakeSource(fail_close=True)
        sink = FakeSink()
        session = VoiceSession(connector, source, sink, "instr")
        await session.start()

        await session.close()

        assert source.closed is True
        assert sink.closed is True
        assert connector.sessions[0].closed is True

    async def test_close_is_idempotent(self):
        connector = FakeConnector()
        sink = FakeSink()
        session = VoiceSession(connector, FakeSource(), sink, "instr")
        await session.start()

        await session.close()
        await session.close()

        assert sink.stops == 0
        assert sink.closed is True

    async def test_connect_failure_releases_and_raises(self):
        connector = FakeConnector(error=ConnectionError("refused"))
        source, sink = FakeSource(), FakeSink()
        session = VoiceSession(connector, source, sink, "instr")

        with pytest.raises(ConnectionError):
            await session.start()

        assert source.closed and sink.closed and session.closed
        assert sink.stops == 0


class TestVoiceAssistant:
    async def test_second_session_closes_the_first(self):
        connector = FakeConnector()
        assistant = VoiceAssistant(connector, "instr")
        first_source = FakeSource()

        first = await assistant.start(first_source, FakeSink())
        second = await assistant.start(FakeSource(), FakeSink())

        assert first.closed is True
        assert first_source.closed is True
        assert connector.sessions[0].closed is True
        assert assistant.session is second
        assert second.closed is False
        await assistant.stop()
        assert second.closed is True
        assert assistant.active is False

    async def test_mute_toggles_only_with_active_session(self):
        assistant = VoiceAssistant(FakeConnector(), "instr")
        assert assistant.toggle_mute() is False

        await assistant.start(FakeSource(), FakeSink())

        assert assistant.toggle_mute() is True
        assert assistant.set_muted(False) is False
        assert assistant.set_muted(True) is True
        await assistant.stop()

    async def test_failed_start_leaves_no_active_session(self):
        assistant = VoiceAssistant(
            FakeConnector(error=ConfigurationError("sin credencial")), "instr"
        )

        with pytest.raises(ConfigurationError):
            await assistant.start(FakeSource(), FakeSink())

        assert assistant.session is None
