"""
Tests for core.streaming and core.orchestrator against /bin/sh fake engines.

Covers:
  - prompt delivery, model id extraction and chunk forwarding
  - the fixed child environment
  - exactly one completion for success, spawn failure, non-zero exit and cancel
  - lossy decoding of invalid bytes
"""

import asyncio

import pytest

from core.engine import InferenceEngine
from core.orchestrator import Orchestrator
from core.streaming import CANCELLED_TEXT, StreamingSession


class Recorder:
    def __init__(self):
        self.chunks: list[str] = []
        self.completions: list[str] = []
        self.started = 0
        self.first_chunk = asyncio.Event()

    def on_chunk(self, text):
        self.chunks.append(text)
        self.first_chunk.set()

    def on_complete(self, text):
        self.completions.append(text)

    def on_started(self):
        self.started += 1


async def _stream(config, prompt="hello", model="llama3:8b"):
    rec = Recorder()
    session = StreamingSession(config)
    await asyncio.wait_for(
        session.start(prompt, model, rec.on_chunk, rec.on_complete, rec.on_started), timeout=10
    )
    return rec


class TestStreamingSession:
    @pytest.mark.asyncio
    async def test_streams_response(self, fake_engine):
        rec = await _stream(fake_engine(), model="llama3:8b  365c0bd3c000  4.7 GB  2 days ago")
        expected = "<think>pondering</think>you said: hello (llama3:8b)\n"
        assert "".join(rec.chunks) == expected
        assert rec.completions == [expected]
        assert rec.started == 1

    @pytest.mark.asyncio
    async def test_child_gets_fixed_environment(self, fake_engine, monkeypatch):
        monkeypatch.setenv("FLEECE_SECRET", "leak")
        config = fake_engine('#!/bin/sh\nread prompt\nprintf "%s|%s|%s" "$HOME" "$PATH" "$FLEECE_SECRET"\n')
        rec = await _stream(config)
        assert rec.completions == [f"{config.home}|{config.process_env()['PATH']}|"]

    @pytest.mark.asyncio
    async def test_spawn_failure_completes_once(self, missing_engine):
        rec = await _stream(missing_engine)
        assert rec.chunks == []
        assert rec.started == 0
        assert len(rec.completions) == 1
        assert rec.completions[0].startswith("Error: could not start")

    @pytest.mark.asyncio
    async def test_non_zero_exit_keeps_partial_output(self, fake_engine):
        config = fake_engine("#!/bin/sh\nread prompt\nprintf 'partial answer'\necho 'model exploded' >&2\nexit 3\n")
        rec = await _stream(config)
        assert len(rec.completions) == 1
        text = rec.completions[0]
        assert text.startswith("partial answer\n\nError: ")
        assert "status 3" in text
        assert "model exploded" in text

    def test_one_shot_send_keeps_partial_output(self, fake_engine):
        config = fake_engine("#!/bin/sh\nread prompt\nprintf 'partial answer'\necho 'model exploded' >&2\nexit 3\n")
        reply = InferenceEngine(config).send_message("hello", "m")
        assert reply.startswith("partial answer\n\nError: ")
        assert "status 3" in reply
        assert "model exploded" in reply

    @pytest.mark.asyncio
    async def test_invalid_bytes_are_replaced(self, fake_engine):
        rec = await _stream(fake_engine("#!/bin/sh\nread prompt\nprintf '\\377ok'\n"))
        assert rec.completions == ["\ufffdok"]

    @pytest.mark.asyncio
    async def test_cancel_terminates_and_completes_once(self, fake_engine):
        config = fake_engine("#!/bin/sh\nread prompt\nprintf 'thinking'\nexec sleep 30\n")
        rec = Recorder()
        session = StreamingSession(config)
        task = asyncio.create_task(session.start("hi", "m", rec.on_chunk, rec.on_complete))
        await asyncio.wait_for(rec.first_chunk.wait(), timeout=10)
        assert session.running
        session.cancel()
        await asyncio.wait_for(task, timeout=10)
        assert rec.completions == [f"thinking\n\n{CANCELLED_TEXT}"]
        assert not session.running

    @pytest.mark.asyncio
    async def test_session_is_single_use(self, fake_engine):
        rec = Recorder()
        session = StreamingSession(fake_engine())
        await session.start("hi", "m", rec.on_chunk, rec.on_complete)
        with pytest.raises(RuntimeError):
            await session.start("hi", "m", rec.on_chunk, rec.on_complete)


class TestOrchestrator:
    @pytest.mark.asyncio
    async def test_emits_events_in_order(self, fake_engine):
        q = asyncio.Queue()
        orch = Orchestrator(fake_engine(), q)
        await asyncio.wait_for(orch.run("hey", "m:1"), timeout=10)

        events = []
        while not q.empty():
            events.append(q.get_nowait())
        types = [ev['type'] for ev in events]
        assert types[0] == 'started'
        assert types[-1] == 'done'
        assert set(types[1:-1]) <= {'chunk'}
        assert "".join(ev['text'] for ev in events if ev['type'] == 'chunk') == events[-1]['text']
        assert orch.session is None

    def test_cancel_without_session(self, fake_engine):
        assert Orchestrator(fake_engine(), asyncio.Queue()).cancel() is False
