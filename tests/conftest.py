"""Shared test fixtures for n15 tests."""
import asyncio
import random
from typing import List, Optional

import pytest

from server.connection import MAX_LINE_BYTES, LineChannel, StreamChannel


@pytest.fixture(autouse=True)
def deterministic_random():
    """Seed random for reproducible tests."""
    random.seed(42)
    yield
    random.seed()


class ScriptedChannel(LineChannel):
    """In-memory LineChannel that replays scripted input lines.

    When the script runs out the channel behaves like a dropped connection,
    unless ``hang`` is set, in which case reads wait until the channel is
    closed.
    """

    def __init__(self, name: str, lines: Optional[List[str]] = None,
                 hang: bool = False, fail_sends_after: Optional[int] = None):
        self.name = name
        self.incoming: List[str] = list(lines or [])
        self.sent: List[str] = []
        self.hang = hang
        self.fail_sends_after = fail_sends_after
        self.closed = False
        self._closed_event = asyncio.Event()

    async def send_line(self, text: str) -> None:
        if self.closed:
            raise ConnectionError(f"{self.name} is closed")
        if self.fail_sends_after is not None and len(self.sent) >= self.fail_sends_after:
            raise ConnectionResetError(f"{self.name} reset")
        self.sent.append(text)

    async def receive_line(self) -> str:
        if self.closed:
            raise ConnectionError(f"{self.name} is closed")
        if self.incoming:
            return self.incoming.pop(0)
        if self.hang:
            await self._closed_event.wait()
        raise ConnectionError(f"{self.name} dropped")

    async def close(self) -> None:
        self.closed = True
        self._closed_event.set()

    async def wait_closed(self) -> None:
        await self._closed_event.wait()

    def is_open(self) -> bool:
        return not self.closed


@pytest.fixture
def channel_factory():
    """Factory fixture to create scripted in-memory channels."""
    def _create(name: str = "player", lines: Optional[List[str]] = None, **kwargs) -> ScriptedChannel:
        return ScriptedChannel(name, lines, **kwargs)

    return _create


class CollectingWriter:
    """Write side of a stream that keeps everything written to it."""

    def __init__(self):
        self.data = b""
        self.closing = False

    def write(self, data: bytes) -> None:
        self.data += data

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closing = True

    async def wait_closed(self) -> None:
        pass

    def is_closing(self) -> bool:
        return self.closing


@pytest.fixture
def stream_channel_factory():
    """Factory fixture for a StreamChannel over an in-memory reader.

    Returns the channel and its reader, so tests can feed raw bytes.
    """
    def _create(name: str = "stream", data: bytes = b""):
        reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
        if data:
            reader.feed_data(data)
        return StreamChannel(reader, CollectingWriter(), name=name), reader

    return _create
