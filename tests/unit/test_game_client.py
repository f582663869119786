"""Unit tests for the terminal client's line handling."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from client.main import GameClient
from server import protocol


class FakeWriter:
    """Collects bytes the client sends."""

    def __init__(self):
        self.data = b""
        self.closed = False

    def write(self, data):
        self.data += data

    async def drain(self):
        pass

    def close(self):
        self.closed = True

    def is_closing(self):
        return self.closed


def server_says(*lines):
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data(f"{line}\r\n".encode("utf-8"))
    reader.feed_eof()
    return reader


class TestGameClient:
    """Test GameClient against scripted server output."""

    @pytest.mark.asyncio
    async def test_answers_prompt_with_chosen_number(self):
        reader = server_says(
            "n15 v0.1.0",
            "opponent:",
            "you:",
            "available: 1 2 3 4 5 6 7 8 9",
            protocol.PROMPT,
            "you picked 5",
            "you win",
        )
        writer = FakeWriter()
        ask = AsyncMock(return_value="5")

        result = await GameClient(reader, writer, ask=ask).run()

        ask.assert_awaited_once_with([1, 2, 3, 4, 5, 6, 7, 8, 9])
        assert writer.data == b"5\n"
        assert result == "you win"
        assert writer.closed

    @pytest.mark.asyncio
    async def test_menu_follows_latest_available_line(self):
        reader = server_says(
            "available: 1 2 3 4 5 6 7 8 9",
            "opponent picked 5",
            "available: 1 2 3 4 6 7 8 9",
            protocol.PROMPT,
        )
        ask = AsyncMock(return_value="2")

        client = GameClient(reader, FakeWriter(), ask=ask)
        result = await client.run()

        ask.assert_awaited_once_with([1, 2, 3, 4, 6, 7, 8, 9])
        assert result is None

    @pytest.mark.asyncio
    async def test_cancel_closes_connection(self):
        reader = server_says("available: 1 2", protocol.PROMPT, "you:")
        writer = FakeWriter()

        result = await GameClient(reader, writer, ask=AsyncMock(return_value=None)).run()

        assert writer.closed
        assert writer.data == b""
        assert result is None
