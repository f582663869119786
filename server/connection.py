"""Line-oriented connections used by match sessions.

Sessions talk to players through a ``LineChannel``: send a line, wait for a
line, close. Transport failures (reset, EOF, closed websocket) surface as
``ConnectionError`` so the session can treat every transport the same way.
"""

import asyncio
import logging
from typing import Optional

from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)

# Upper bound on a single input line; longer lines are discarded.
MAX_LINE_BYTES = 1024


class LineChannel:
    """A connection that exchanges text lines with one player."""

    name: str = "channel"

    async def send_line(self, text: str) -> None:
        raise NotImplementedError

    async def receive_line(self) -> str:
        """Wait for the next line. Raises ConnectionError on disconnect."""
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError

    async def wait_closed(self) -> None:
        """Return once the channel has been closed by its owner."""
        raise NotImplementedError

    def is_open(self) -> bool:
        """False once the channel is closed or the peer has hung up."""
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class StreamChannel(LineChannel):
    """Plain TCP connection, as used by telnet or netcat."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 name: Optional[str] = None):
        self._reader = reader
        self._writer = writer
        self._closed = asyncio.Event()
        if name is None:
            peer = writer.get_extra_info("peername")
            name = f"{peer[0]}:{peer[1]}" if peer else "tcp"
        self.name = name

    async def send_line(self, text: str) -> None:
        if self._closed.is_set():
            raise ConnectionError(f"{self.name} is closed")
        self._writer.write(f"{text}\r\n".encode("utf-8"))
        await self._writer.drain()

    async def receive_line(self) -> str:
        """Wait for the next line.

        An overlong line is discarded up to its newline and comes back as an
        empty string, which the game rejects as a bad choice.
        """
        if self._closed.is_set():
            raise ConnectionError(f"{self.name} is closed")
        try:
            data = await self._reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            if not e.partial:
                raise ConnectionError(f"{self.name} closed the connection") from e
            data = e.partial
        except asyncio.LimitOverrunError as e:
            logger.debug("%s sent an overlong line", self.name)
            await self._discard_line(e.consumed)
            return ""
        if len(data) > MAX_LINE_BYTES:
            logger.debug("%s sent an overlong line", self.name)
            return ""
        return data.decode("utf-8", errors="replace").rstrip("\r\n")

    async def _discard_line(self, pending: int) -> None:
        """Drop buffered input through the next newline."""
        while True:
            await self._reader.read(pending)
            try:
                await self._reader.readuntil(b"\n")
                return
            except asyncio.IncompleteReadError as e:
                raise ConnectionError(f"{self.name} closed the connection") from e
            except asyncio.LimitOverrunError as e:
                pending = e.consumed

    async def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except ConnectionError as e:
            logger.debug("Error closing %s: %s", self.name, e)

    async def wait_closed(self) -> None:
        await self._closed.wait()

    def is_open(self) -> bool:
        return not (self._closed.is_set() or self._reader.at_eof() or self._writer.is_closing())


class WebSocketChannel(LineChannel):
    """WebSocket connection where each text frame carries one line."""

    def __init__(self, websocket, name: Optional[str] = None):
        self._websocket = websocket
        self._closed = asyncio.Event()
        if name is None:
            peer = getattr(websocket, "remote_address", None)
            name = f"ws://{peer[0]}:{peer[1]}" if peer else "websocket"
        self.name = name

    async def send_line(self, text: str) -> None:
        if self._closed.is_set():
            raise ConnectionError(f"{self.name} is closed")
        try:
            await self._websocket.send(text)
        except ConnectionClosed as e:
            raise ConnectionError(f"{self.name} closed the connection") from e

    async def receive_line(self) -> str:
        if self._closed.is_set():
            raise ConnectionError(f"{self.name} is closed")
        try:
            message = await self._websocket.recv()
        except ConnectionClosed as e:
            raise ConnectionError(f"{self.name} closed the connection") from e
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")
        return message.rstrip("\r\n")

    async def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        await self._websocket.close()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    def is_open(self) -> bool:
        return not self._closed.is_set()
