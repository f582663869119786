"""Terminal client for the n15 server.

The server speaks plain lines, so telnet works too; this client adds
colored output and a menu of the numbers still available.
"""

import argparse
import asyncio
from typing import List, Optional

from client import ui
from server import protocol

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 10015


class GameClient:
    """Reads server lines, shows them, and answers prompts."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter, ask=ui.ask_number):
        self._reader = reader
        self._writer = writer
        self._ask = ask
        self.available: List[int] = []
        self.result: Optional[str] = None

    async def run(self) -> Optional[str]:
        """Play until the server closes the connection.

        Returns:
            The final result line, or None if the game did not finish.
        """
        try:
            while True:
                data = await self._reader.readline()
                if not data:
                    break
                line = data.decode("utf-8", errors="replace").rstrip("\r\n")
                await self.handle_line(line)
                if self.result is None and self._writer.is_closing():
                    break
        finally:
            self._writer.close()
        return self.result

    async def handle_line(self, line: str) -> None:
        ui.print_line(line)
        available = protocol.parse_available(line)
        if available is not None:
            self.available = available
        elif line in protocol.RESULT_LINES:
            self.result = line
        elif line == protocol.PROMPT:
            answer = await self._ask(self.available)
            if answer is None:
                self._writer.close()
                return
            self._writer.write(f"{answer}\n".encode("utf-8"))
            await self._writer.drain()


async def play(host: str, port: int) -> Optional[str]:
    reader, writer = await asyncio.open_connection(host, port)
    return await GameClient(reader, writer).run()


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="n15 terminal client")
    parser.add_argument("--host", default=DEFAULT_HOST, help="Server host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Server port")
    args = parser.parse_args(argv)

    try:
        result = asyncio.run(play(args.host, args.port))
    except OSError as e:
        ui.console.print(f"Could not reach {args.host}:{args.port}: {e}", style="red")
        return 1
    except KeyboardInterrupt:
        return 130
    return 0 if result is not None else 1


if __name__ == "__main__":
    exit(main())
