"""
Server entry point for n15, the game of 15 over a line protocol.

This module provides:
- The connection acceptor for plain TCP (telnet) and, optionally, WebSockets
- Hand-off of every new connection to the Matchmaker (pairs mode) or
  straight into a game against the machine (solo mode)
- Command line and settings file handling
"""

import argparse
import asyncio
import logging
import random
import socket
from typing import Optional

import websockets
from rich.logging import RichHandler

from game.config_loader import ConfigLoader
from game.turns import Seat
from server import protocol
from server.connection import MAX_LINE_BYTES, LineChannel, StreamChannel, WebSocketChannel
from server.matchmaker import Matchmaker
from server.session import MachineParticipant, MatchSession, Participant

# Handshake failures from TCP probes are not interesting at INFO.
logging.getLogger("websockets").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

MODES = ("pairs", "solo")


class GameServer:
    """Accepts connections and hands them to the matchmaker.

    Handles:
    - Greeting each connection with the version banner
    - Pairing (pairs mode) or a machine opponent (solo mode)
    - Keeping each connection's handler alive until its session closes it
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 10015,
                 ws_port: Optional[int] = None, mode: str = "pairs",
                 matchmaker: Optional[Matchmaker] = None):
        if mode not in MODES:
            raise ValueError(f"unknown mode {mode!r}, expected one of {MODES}")
        self.host = host
        self.port = port
        self.ws_port = ws_port
        self.mode = mode
        self.matchmaker = matchmaker or Matchmaker()

    async def start(self):
        """Start listening and serve forever."""
        tcp_server = await asyncio.start_server(
            self.handle_tcp_connection, self.host, self.port, limit=MAX_LINE_BYTES
        )
        logger.info("n15 server (%s mode) listening on %s:%d", self.mode, self.host, self.port)
        async with tcp_server:
            if self.ws_port is None:
                await tcp_server.serve_forever()
                return
            async with websockets.serve(self.handle_websocket_connection, self.host, self.ws_port):
                logger.info("WebSocket endpoint on ws://%s:%d", self.host, self.ws_port)
                await tcp_server.serve_forever()

    async def handle_tcp_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        await self.handle_channel(StreamChannel(reader, writer))

    async def handle_websocket_connection(self, websocket):
        await self.handle_channel(WebSocketChannel(websocket))

    async def handle_channel(self, channel: LineChannel):
        """Greet a new connection, route it, and hold it open until its session ends."""
        logger.info("New connection: %s", channel.name)
        try:
            await channel.send_line(protocol.banner_message())
        except ConnectionError as e:
            logger.info("Connection %s dropped before greeting: %s", channel.name, e)
            await channel.close()
            return

        if self.mode == "solo":
            self.matchmaker.start(self.solo_session(channel))
        else:
            await self.matchmaker.offer(channel)
        await channel.wait_closed()

    @staticmethod
    def solo_session(channel: LineChannel) -> MatchSession:
        """A match between one connection and the machine; the first mover is random."""
        first_seat = random.choice([Seat.A, Seat.B])
        return MatchSession(Participant(Seat.A, channel), MachineParticipant(Seat.B),
                            first_seat=first_seat)


def check_port_available(host: str, port: int) -> bool:
    """Check if a port is available for binding.

    Returns True if available, False if in use by another process.
    Uses SO_REUSEADDR to allow binding to ports in TIME_WAIT state.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host if host != "0.0.0.0" else "127.0.0.1", port))
        return True
    except OSError:
        return False
    finally:
        sock.close()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="n15 game server")
    parser.add_argument("--config-dir", default=None, help="Directory holding server_settings.json")
    parser.add_argument("--host", default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="TCP port for telnet clients")
    parser.add_argument("--ws-port", type=int, default=None, help="Also serve WebSocket clients on this port")
    parser.add_argument("--mode", choices=MODES, default=None,
                        help="pairs: match connections two at a time; solo: play the machine")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = ConfigLoader(args.config_dir)

    host = args.host or config.get("server", "host")
    port = args.port if args.port is not None else config.get("server", "port")
    ws_port = args.ws_port if args.ws_port is not None else config.get("server", "websocket_port")
    mode = args.mode or config.get("server", "mode")
    configure_logging(args.log_level or config.get("logging", "level", default="INFO"))

    for p in filter(None, (port, ws_port)):
        if not check_port_available(host, p):
            logger.error("Port %d is already in use by another application.", p)
            return 1

    server = GameServer(host=host, port=port, ws_port=ws_port, mode=mode)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


if __name__ == "__main__":
    exit(main())
