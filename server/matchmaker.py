"""
Matchmaker: pairs waiting connections two at a time.

Manages the lifecycle of match sessions, including:
- Queueing connections until an opponent arrives
- Starting a session on its own task as soon as a pair exists
- Tracking running sessions and logging ones that crash
"""

import asyncio
import logging
import threading
from collections import deque
from typing import Callable, Deque, List, Optional, Set, Tuple

from server import protocol
from server.connection import LineChannel
from server.session import MatchSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[LineChannel, LineChannel], MatchSession]


class Matchmaker:
    """Process-wide registry of connections waiting for a match.

    ``offer`` may be called from any accept loop; the enqueue-and-pair step
    runs under a lock so two arrivals can never both see a lone waiter.
    """

    def __init__(self, session_factory: SessionFactory = MatchSession.from_channels):
        self._session_factory = session_factory
        self._lock = threading.Lock()
        self._waiting: Deque[LineChannel] = deque()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def waiting(self) -> int:
        """Number of connections waiting for an opponent."""
        with self._lock:
            return len(self._waiting)

    @property
    def active_sessions(self) -> int:
        """Number of match sessions still running."""
        return len(self._tasks)

    def _enqueue(self, channel: LineChannel) -> Tuple[Optional[Tuple[LineChannel, LineChannel]], List[LineChannel]]:
        """Add a connection and take the oldest pair, if there is one.

        Returns:
            The pair to match (or None) and any waiters that hung up.
        """
        with self._lock:
            dropped = [c for c in self._waiting if not c.is_open()]
            for c in dropped:
                self._waiting.remove(c)
            self._waiting.append(channel)
            if len(self._waiting) < 2:
                return None, dropped
            return (self._waiting.popleft(), self._waiting.popleft()), dropped

    async def offer(self, channel: LineChannel) -> Optional[MatchSession]:
        """Queue a connection, starting a match if an opponent is waiting.

        Returns as soon as the session is scheduled; the match itself runs
        on its own task.

        Returns:
            The started session, or None if the connection is now waiting.
        """
        pair, dropped = self._enqueue(channel)
        if pair is None:
            logger.info("%s is waiting for an opponent", channel.name)
            try:
                await channel.send_line(protocol.WAITING_FOR_OPPONENT)
            except ConnectionError as e:
                # dropped from the queue on the next offer
                logger.debug("Could not notify %s: %s", channel.name, e)

        for stale in dropped:
            logger.info("%s left the queue", stale.name)
            await stale.close()

        if pair is None:
            return None

        session = self._session_factory(*pair)
        logger.info("Paired %s with %s (session %s)", pair[0].name, pair[1].name, session.session_id)
        self.start(session)
        return session

    def start(self, session: MatchSession) -> asyncio.Task:
        """Run a session on its own task and track it until it finishes."""
        task = asyncio.get_running_loop().create_task(session.run(), name=f"session-{session.session_id}")
        self._tasks.add(task)
        task.add_done_callback(self._session_done)
        return task

    def _session_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s crashed", task.get_name(), exc_info=exc)

    async def shutdown(self) -> None:
        """Cancel running sessions and wait for them to finish."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
