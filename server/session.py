"""
Match sessions: one game of 15 between two participants.

A session owns its TurnCoordinator and both participants outright. Only the
task running ``MatchSession.run()`` touches the match state, so there is no
locking inside a match. Each turn the active participant is prompted and
awaited for exactly one line; the other participant only receives updates.
"""

import logging
import random
import uuid
from typing import Dict, Optional

from game.errors import InvalidMove
from game.machine import heuristic_choice
from game.turns import MoveResult, Outcome, Seat, TurnCoordinator
from server import protocol
from server.connection import LineChannel

logger = logging.getLogger(__name__)


class ParticipantDisconnected(Exception):
    """A participant's connection failed while reading or writing."""

    def __init__(self, participant: "Participant", cause: Optional[BaseException] = None):
        super().__init__(f"{participant.name} disconnected: {cause}")
        self.participant = participant
        self.cause = cause


class Participant:
    """One side of a match, backed by a line channel."""

    def __init__(self, seat: Seat, channel: Optional[LineChannel], name: Optional[str] = None):
        self.seat = seat
        self.channel = channel
        self.name = name or getattr(channel, "name", seat.value)

    async def send(self, text: str) -> None:
        try:
            await self.channel.send_line(text)
        except ConnectionError as e:
            raise ParticipantDisconnected(self, e) from e

    async def request_move(self, coordinator: TurnCoordinator) -> str:
        """Wait for the participant's next line."""
        try:
            return await self.channel.receive_line()
        except ConnectionError as e:
            raise ParticipantDisconnected(self, e) from e

    async def close(self) -> None:
        await self.channel.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.seat.value} {self.name}>"


class MachineParticipant(Participant):
    """Computer opponent for solo games. It never disconnects."""

    def __init__(self, seat: Seat, name: str = "the machine", rng: Optional[random.Random] = None):
        super().__init__(seat, channel=None, name=name)
        self._rng = rng

    async def send(self, text: str) -> None:
        pass

    async def request_move(self, coordinator: TurnCoordinator) -> str:
        return str(heuristic_choice(coordinator.pool, self._rng))

    async def close(self) -> None:
        pass


class MatchSession:
    """Runs one match from pairing to teardown.

    Args:
        first: Participant in seat A; moves first unless ``first_seat`` says otherwise.
        second: Participant in seat B.
        first_seat: Seat that makes the opening move.
    """

    def __init__(self, first: Participant, second: Participant, first_seat: Seat = Seat.A):
        if first.seat is not Seat.A or second.seat is not Seat.B:
            raise ValueError("participants must occupy seats A and B")
        self.session_id = str(uuid.uuid4())[:8]
        self.participants: Dict[Seat, Participant] = {Seat.A: first, Seat.B: second}
        self.coordinator = TurnCoordinator(first=first_seat)
        self.forfeited_by: Optional[Participant] = None

    @classmethod
    def from_channels(cls, first: LineChannel, second: LineChannel) -> "MatchSession":
        """Pair two connections, first-offered in seat A."""
        return cls(Participant(Seat.A, first), Participant(Seat.B, second))

    @property
    def outcome(self) -> Outcome:
        return self.coordinator.outcome

    def opponent_of(self, participant: Participant) -> Participant:
        return self.participants[participant.seat.other]

    async def run(self) -> Outcome:
        """Play the match to completion and close both connections.

        Returns:
            The terminal outcome (a forfeit shows up as the survivor winning).
        """
        a, b = self.participants[Seat.A], self.participants[Seat.B]
        logger.info("Session %s started: %s vs %s", self.session_id, a.name, b.name)
        try:
            try:
                await self._announce_match()
                while not self.coordinator.is_over:
                    await self._play_turn()
            except ParticipantDisconnected as e:
                self._forfeit(e.participant)
            await self._announce_result()
        finally:
            await self._close_all()
        logger.info("Session %s finished after %d moves: %s",
                    self.session_id, self.coordinator.moves, self.outcome.value)
        return self.outcome

    async def _announce_match(self) -> None:
        first = self.coordinator.active
        for participant in self.participants.values():
            opponent = self.opponent_of(participant)
            await participant.send(protocol.matched_message(opponent.name, participant.seat is first))

    async def _send_state(self, participant: Participant) -> None:
        coordinator = self.coordinator
        for line in protocol.state_lines(
            own=coordinator.hand(participant.seat),
            opponent=coordinator.hand(participant.seat.other),
            available=coordinator.pool,
        ):
            await participant.send(line)

    async def _play_turn(self) -> None:
        """Prompt the active participant until it makes a valid move.

        Input is only read from the active participant. Lines typed during
        the opponent's turn stay buffered on the connection and are taken
        as moves once that participant is prompted.
        """
        active = self.participants[self.coordinator.active]
        waiting = self.opponent_of(active)

        await self._send_state(waiting)
        await waiting.send(protocol.WAIT_NOTICE)

        await self._send_state(active)
        await active.send(protocol.PROMPT)
        while True:
            line = await active.request_move(self.coordinator)
            try:
                result = self.coordinator.submit(active.seat, line)
            except InvalidMove as e:
                logger.debug("Session %s: %s rejected: %s", self.session_id, active.name, e)
                await active.send(protocol.retry_message(e.reason))
                await self._send_state(active)
                await active.send(protocol.PROMPT)
                continue
            break

        await self._announce_move(result)

    async def _announce_move(self, result: MoveResult) -> None:
        for participant in self.participants.values():
            await participant.send(protocol.picked_message(result.number, participant.seat is result.seat))

    def _forfeit(self, participant: Participant) -> None:
        if self.coordinator.is_over:
            # decided by the last move; the dropped side just misses the result
            logger.debug("Session %s: %s left after the final move", self.session_id, participant.name)
            return
        self.forfeited_by = participant
        self.coordinator.forfeit(participant.seat)
        logger.info("Session %s: %s disconnected, %s wins by forfeit",
                    self.session_id, participant.name, self.opponent_of(participant).name)

    def _result_for(self, seat: Seat) -> protocol.Result:
        winner = self.coordinator.winner
        if winner is None:
            return protocol.Result.DRAW
        return protocol.Result.WIN if winner is seat else protocol.Result.LOSE

    async def _announce_result(self) -> None:
        """Tell each participant how the match ended.

        The match is already decided here, so a write failure only ends
        delivery to that participant.
        """
        winning = protocol.winning_message(self.coordinator.winning_triple)
        for participant in self.participants.values():
            if participant is self.forfeited_by:
                lines = []
            elif self.forfeited_by is not None:
                lines = [protocol.OPPONENT_DISCONNECTED]
            else:
                lines = [winning] if winning else []
            lines.append(self._result_for(participant.seat).value)
            try:
                for line in lines:
                    await participant.send(line)
            except ParticipantDisconnected as e:
                logger.debug("Session %s: result not delivered: %s", self.session_id, e)

    async def _close_all(self) -> None:
        for participant in self.participants.values():
            try:
                await participant.close()
            except ConnectionError as e:
                logger.debug("Session %s: error closing %s: %s", self.session_id, participant.name, e)
