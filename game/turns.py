"""Turn coordinator: the state machine for one game of 15.

Turns strictly alternate between seat A and seat B. A submitted move is
validated, applied to the pool and the mover's hand, and checked for a win
in a single call, so no caller ever observes a number that has left the
pool without landing in a hand.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from game.errors import GameFinished, InvalidMove, NotYourTurn
from game.outcome import is_draw, winning_triple
from game.pool import Hand, Pool

# Plain ASCII digits with an optional leading plus sign.
_MOVE_PATTERN = re.compile(r"\+?[0-9]+")


class Seat(Enum):
    """The two sides of a match. Seat A is the first-paired connection."""
    A = "A"
    B = "B"

    @property
    def other(self) -> "Seat":
        return Seat.B if self is Seat.A else Seat.A


class TurnState(Enum):
    """Coordinator states."""
    AWAITING_A = "awaiting_a"
    AWAITING_B = "awaiting_b"
    GAME_OVER = "game_over"


class Outcome(Enum):
    """Terminal flag of a match."""
    IN_PROGRESS = "in_progress"
    A_WON = "a_won"
    B_WON = "b_won"
    DRAW = "draw"


_AWAITING = {Seat.A: TurnState.AWAITING_A, Seat.B: TurnState.AWAITING_B}
_WON = {Seat.A: Outcome.A_WON, Seat.B: Outcome.B_WON}


@dataclass(frozen=True)
class MoveResult:
    """What happened when a valid move was applied."""
    seat: Seat
    number: int
    outcome: Outcome
    triple: Optional[Tuple[int, ...]] = None


def parse_move(move: Union[int, str]) -> int:
    """Turn a raw move (an int or a line of text) into an integer.

    Raises:
        InvalidMove: with reason ``bad choice`` if the text is not a
            non-negative decimal number.
    """
    if isinstance(move, bool):
        raise InvalidMove(InvalidMove.BAD_CHOICE, move)
    if isinstance(move, int):
        return move
    text = str(move).strip()
    if not _MOVE_PATTERN.fullmatch(text):
        raise InvalidMove(InvalidMove.BAD_CHOICE, move)
    return int(text)


class TurnCoordinator:
    """Drives whose turn it is and applies moves to the pool and hands."""

    def __init__(self, first: Seat = Seat.A):
        self.pool = Pool()
        self.hands: Dict[Seat, Hand] = {Seat.A: Hand(), Seat.B: Hand()}
        self._state = _AWAITING[first]
        self._outcome = Outcome.IN_PROGRESS
        self._triple: Optional[Tuple[int, ...]] = None
        self.moves = 0

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def is_over(self) -> bool:
        return self._state is TurnState.GAME_OVER

    @property
    def active(self) -> Optional[Seat]:
        """Seat whose move is awaited, or None once the game is over."""
        if self._state is TurnState.AWAITING_A:
            return Seat.A
        if self._state is TurnState.AWAITING_B:
            return Seat.B
        return None

    @property
    def winner(self) -> Optional[Seat]:
        if self._outcome is Outcome.A_WON:
            return Seat.A
        if self._outcome is Outcome.B_WON:
            return Seat.B
        return None

    @property
    def winning_triple(self) -> Optional[Tuple[int, ...]]:
        return self._triple

    def hand(self, seat: Seat) -> Hand:
        return self.hands[seat]

    def submit(self, seat: Seat, move: Union[int, str]) -> MoveResult:
        """Apply a move for the given seat.

        Args:
            seat: The seat submitting the move.
            move: An integer or the raw line the player typed.

        Returns:
            The applied move and the outcome after it.

        Raises:
            GameFinished: the game already reached a terminal outcome.
            NotYourTurn: the seat is not the active one.
            InvalidMove: the move is not a number in the pool. Nothing changes.
        """
        if self.is_over:
            raise GameFinished(f"game over ({self._outcome.value})")
        if seat is not self.active:
            raise NotYourTurn(f"seat {seat.value} moved out of turn")

        number = self.pool.pick(parse_move(move))
        hand = self.hands[seat]
        hand.add(number)
        self.moves += 1

        triple = winning_triple(hand)
        if triple is not None:
            self._finish(_WON[seat], triple)
        elif is_draw(self.pool, *self.hands.values()):
            self._finish(Outcome.DRAW)
        else:
            self._state = _AWAITING[seat.other]

        return MoveResult(seat=seat, number=number, outcome=self._outcome, triple=triple)

    def forfeit(self, seat: Seat) -> Outcome:
        """End the game with the other seat as winner. No-op once over."""
        if not self.is_over:
            self._finish(_WON[seat.other])
        return self._outcome

    def _finish(self, outcome: Outcome, triple: Optional[Tuple[int, ...]] = None) -> None:
        self._state = TurnState.GAME_OVER
        self._outcome = outcome
        self._triple = triple
