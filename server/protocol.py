"""Text line protocol spoken to n15 clients.

Every server message is a single line. Builders here are the only place
the wording lives, so the client and the tests can match on it.
"""
from enum import Enum
from typing import Iterable, List, Optional

from game.pool import format_numbers
from version import VERSION

PROMPT = "your turn, pick a number:"
WAIT_NOTICE = "opponent's turn, please wait"
WAITING_FOR_OPPONENT = "waiting for an opponent"
OPPONENT_DISCONNECTED = "opponent disconnected"
RETRY_SUFFIX = "try again"

AVAILABLE_PREFIX = "available:"
OPPONENT_PREFIX = "opponent:"
YOU_PREFIX = "you:"
WINNING_PREFIX = "winning numbers:"


class Result(Enum):
    """Terminal line sent to each player."""
    WIN = "you win"
    LOSE = "you lose"
    DRAW = "draw"


RESULT_LINES = frozenset(r.value for r in Result)


def banner_message() -> str:
    """Greeting sent on every new connection."""
    return f"n15 {VERSION}"


def matched_message(opponent_name: str, moves_first: bool) -> str:
    """Sent to both players once a match is formed."""
    order = "you move first" if moves_first else "opponent moves first"
    return f"matched against {opponent_name}, {order}"


def state_lines(own: Iterable[int], opponent: Iterable[int], available: Iterable[int]) -> List[str]:
    """Board state from one player's point of view."""
    return [
        f"{OPPONENT_PREFIX} {format_numbers(opponent)}".rstrip(),
        f"{YOU_PREFIX} {format_numbers(own)}".rstrip(),
        f"{AVAILABLE_PREFIX} {format_numbers(available)}".rstrip(),
    ]


def retry_message(reason: str) -> str:
    """Re-prompt notice after an invalid move."""
    return f"{reason} {RETRY_SUFFIX}"


def picked_message(number: int, by_you: bool) -> str:
    who = "you" if by_you else "opponent"
    return f"{who} picked {number}"


def winning_message(triple: Optional[Iterable[int]]) -> Optional[str]:
    if not triple:
        return None
    return f"{WINNING_PREFIX} {format_numbers(triple)}"


def parse_available(line: str) -> Optional[List[int]]:
    """Extract the numbers from an ``available:`` state line.

    Returns None if the line is not an available-numbers line.
    """
    if not line.startswith(AVAILABLE_PREFIX):
        return None
    numbers = []
    for token in line[len(AVAILABLE_PREFIX):].split():
        try:
            numbers.append(int(token))
        except ValueError:
            continue
    return numbers
