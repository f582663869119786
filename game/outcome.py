"""Win and draw detection for the game of 15."""

from itertools import combinations
from typing import Iterable, Optional, Tuple

TARGET = 15
SET_SIZE = 3


def winning_triple(hand: Iterable[int]) -> Optional[Tuple[int, ...]]:
    """Return the first three numbers of the hand summing to 15, if any.

    Every 3-subset is considered, so the answer does not depend on the
    order the numbers were picked in.
    """
    for triple in combinations(sorted(hand), SET_SIZE):
        if sum(triple) == TARGET:
            return triple
    return None


def evaluate(hand: Iterable[int]) -> bool:
    """True if some three numbers of the hand sum to exactly 15."""
    return winning_triple(hand) is not None


def is_draw(pool, *hands) -> bool:
    """True once the pool is exhausted and no hand holds a winning triple."""
    return pool.is_exhausted() and not any(evaluate(hand) for hand in hands)
