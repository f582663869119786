"""Pool of unpicked numbers and the hands players build from it."""

from typing import Iterable, Iterator, List, Set

from game.errors import InvalidMove

NUMBERS = range(1, 10)


def format_numbers(numbers: Iterable[int]) -> str:
    """Render numbers sorted and space separated, e.g. ``"2 5 9"``."""
    return " ".join(str(n) for n in sorted(numbers))


class Pool:
    """The numbers 1..9 not yet picked by either player."""

    def __init__(self, numbers: Iterable[int] = NUMBERS):
        self._numbers: Set[int] = set(numbers)

    def pick(self, number: int) -> int:
        """Remove a number from the pool.

        Raises:
            InvalidMove: if the number is not currently available.
        """
        if number not in self._numbers:
            raise InvalidMove(InvalidMove.UNAVAILABLE, number)
        self._numbers.remove(number)
        return number

    def is_exhausted(self) -> bool:
        return not self._numbers

    def __contains__(self, number) -> bool:
        return number in self._numbers

    def __len__(self) -> int:
        return len(self._numbers)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._numbers))

    def __str__(self) -> str:
        return format_numbers(self._numbers)

    def __repr__(self) -> str:
        return f"Pool({sorted(self._numbers)})"


class Hand:
    """Numbers picked by one player, in pick order."""

    def __init__(self):
        self._numbers: List[int] = []

    def add(self, number: int) -> None:
        self._numbers.append(number)

    @property
    def numbers(self) -> List[int]:
        return list(self._numbers)

    def __contains__(self, number) -> bool:
        return number in self._numbers

    def __len__(self) -> int:
        return len(self._numbers)

    def __iter__(self) -> Iterator[int]:
        return iter(self._numbers)

    def __str__(self) -> str:
        return format_numbers(self._numbers)

    def __repr__(self) -> str:
        return f"Hand({self._numbers})"
