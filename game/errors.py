"""Exceptions raised by the game rules."""


class GameError(Exception):
    """Base class for rule violations."""


class InvalidMove(GameError):
    """A pick that cannot be applied: not a number, or not in the pool.

    The reason is the short text shown to the player before the re-prompt.
    """

    BAD_CHOICE = "bad choice"
    UNAVAILABLE = "unavailable choice"

    def __init__(self, reason: str, move=None):
        super().__init__(f"{reason}: {move!r}")
        self.reason = reason
        self.move = move


class NotYourTurn(GameError):
    """A seat tried to move while the other seat is active."""


class GameFinished(GameError):
    """A move was submitted after the game reached a terminal outcome."""
