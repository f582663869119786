"""Move selection for the machine opponent used in solo mode."""

import random
from typing import Iterable, Optional

CENTER = 5
CORNERS = frozenset({2, 4, 6, 8})


def heuristic_choice(available: Iterable[int], rng: Optional[random.Random] = None) -> int:
    """Pick a number the way the machine player does.

    Takes the center (5) when it is free, then a random free corner
    (2, 4, 6, 8), then anything that is left.

    Args:
        available: Numbers still in the pool.
        rng: Random source; defaults to the module-level generator.

    Returns:
        The chosen number.
    """
    rng = rng or random
    numbers = sorted(available)
    if not numbers:
        raise ValueError("no numbers left to choose from")
    if CENTER in numbers:
        return CENTER
    corners = [n for n in numbers if n in CORNERS]
    return rng.choice(corners or numbers)
