"""Terminal UI helpers for the n15 client using rich and questionary."""
from typing import List, Optional

import questionary
from rich.console import Console

from server import protocol

console = Console()

RESULT_STYLES = {
    protocol.Result.WIN.value: "bold green",
    protocol.Result.LOSE.value: "bold red",
    protocol.Result.DRAW.value: "bold yellow",
}


def style_for(line: str) -> Optional[str]:
    """Pick a rich style for a server line, or None for plain text."""
    if line in RESULT_STYLES:
        return RESULT_STYLES[line]
    if line.endswith(protocol.RETRY_SUFFIX) or line == protocol.OPPONENT_DISCONNECTED:
        return "red"
    if line.startswith(protocol.AVAILABLE_PREFIX):
        return "cyan"
    if line.startswith(protocol.WINNING_PREFIX):
        return "bold magenta"
    if line == protocol.PROMPT:
        return "bold"
    if line == protocol.WAIT_NOTICE or line == protocol.WAITING_FOR_OPPONENT:
        return "dim"
    return None


def print_line(line: str) -> None:
    """Print one server line."""
    console.print(line, style=style_for(line), markup=False, highlight=False)


async def ask_number(available: List[int]) -> Optional[str]:
    """Ask the player to pick one of the available numbers.

    Returns:
        The chosen number as text, or None if the player cancelled.
    """
    if not available:
        return await questionary.text("Pick a number:").ask_async()
    return await questionary.select(
        "Pick a number:",
        choices=[str(n) for n in available],
    ).ask_async()
