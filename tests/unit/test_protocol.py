"""Unit tests for the text line protocol."""

import pytest

from server import protocol


class TestMessages:
    """Test message builders."""

    def test_matched_message(self):
        assert protocol.matched_message("bob", True) == "matched against bob, you move first"
        assert protocol.matched_message("bob", False) == "matched against bob, opponent moves first"

    def test_state_lines(self):
        lines = protocol.state_lines(own=[8, 4], opponent=[1], available=[2, 3, 5, 6, 7, 9])
        assert lines == [
            "opponent: 1",
            "you: 4 8",
            "available: 2 3 5 6 7 9",
        ]

    def test_state_lines_with_empty_hands(self):
        lines = protocol.state_lines(own=[], opponent=[], available=range(1, 10))
        assert lines[0] == "opponent:"
        assert lines[1] == "you:"

    def test_retry_message(self):
        assert protocol.retry_message("bad choice") == "bad choice try again"

    def test_picked_message(self):
        assert protocol.picked_message(4, by_you=True) == "you picked 4"
        assert protocol.picked_message(4, by_you=False) == "opponent picked 4"

    def test_winning_message(self):
        assert protocol.winning_message((8, 3, 4)) == "winning numbers: 3 4 8"
        assert protocol.winning_message(None) is None

    def test_result_lines(self):
        assert protocol.RESULT_LINES == {"you win", "you lose", "draw"}


class TestParseAvailable:
    """Test parsing of the available-numbers line."""

    def test_parses_numbers(self):
        assert protocol.parse_available("available: 1 5 9") == [1, 5, 9]

    def test_empty_pool(self):
        assert protocol.parse_available("available:") == []

    @pytest.mark.parametrize("line", ["you: 1 2", "draw", ""])
    def test_other_lines(self, line):
        assert protocol.parse_available(line) is None
