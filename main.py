"""
n15 - the game of 15 for two players over a terminal connection.

Players take turns picking numbers 1 to 9; the first to hold three
numbers summing to 15 wins. Run ``python -m server.main`` to host and
this script (or plain telnet) to play.
"""
import sys

from client.main import main

if __name__ == "__main__":
    sys.exit(main())
