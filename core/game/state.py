"""Game status enumeration."""

from enum import Enum, auto


class GameStatus(Enum):
    """
    Game state machine states.

    Flow: PLAYING → WON | LOST, and back to PLAYING only through a reset.
    """

    # Guesses accepted
    PLAYING = auto()

    # Five correct guesses
    WON = auto()

    # Tie or wrong guess
    LOST = auto()

    def __str__(self) -> str:
        return self.name.title()
