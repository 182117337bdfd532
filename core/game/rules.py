"""Higher/lower rule table."""

from enum import Enum

from core.cards import Card

# Correct guesses needed to win
ROUNDS_TO_WIN = 5


class Direction(Enum):
    """The player's guess about the next card."""

    HIGHER = "higher"
    LOWER = "lower"

    def __str__(self) -> str:
        return self.value.title()

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """Accept a Direction or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid direction: {value!r}") from None


class Outcome(Enum):
    """Result of comparing the next card against the current one."""

    TIE = "tie"
    CORRECT = "correct"
    WON = "won"
    INCORRECT = "incorrect"

    @property
    def is_loss(self) -> bool:
        """Check if this outcome ends the game as a loss."""
        return self in (Outcome.TIE, Outcome.INCORRECT)


FEEDBACK: dict[Outcome, str] = {
    Outcome.TIE: "Automatic loss! Matching card drawn.",
    Outcome.CORRECT: "You guessed correctly!",
    Outcome.WON: "Congratulations! You won!",
    Outcome.INCORRECT: "Incorrect guess. Game over!",
}


def evaluate_guess(
    current: Card,
    next_card: Card,
    direction: Direction,
    round_before: int,
) -> Outcome:
    """
    Evaluate a guess.

    Rules are checked in priority order: a matching rank always loses,
    then a correct guess advances (winning on the fifth), anything else loses.
    Suits are ignored.

    Args:
        current: The face-up card
        next_card: The face-down card being guessed
        direction: The player's guess
        round_before: Correct guesses made before this one

    Returns:
        The outcome of the guess
    """
    if next_card.value == current.value:
        return Outcome.TIE

    if (direction is Direction.HIGHER and next_card.value > current.value) or (
        direction is Direction.LOWER and next_card.value < current.value
    ):
        if round_before == ROUNDS_TO_WIN - 1:
            return Outcome.WON
        return Outcome.CORRECT

    return Outcome.INCORRECT
