"""Tests for the rule table and game states."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from core.cards import Card, Rank, Suit
from core.game.rules import (
    FEEDBACK,
    ROUNDS_TO_WIN,
    Direction,
    Outcome,
    evaluate_guess,
)
from core.game.state import GameStatus

C = Card.from_string


@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


class TestEvaluateGuess:
    """Tests for evaluate_guess."""

    def test_correct_higher(self):
        assert evaluate_guess(C("5H"), C("10S"), Direction.HIGHER, 0) == Outcome.CORRECT

    def test_correct_lower(self):
        assert evaluate_guess(C("10H"), C("5S"), Direction.LOWER, 0) == Outcome.CORRECT

    def test_incorrect(self):
        assert evaluate_guess(C("10H"), C("5S"), Direction.HIGHER, 0) == Outcome.INCORRECT
        assert evaluate_guess(C("5H"), C("10S"), Direction.LOWER, 3) == Outcome.INCORRECT

    def test_fifth_correct_guess_wins(self):
        """Test the win is detected from the round before incrementing."""
        assert evaluate_guess(C("5H"), C("10S"), Direction.HIGHER, 4) == Outcome.WON
        assert evaluate_guess(C("5H"), C("10S"), Direction.HIGHER, 3) == Outcome.CORRECT

    def test_tie_beats_win(self):
        """Test a tie on the final round is still a loss."""
        assert evaluate_guess(C("9H"), C("9S"), Direction.HIGHER, 4) == Outcome.TIE

    @given(
        rank=st.sampled_from(list(Rank)),
        suits=st.lists(st.sampled_from(list(Suit)), min_size=2, max_size=2, unique=True),
        direction=st.sampled_from(list(Direction)),
        round_before=st.integers(min_value=0, max_value=ROUNDS_TO_WIN - 1),
    )
    def test_tie_always_loses(self, rank, suits, direction, round_before):
        """Test matching ranks lose for any direction and round."""
        current = Card(rank, suits[0])
        upcoming = Card(rank, suits[1])
        outcome = evaluate_guess(current, upcoming, direction, round_before)
        assert outcome == Outcome.TIE
        assert outcome.is_loss

    @given(current=card_strategy(), upcoming=card_strategy(), suit=st.sampled_from(list(Suit)))
    def test_suit_never_matters(self, current, upcoming, suit):
        """Test swapping the next card's suit never changes the outcome."""
        recoloured = Card(upcoming.rank, suit)
        for direction in Direction:
            assert evaluate_guess(current, upcoming, direction, 0) == evaluate_guess(
                current, recoloured, direction, 0
            )

    @given(current=card_strategy(), upcoming=card_strategy())
    def test_exactly_one_direction_is_right(self, current, upcoming):
        """Test that for distinct ranks one guess wins and the other loses."""
        outcomes = {evaluate_guess(current, upcoming, d, 0) for d in Direction}
        if current.rank == upcoming.rank:
            assert outcomes == {Outcome.TIE}
        else:
            assert outcomes == {Outcome.CORRECT, Outcome.INCORRECT}


class TestDirection:
    """Tests for parsing guesses."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("higher", Direction.HIGHER),
            ("Lower", Direction.LOWER),
            (" HIGHER ", Direction.HIGHER),
            (Direction.LOWER, Direction.LOWER),
        ],
    )
    def test_parse(self, value, expected):
        assert Direction.parse(value) is expected

    @pytest.mark.parametrize("value", ["up", "", None, 1])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            Direction.parse(value)


class TestFeedback:
    """Tests for feedback messages."""

    def test_every_outcome_has_a_message(self):
        assert set(FEEDBACK) == set(Outcome)

    def test_messages(self):
        assert FEEDBACK[Outcome.TIE] == "Automatic loss! Matching card drawn."
        assert FEEDBACK[Outcome.CORRECT] == "You guessed correctly!"
        assert FEEDBACK[Outcome.WON] == "Congratulations! You won!"
        assert FEEDBACK[Outcome.INCORRECT] == "Incorrect guess. Game over!"


class TestGameStatus:
    """Tests for game status display."""

    def test_str(self):
        assert str(GameStatus.PLAYING) == "Playing"
