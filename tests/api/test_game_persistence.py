"""Tests for game state persistence (serialization/deserialization)."""

import json
import logging

import pytest
from pydantic import ValidationError

from api.session import (
    deserialize_card,
    deserialize_game,
    serialize_card,
    serialize_game,
)
from core.cards import Card, Rank, Suit, create_deck
from core.game import Direction, GameStatus, HigherLowerGame


class TestCardSerialization:
    """Tests for card serialization."""

    def test_serialize_card_structure(self):
        """Test that serialized cards store enum values."""
        serialized = serialize_card(Card(Rank.SEVEN, Suit.DIAMONDS))

        assert serialized == {"rank": 7, "suit": Suit.DIAMONDS.value}

    def test_every_card_restores(self):
        """Test that each of the 52 cards survives serialization."""
        for card in create_deck():
            assert deserialize_card(serialize_card(card)) == card


class TestGameSerialization:
    """Tests for full game serialization."""

    def test_serialized_game_is_json(self):
        """Test the stored form is plain JSON."""
        game = HigherLowerGame()
        data = serialize_game(game)

        assert json.loads(json.dumps(data)) == data
        assert data["state"] == "playing"
        assert len(data["deck_cards"]) == 50

    def test_mid_game_restores_exactly(self, make_game):
        """Test a game in progress restores with the same cards and round."""
        game = make_game("4H", "9S", "2D", "KC")
        game.guess(Direction.HIGHER)
        game.guess(Direction.LOWER)

        restored = deserialize_game(serialize_game(game))

        assert restored.snapshot() == game.snapshot()
        assert list(restored.deck) == list(game.deck)

    def test_restored_game_keeps_playing(self, make_game):
        """Test the restored game deals the same next cards."""
        game = make_game("4H", "9S", "2D", "KC")
        game.guess(Direction.HIGHER)

        restored = deserialize_game(serialize_game(game))
        restored.guess(Direction.LOWER)
        game.guess(Direction.LOWER)

        assert restored.snapshot() == game.snapshot()

    @pytest.mark.parametrize(
        "labels, direction, status",
        [
            (("10H", "5S"), Direction.HIGHER, GameStatus.LOST),
            (("9H", "9S"), Direction.LOWER, GameStatus.LOST),
        ],
    )
    def test_terminal_game_restores(self, make_game, labels, direction, status):
        """Test a finished game restores as finished with its revealed card."""
        game = make_game(*labels)
        game.guess(direction)

        restored = deserialize_game(serialize_game(game))

        assert restored.state == status
        assert restored.revealed_card == game.revealed_card
        assert restored.feedback == game.feedback
        assert restored.guess(Direction.HIGHER) is False

    def test_won_game_restores(self, make_game):
        game = make_game("2H", "3H", "4H", "5H", "6H", "7H")
        for _ in range(5):
            game.guess(Direction.HIGHER)

        restored = deserialize_game(serialize_game(game))

        assert restored.state == GameStatus.WON
        assert restored.round == 5

    def test_restored_game_has_no_stale_events(self):
        restored = deserialize_game(serialize_game(HigherLowerGame()))
        assert restored.events.history == []

    def test_restore_does_not_deal(self, make_game, caplog):
        """Test restoring keeps the saved deck and logs no new game."""
        data = serialize_game(make_game("4H", "9S", "2D"))

        with caplog.at_level(logging.INFO):
            restored = deserialize_game(data)

        assert "New game started" not in caplog.text
        assert restored.next_card == Card.from_string("9S")
        assert next(iter(restored.deck)) == Card.from_string("2D")

    def test_corrupt_state_rejected(self):
        """Test unknown states are refused instead of restored."""
        data = serialize_game(HigherLowerGame())
        data["state"] = "bankrupt"

        with pytest.raises(ValidationError):
            deserialize_game(data)
