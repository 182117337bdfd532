"""Pytest fixtures for higher/lower tests."""

import pytest
from random import Random

from core.cards import Card, Deck, create_deck
from core.game import HigherLowerGame


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    d = Deck(rng=rng)
    d.shuffle()
    return d


@pytest.fixture
def game(rng):
    """A new game instance."""
    return HigherLowerGame(rng=rng)


def stacked_deck(*labels: str) -> Deck:
    """
    Build a full deck whose first cards are the given ones, e.g. "5H", "10S".

    The rest of the 52 cards follow in canonical order.
    """
    top = [Card.from_string(label) for label in labels]
    rest = [c for c in create_deck() if c not in top]
    return Deck.from_cards(top + rest)


@pytest.fixture
def make_game(rng):
    """Factory for games dealt from a stacked deck."""

    def _make(*labels: str) -> HigherLowerGame:
        return HigherLowerGame(rng=rng, deck=stacked_deck(*labels))

    return _make

