"""Core higher/lower engine - 100% UI-agnostic."""

from core.cards import Card, Deck, EmptyDeckError, Rank, Suit, create_deck, shuffle

__all__ = [
    "Card",
    "Deck",
    "EmptyDeckError",
    "Rank",
    "Suit",
    "create_deck",
    "shuffle",
]
