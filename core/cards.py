"""Card and Deck classes - immutable card representations."""

from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterable, Iterator


class EmptyDeckError(IndexError):
    """Raised when drawing from a deck with no cards left."""


class Suit(Enum):
    """Card suits. Suits never affect the outcome of a guess."""

    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
            Suit.SPADES: "♠",
        }
        return symbols[self]

    @property
    def is_red(self) -> bool:
        """Check if this suit is drawn in red."""
        return self in (Suit.HEARTS, Suit.DIAMONDS)


class Rank(Enum):
    """Card ranks, Ace high."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]


_RANK_LABELS = {
    "2": Rank.TWO,
    "3": Rank.THREE,
    "4": Rank.FOUR,
    "5": Rank.FIVE,
    "6": Rank.SIX,
    "7": Rank.SEVEN,
    "8": Rank.EIGHT,
    "9": Rank.NINE,
    "10": Rank.TEN,
    "T": Rank.TEN,
    "J": Rank.JACK,
    "Q": Rank.QUEEN,
    "K": Rank.KING,
    "A": Rank.ACE,
}

_SUIT_LABELS = {
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the rank on the 2-14 comparison scale."""
        return self.rank.value

    @property
    def is_red(self) -> bool:
        """Check if this card is a heart or a diamond."""
        return self.suit.is_red

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Qh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str not in _RANK_LABELS:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_LABELS:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_LABELS[rank_str], _SUIT_LABELS[suit_str])


def create_deck() -> list[Card]:
    """Return the 52 canonical cards, one per rank and suit."""
    return [Card(rank, suit) for rank in Rank for suit in Suit]


def shuffle(cards: list[Card], rng: Random | None = None) -> list[Card]:
    """
    Shuffle cards in place and return them.

    Random.shuffle walks the list from the last index down, swapping each
    position with a uniformly chosen one at or below it (Durstenfeld's
    Fisher-Yates), so every ordering is equally likely.

    Args:
        cards: Cards to permute
        rng: Random number generator for reproducible shuffles
    """
    (rng or Random()).shuffle(cards)
    return cards


class Deck:
    """A standard 52-card deck dealt from the front."""

    def __init__(self, rng: Random | None = None) -> None:
        """Initialize a new deck in canonical order."""
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self.reset()

    @classmethod
    def from_cards(cls, cards: Iterable[Card], rng: Random | None = None) -> "Deck":
        """
        Build a deck holding exactly the given cards, in the given order.

        Used to stack a deck for tests and to restore a saved game.
        """
        deck = cls(rng=rng)
        deck._cards = list(cards)
        return deck

    def reset(self) -> None:
        """Reset deck to all 52 cards in order."""
        self._cards = create_deck()

    def shuffle(self) -> None:
        """Shuffle the remaining cards."""
        shuffle(self._cards, self._rng)

    def draw(self) -> Card:
        """Remove and return the front card."""
        if not self._cards:
            raise EmptyDeckError("Cannot draw from empty deck")
        return self._cards.pop(0)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)
