"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal


# Game schemas
class GuessRequest(BaseModel):
    """Request to guess the next card."""

    direction: Literal["higher", "lower"]


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    value: int = Field(..., ge=2, le=14)
    is_red: bool


class GameStateResponse(BaseModel):
    """Current game state. The next card is hidden while the game is on."""

    status: Literal["PLAYING", "WON", "LOST"]
    round: int
    rounds_to_win: int
    current_card: CardResponse | None
    next_card: CardResponse | None
    revealed_card: CardResponse | None
    picked_cards: list[CardResponse]
    cards_remaining: int
    feedback: str
    can_guess: bool


# Game State Persistence schemas
class CardData(BaseModel):
    """Serialized card data."""

    rank: int = Field(..., ge=2, le=14)
    suit: int


class GameStateData(BaseModel):
    """Serialized game state for session storage."""

    state: Literal["playing", "won", "lost"]
    round: int = Field(..., ge=0)
    current_card: CardData | None
    next_card: CardData | None
    revealed_card: CardData | None = None
    picked_cards: list[CardData] = []
    deck_cards: list[CardData]
    feedback: str = ""

