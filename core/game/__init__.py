"""Game engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GameStatus
from core.game.rules import Direction, Outcome, evaluate_guess
from core.game.engine import GameSnapshot, HigherLowerGame

__all__ = [
    "GameEvent",
    "EventType",
    "GameStatus",
    "Direction",
    "Outcome",
    "evaluate_guess",
    "GameSnapshot",
    "HigherLowerGame",
]
