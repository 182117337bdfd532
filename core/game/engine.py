"""Higher/lower game engine with state machine."""

import logging
from dataclasses import dataclass
from random import Random
from typing import Callable

from transitions import Machine

from core.cards import Card, Deck
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.rules import (
    FEEDBACK,
    ROUNDS_TO_WIN,
    Direction,
    Outcome,
    evaluate_guess,
)
from core.game.state import GameStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only copy of the game state for rendering."""

    status: GameStatus
    round: int
    rounds_to_win: int
    current_card: Card | None
    next_card: Card | None
    revealed_card: Card | None
    picked_cards: tuple[Card, ...]
    cards_remaining: int
    feedback: str
    can_guess: bool


class HigherLowerGame:
    """
    Higher/lower game engine using a state machine.

    Owns the deck and the round state. The only player-facing actions are
    start/reset and guess; everything else is read-only.
    """

    # State machine states
    STATES = [s.name.lower() for s in GameStatus]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "win", "source": "playing", "dest": "won"},
        {"trigger": "lose", "source": "playing", "dest": "lost"},
        {"trigger": "restart", "source": "*", "dest": "playing"},
    ]

    def __init__(
        self,
        rng: Random | None = None,
        deck: Deck | None = None,
    ) -> None:
        """
        Initialize and deal a new game.

        Args:
            rng: Random number generator for reproducible games
            deck: Pre-ordered deck to deal from instead of a shuffled one
        """
        self._setup(rng)
        self.start(deck)

    def _setup(self, rng: Random | None) -> None:
        self._rng = rng or Random()
        self.events = EventEmitter()

        self.deck = Deck(rng=self._rng)
        self.current_card: Card | None = None
        self.next_card: Card | None = None
        self.picked_cards: list[Card] = []
        self.round = 0
        self.revealed_card: Card | None = None
        self.feedback = ""

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="playing",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @classmethod
    def restore(
        cls,
        deck: Deck,
        *,
        status: GameStatus,
        round: int,
        current_card: Card | None,
        next_card: Card | None,
        picked_cards: list[Card],
        revealed_card: Card | None = None,
        feedback: str = "",
        rng: Random | None = None,
    ) -> "HigherLowerGame":
        """
        Rebuild a saved game without dealing or emitting events.

        Args:
            deck: The undealt cards, in draw order
            status: Status the game was saved in
            round: Correct guesses made so far
            current_card: The face-up card
            next_card: The face-down card
            picked_cards: Cards already played, oldest first
            revealed_card: Card shown after a loss
            feedback: Message from the last guess
            rng: Random number generator used by later resets

        Returns:
            The restored game
        """
        game = cls.__new__(cls)
        game._setup(rng)

        game.deck = deck
        game.current_card = current_card
        game.next_card = next_card
        game.picked_cards = list(picked_cards)
        game.round = round
        game.revealed_card = revealed_card
        game.feedback = feedback
        game.machine.set_state(status.name.lower())
        return game

    @property
    def state(self) -> GameStatus:
        """Get current game state as enum."""
        return GameStatus[self._machine_state.upper()]  # type: ignore

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def start(self, deck: Deck | None = None) -> None:
        """
        Discard the current game and deal a fresh one.

        Args:
            deck: Pre-ordered deck to deal from; a new shuffled deck otherwise
        """
        # Events from the previous game are dropped
        self.events.clear_history()

        if deck is None:
            deck = Deck(rng=self._rng)
            deck.shuffle()
            self.events.emit_new(EventType.DECK_SHUFFLED, cards=len(deck))

        self.deck = deck
        self.current_card = self.deck.draw()
        self.next_card = self.deck.draw()
        self.picked_cards = []
        self.round = 0
        self.revealed_card = None
        self.feedback = ""

        self.restart()
        self.events.emit_new(
            EventType.GAME_STARTED,
            current_card=str(self.current_card),
            cards_remaining=self.deck.cards_remaining,
        )
        logger.info("New game started, current card %s", self.current_card)

    reset = start

    def guess(self, direction: Direction | str) -> bool:
        """
        Guess whether the next card ranks higher or lower than the current one.

        Guesses outside a game in progress are ignored.

        Args:
            direction: Direction.HIGHER / Direction.LOWER or "higher" / "lower"

        Returns:
            True if the guess was evaluated
        """
        direction = Direction.parse(direction)

        if not self.can_guess:
            logger.debug("Ignoring %s guess in state %s", direction, self.state)
            return False

        current = self.current_card
        upcoming = self.next_card
        if current is None or upcoming is None:
            return False

        round_before = self.round
        outcome = evaluate_guess(current, upcoming, direction, round_before)
        self.feedback = FEEDBACK[outcome]

        if outcome.is_loss:
            self.revealed_card = upcoming
            self.lose()
            self.events.emit_new(
                EventType.GAME_LOST,
                reason=outcome.value,
                guess=direction.value,
                current_card=str(current),
                revealed_card=str(upcoming),
                round=self.round,
            )
            logger.info("Game lost on %s after %d rounds", outcome.value, self.round)
            return True

        self.round = round_before + 1

        if outcome is Outcome.WON:
            self.win()
            self.events.emit_new(
                EventType.GAME_WON,
                guess=direction.value,
                next_card=str(upcoming),
                round=self.round,
            )
            logger.info("Game won")
            return True

        self.events.emit_new(
            EventType.GUESS_CORRECT,
            guess=direction.value,
            next_card=str(upcoming),
            round=self.round,
        )
        self._advance()
        return True

    def _advance(self) -> None:
        """Move the next card up and deal a new face-down card."""
        self.picked_cards.append(self.current_card)  # type: ignore[arg-type]
        self.current_card = self.next_card
        self.next_card = self.deck.draw() if self.deck.cards_remaining else None
        self.events.emit_new(
            EventType.CARD_DRAWN,
            cards_remaining=self.deck.cards_remaining,
        )

    @property
    def can_guess(self) -> bool:
        """Check if a guess is accepted."""
        return (
            self.state == GameStatus.PLAYING
            and self.current_card is not None
            and self.next_card is not None
        )

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards left in the deck."""
        return self.deck.cards_remaining

    @property
    def rounds_to_win(self) -> int:
        """Return the number of correct guesses needed to win."""
        return ROUNDS_TO_WIN

    def snapshot(self) -> GameSnapshot:
        """Return an immutable copy of the current game state."""
        return GameSnapshot(
            status=self.state,
            round=self.round,
            rounds_to_win=ROUNDS_TO_WIN,
            current_card=self.current_card,
            next_card=self.next_card,
            revealed_card=self.revealed_card,
            picked_cards=tuple(self.picked_cards),
            cards_remaining=self.cards_remaining,
            feedback=self.feedback,
            can_guess=self.can_guess,
        )
