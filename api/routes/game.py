"""Game API endpoints."""

from fastapi import APIRouter, Depends, Header, HTTPException, Response
from typing import Annotated

from api.schemas import CardResponse, GameStateResponse, GuessRequest
from api.session import (
    create_session,
    extract_session_id,
    get_game,
    save_game,
)
from core.cards import Card
from core.game import GameStatus, HigherLowerGame

router = APIRouter()

SESSION_HEADER = "X-Session-ID"


async def _session_token(
    response: Response,
    token: Annotated[str | None, Header(alias=SESSION_HEADER)] = None,
) -> str:
    """
    Resolve the caller's session token.

    A request without a token opens a new session. The token in use is
    echoed back in the response header either way.
    """
    if token is None:
        token = await create_session()
    elif extract_session_id(token) is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    response.headers[SESSION_HEADER] = token
    return token


SessionToken = Annotated[str, Depends(_session_token)]


def _card_to_response(card: Card | None) -> CardResponse | None:
    """Convert a Card to CardResponse."""
    if card is None:
        return None
    return CardResponse(
        rank=str(card.rank),
        suit=str(card.suit),
        value=card.value,
        is_red=card.is_red,
    )


def _game_state_response(game: HigherLowerGame) -> GameStateResponse:
    """Convert game state to response, keeping the next card face down."""
    snapshot = game.snapshot()
    hide_next = snapshot.status == GameStatus.PLAYING

    return GameStateResponse(
        status=snapshot.status.name,
        round=snapshot.round,
        rounds_to_win=snapshot.rounds_to_win,
        current_card=_card_to_response(snapshot.current_card),
        next_card=None if hide_next else _card_to_response(snapshot.next_card),
        revealed_card=_card_to_response(snapshot.revealed_card),
        picked_cards=[_card_to_response(c) for c in snapshot.picked_cards],
        cards_remaining=snapshot.cards_remaining,
        feedback=snapshot.feedback,
        can_guess=snapshot.can_guess,
    )


@router.post("/new")
async def new_game(
    token: Annotated[str | None, Header(alias=SESSION_HEADER)] = None,
) -> dict[str, str]:
    """Deal a new game, in the caller's session if it is still valid."""
    if token is None or extract_session_id(token) is None:
        token = await create_session()

    await save_game(token, HigherLowerGame())
    return {"session_id": token}


@router.get("/state")
async def get_state(token: SessionToken) -> GameStateResponse:
    """Get current game state."""
    game = await get_game(token)
    return _game_state_response(game)


@router.post("/guess")
async def guess(request: GuessRequest, token: SessionToken) -> GameStateResponse:
    """Guess higher or lower. Ignored once the game is over."""
    game = await get_game(token)

    if game.guess(request.direction):
        await save_game(token, game)

    return _game_state_response(game)


@router.post("/reset")
async def reset_game(token: SessionToken) -> GameStateResponse:
    """Discard the current game and deal a new one."""
    game = await get_game(token)
    game.reset()
    await save_game(token, game)
    return _game_state_response(game)
