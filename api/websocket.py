"""WebSocket connection management with game engine integration."""

import asyncio
import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from typing import Any

from api.session import extract_session_id, get_game, save_game
from core.cards import Card
from core.game import GameStatus, HigherLowerGame
from core.game.events import GameEvent

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionManager:
    """Manage WebSocket connections and their event queues."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._event_queues: dict[str, asyncio.Queue] = {}

    async def connect(self, websocket: WebSocket, session_id: str) -> None:
        """Accept and register a new connection."""
        await websocket.accept()
        self._connections[session_id] = websocket
        self._event_queues[session_id] = asyncio.Queue()

    def disconnect(self, session_id: str) -> None:
        """Remove a connection. The game itself stays in the session store."""
        self._connections.pop(session_id, None)
        self._event_queues.pop(session_id, None)

    def queue_event(self, session_id: str, event: GameEvent) -> None:
        """Queue an event for async delivery."""
        queue = self._event_queues.get(session_id)
        if queue is not None:
            queue.put_nowait(event)

    async def get_event(self, session_id: str) -> GameEvent | None:
        """Get the next event from the queue."""
        queue = self._event_queues.get(session_id)
        if queue is None:
            return None
        try:
            return await asyncio.wait_for(queue.get(), timeout=0.1)
        except asyncio.TimeoutError:
            return None

    async def send_message(self, session_id: str, message: dict[str, Any]) -> None:
        """Send a message to a specific session."""
        websocket = self._connections.get(session_id)
        if websocket is not None:
            await websocket.send_json(message)

    @property
    def active_connections(self) -> int:
        """Return number of active connections."""
        return len(self._connections)


# Global connection manager
manager = ConnectionManager()


def _card_to_dict(card: Card | None, hidden: bool = False) -> dict[str, Any] | None:
    if card is None:
        return None
    if hidden:
        return {"rank": "?", "suit": "?", "value": 0, "is_red": False, "hidden": True}
    return {
        "rank": str(card.rank),
        "suit": str(card.suit),
        "value": card.value,
        "is_red": card.is_red,
        "hidden": False,
    }


def _game_state_to_dict(game: HigherLowerGame) -> dict[str, Any]:
    """Convert game state to a dictionary for JSON serialization."""
    snapshot = game.snapshot()
    playing = snapshot.status == GameStatus.PLAYING

    return {
        "status": snapshot.status.name,
        "round": snapshot.round,
        "rounds_to_win": snapshot.rounds_to_win,
        "current_card": _card_to_dict(snapshot.current_card),
        "next_card": _card_to_dict(snapshot.next_card, hidden=playing),
        "revealed_card": _card_to_dict(snapshot.revealed_card),
        "picked_cards": [_card_to_dict(c) for c in snapshot.picked_cards],
        "cards_remaining": snapshot.cards_remaining,
        "feedback": snapshot.feedback,
        "can_guess": snapshot.can_guess,
    }


def _event_to_message(event: GameEvent, game: HigherLowerGame) -> dict[str, Any]:
    """Convert a game event to a WebSocket message."""
    return {
        "type": "event",
        "event_type": event.event_type.name,
        "data": event.data,
        "state": _game_state_to_dict(game),
    }


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for real-time game updates.

    Messages from client:
    - {"type": "guess", "direction": "higher"|"lower"}
    - {"type": "reset_game"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "event", "event_type": "...", "data": {...}, "state": {...}}
    - {"type": "error", "message": "..."}
    """
    if extract_session_id(session_id) is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Invalid or expired session")
        return

    await manager.connect(websocket, session_id)
    game = await get_game(session_id)
    game.subscribe(lambda event: manager.queue_event(session_id, event))

    await manager.send_message(session_id, {
        "type": "state_update",
        "state": _game_state_to_dict(game),
    })

    async def process_events():
        """Process game events and send to client."""
        while True:
            event = await manager.get_event(session_id)
            if event:
                await manager.send_message(session_id, _event_to_message(event, game))

    event_task = asyncio.create_task(process_events())

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                message = None

            if not isinstance(message, dict):
                await manager.send_message(session_id, {
                    "type": "error",
                    "message": "Invalid JSON",
                })
                continue

            msg_type = message.get("type")

            if msg_type == "get_state":
                await manager.send_message(session_id, {
                    "type": "state_update",
                    "state": _game_state_to_dict(game),
                })

            elif msg_type == "guess":
                direction = message.get("direction")
                try:
                    accepted = game.guess(direction)
                except ValueError as exc:
                    await manager.send_message(session_id, {
                        "type": "error",
                        "message": str(exc),
                    })
                    continue

                if accepted:
                    await save_game(session_id, game)
                else:
                    # Game already over; resend state so the client can resync
                    await manager.send_message(session_id, {
                        "type": "state_update",
                        "state": _game_state_to_dict(game),
                    })

            elif msg_type == "reset_game":
                game.reset()
                await save_game(session_id, game)

            else:
                await manager.send_message(session_id, {
                    "type": "error",
                    "message": f"Unknown message type: {msg_type}",
                })

    except WebSocketDisconnect:
        logger.debug("WebSocket for session %s disconnected", session_id)
    finally:
        event_task.cancel()
        try:
            await event_task
        except asyncio.CancelledError:
            pass
        manager.disconnect(session_id)
