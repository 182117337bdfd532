"""Signed game sessions backed by Redis or an in-memory store."""

import json
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

import redis.asyncio as redis
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from redis.exceptions import RedisError

from api.schemas import GameStateData
from config import config
from core.cards import Card, Deck, Rank, Suit
from core.game import GameStatus, HigherLowerGame

logger = logging.getLogger(__name__)

# Session data keys
SESSION_KEY_GAME = "game"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


class SessionSigner:
    """Sign and verify session tokens using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key or config.security.secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify a signed token.

        Args:
            token: The token sent by the client
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID if the signature holds and has not expired, None otherwise
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


def extract_session_id(token: str) -> str | None:
    """Return the session ID inside a signed token, or None if it is forged or stale."""
    return get_session_signer().unsign(token)


class SessionStore(ABC):
    """Where session data lives between requests."""

    @abstractmethod
    async def get(self, token: str) -> dict[str, Any] | None:
        """Get session data."""
        ...

    @abstractmethod
    async def set(self, token: str, data: dict[str, Any], ttl: int | None = None) -> None:
        """Store session data, refreshing its expiry."""
        ...

    async def cleanup_expired(self) -> int:
        """Drop expired sessions. Stores with native expiry have nothing to do."""
        return 0

    def create_session_id(self) -> str:
        """Create a new signed session token."""
        return get_session_signer().sign(str(uuid4()))


class InMemorySessionStore(SessionStore):
    """In-memory session store for local development."""

    def __init__(self) -> None:
        self._sessions: dict[str, tuple[dict[str, Any], datetime]] = {}

    async def get(self, token: str) -> dict[str, Any] | None:
        """Get session data, dropping it if expired."""
        entry = self._sessions.get(token)
        if entry is None:
            return None

        data, expiry = entry
        if expiry < datetime.now():
            del self._sessions[token]
            return None

        return data

    async def set(self, token: str, data: dict[str, Any], ttl: int | None = None) -> None:
        expiry = datetime.now() + timedelta(seconds=ttl or config.session_ttl)
        self._sessions[token] = (data, expiry)

    async def cleanup_expired(self) -> int:
        now = datetime.now()
        expired = [token for token, (_, expiry) in self._sessions.items() if expiry < now]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.debug("Dropped %d expired sessions", len(expired))
        return len(expired)


class RedisSessionStore(SessionStore):
    """Redis-backed session store; keys expire through SETEX."""

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client
        self._prefix = "higherlower:session:"

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def get(self, token: str) -> dict[str, Any] | None:
        data = await self._redis.get(self._key(token))
        if data is None:
            return None
        return json.loads(data)

    async def set(self, token: str, data: dict[str, Any], ttl: int | None = None) -> None:
        await self._redis.setex(self._key(token), ttl or config.session_ttl, json.dumps(data))


_session_store: SessionStore | None = None


async def get_session_store() -> SessionStore:
    """Get or create the session store."""
    global _session_store

    if _session_store is not None:
        return _session_store

    if config.redis.enabled:
        redis_client = redis.from_url(config.redis.url)
        try:
            await redis_client.ping()
        except RedisError as exc:
            logger.warning("Redis unavailable at %s (%s), using in-memory sessions", config.redis.url, exc)
        else:
            logger.info("Using Redis session store at %s", config.redis.url)
            _session_store = RedisSessionStore(redis_client)
            return _session_store

    _session_store = InMemorySessionStore()
    return _session_store


async def create_session(data: dict[str, Any] | None = None) -> str:
    """Open a new session and return its signed token."""
    store = await get_session_store()
    await store.cleanup_expired()
    token = store.create_session_id()
    await store.set(token, data or {})
    return token


# Game persistence

def serialize_card(card: Card) -> dict[str, int]:
    """Serialize a card to a dict."""
    return {"rank": card.rank.value, "suit": card.suit.value}


def deserialize_card(data: dict[str, int]) -> Card:
    """Deserialize a card from a dict."""
    return Card(Rank(data["rank"]), Suit(data["suit"]))


def _serialize_optional_card(card: Card | None) -> dict[str, int] | None:
    return serialize_card(card) if card is not None else None


def _deserialize_optional_card(data: dict[str, int] | None) -> Card | None:
    return deserialize_card(data) if data is not None else None


def serialize_game(game: HigherLowerGame) -> dict[str, Any]:
    """Serialize game state for session storage."""
    data = GameStateData(
        state=game.state.name.lower(),
        round=game.round,
        current_card=_serialize_optional_card(game.current_card),
        next_card=_serialize_optional_card(game.next_card),
        revealed_card=_serialize_optional_card(game.revealed_card),
        picked_cards=[serialize_card(c) for c in game.picked_cards],
        deck_cards=[serialize_card(c) for c in game.deck],
        feedback=game.feedback,
    )
    return data.model_dump()


def deserialize_game(data: dict[str, Any]) -> HigherLowerGame:
    """
    Restore a game from session data.

    Raises:
        pydantic.ValidationError: If the stored data is malformed
    """
    saved = GameStateData.model_validate(data).model_dump()

    return HigherLowerGame.restore(
        Deck.from_cards(deserialize_card(c) for c in saved["deck_cards"]),
        status=GameStatus[saved["state"].upper()],
        round=saved["round"],
        current_card=_deserialize_optional_card(saved["current_card"]),
        next_card=_deserialize_optional_card(saved["next_card"]),
        picked_cards=[deserialize_card(c) for c in saved["picked_cards"]],
        revealed_card=_deserialize_optional_card(saved["revealed_card"]),
        feedback=saved["feedback"],
    )


async def load_game(token: str) -> HigherLowerGame | None:
    """Load the session's game, if it has one."""
    store = await get_session_store()
    session_data = await store.get(token)
    if session_data and SESSION_KEY_GAME in session_data:
        return deserialize_game(session_data[SESSION_KEY_GAME])
    return None


async def save_game(token: str, game: HigherLowerGame) -> None:
    """Save the session's game and refresh the session expiry."""
    store = await get_session_store()
    session_data = await store.get(token) or {}
    now = int(time.time())
    session_data[SESSION_KEY_GAME] = serialize_game(game)
    session_data[SESSION_KEY_LAST_ACTIVITY] = now
    session_data.setdefault(SESSION_KEY_CREATED_AT, now)
    await store.set(token, session_data)


async def get_game(token: str) -> HigherLowerGame:
    """Load the session's game, dealing a new one if it has none."""
    game = await load_game(token)
    if game is not None:
        return game

    logger.info("No saved game for session, dealing a new one")
    game = HigherLowerGame()
    await save_game(token, game)
    return game
