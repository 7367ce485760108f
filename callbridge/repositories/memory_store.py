"""In-memory game store, used when MongoDB is not available and in tests."""

import asyncio
import logging
import uuid
from typing import Any

from callbridge.constants import NUM_SEATS
from callbridge.errors import ConcurrencyConflict, GameNotFound
from callbridge.models.game import OnlineGame
from callbridge.repositories.base import GameStore
from callbridge.services.game_serializer import deserialize_game, serialize_game

logger = logging.getLogger(__name__)


class InMemoryGameStore(GameStore):
    """Process-local store with the same compare-and-set contract as MongoDB.

    Games are kept as serialized documents so callers never share objects
    with the store.
    """

    def __init__(self) -> None:
        """Initialize empty collections."""
        self._games: dict[str, dict[str, Any]] = {}
        self._lobby: dict[str, int] = {}
        self._history: list[dict[str, Any]] = []
        self._lock = asyncio.Lock()

    async def get(self, game_id: str) -> OnlineGame | None:
        """Load a game by id."""
        async with self._lock:
            doc = self._games.get(game_id)
        return deserialize_game(doc) if doc else None

    async def insert(self, game: OnlineGame) -> None:
        """Store a new game at version 0."""
        async with self._lock:
            if game.id in self._games:
                raise ConcurrencyConflict(f"Game {game.id} already exists.")
            game.version = 0
            self._games[game.id] = serialize_game(game)
        logger.debug("Game %s inserted", game.id)

    async def compare_and_set(self, game: OnlineGame, expected_version: int) -> None:
        """Replace a game if nobody else wrote it since ``expected_version``."""
        async with self._lock:
            current = self._games.get(game.id)
            if current is None:
                raise GameNotFound("Game not found.")
            if current["version"] != expected_version:
                raise ConcurrencyConflict(
                    f"Game {game.id} is at version {current['version']}, expected {expected_version}."
                )
            game.version = expected_version + 1
            self._games[game.id] = serialize_game(game)

    async def upsert_lobby(self, game_id: str, player_count: int) -> None:
        """Create or update an open-seat counter. The count never goes down."""
        async with self._lock:
            self._lobby[game_id] = max(self._lobby.get(game_id, 0), player_count)

    async def delete_lobby(self, game_id: str) -> None:
        """Remove a game from the lobby."""
        async with self._lock:
            self._lobby.pop(game_id, None)

    async def find_open_lobby(self) -> str | None:
        """Return the id of a public game with a free seat, if any."""
        async with self._lock:
            for game_id, count in self._lobby.items():
                if count < NUM_SEATS:
                    return game_id
        return None

    async def archive_result(self, result: dict[str, Any]) -> str:
        """Store a finished offline game and return its history id."""
        history_id = uuid.uuid4().hex
        async with self._lock:
            self._history.append({**result, "_id": history_id})
        return history_id

    async def list_results(self, limit: int = 10) -> list[dict[str, Any]]:
        """Most recently finished offline games first."""
        async with self._lock:
            ordered = sorted(self._history, key=lambda r: r.get("finishedAt") or "", reverse=True)
        return [dict(r) for r in ordered[:limit]]
