"""Optimistic read-validate-write transactions over a game store."""

import logging
from collections.abc import Callable
from typing import TypeVar

from callbridge.errors import ConcurrencyConflict, GameNotFound
from callbridge.models.game import OnlineGame
from callbridge.repositories.base import GameStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_transaction(
    store: GameStore,
    game_id: str,
    mutate: Callable[[OnlineGame], T],
    max_retries: int = 5,
) -> tuple[OnlineGame, T]:
    """Apply ``mutate`` to a game atomically.

    The game is read, ``mutate`` runs against that private copy and the
    result is written back only if the stored version has not moved. On a
    conflict the whole read-mutate-write cycle is retried.

    ``mutate`` may raise a ``GameError`` to abort; nothing is written. If it
    returns ``False`` the game is treated as unchanged and no write happens.

    Args:
        store: Game store
        game_id: Game identifier
        mutate: Function validating and changing the game
        max_retries: Attempts before giving up on conflicts

    Returns:
        Tuple of (committed game, value returned by ``mutate``)

    Raises:
        GameNotFound: The game does not exist
        ConcurrencyConflict: Every attempt lost to another writer

    """
    attempts = max(1, max_retries)
    for attempt in range(1, attempts + 1):
        game = await store.get(game_id)
        if game is None:
            raise GameNotFound("Game not found!")

        expected_version = game.version
        result = mutate(game)
        if result is False:
            return game, result

        try:
            await store.compare_and_set(game, expected_version)
        except ConcurrencyConflict:
            logger.warning(
                "Write conflict on game %s (attempt %d/%d)", game_id, attempt, attempts
            )
            if attempt == attempts:
                raise
            continue
        return game, result

    raise ConcurrencyConflict(f"Could not update game {game_id}.")
