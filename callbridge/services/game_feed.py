"""In-process change feed for game documents."""

import asyncio
import logging
from typing import Any

logger = logging.getLogger(__name__)


class GameFeed:
    """Pushes committed public game states to local subscribers.

    Each subscriber owns a queue of size one holding only the latest
    state: a slow subscriber skips intermediate versions but always ends
    up on the most recent commit.
    """

    def __init__(self) -> None:
        """Initialize with no subscribers."""
        # game_id -> subscriber queues
        self._subscribers: dict[str, set[asyncio.Queue[dict[str, Any]]]] = {}
        self._latest: dict[str, dict[str, Any]] = {}

    def subscribe(self, game_id: str) -> asyncio.Queue[dict[str, Any]]:
        """Register a subscriber. The last known state, if any, is queued at once."""
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=1)
        self._subscribers.setdefault(game_id, set()).add(queue)
        if game_id in self._latest:
            queue.put_nowait(self._latest[game_id])
        logger.debug("Subscriber added to game %s", game_id)
        return queue

    def unsubscribe(self, game_id: str, queue: asyncio.Queue[dict[str, Any]]) -> None:
        """Remove a subscriber."""
        queues = self._subscribers.get(game_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            del self._subscribers[game_id]

    def publish(self, game_id: str, state: dict[str, Any]) -> int:
        """Deliver a committed state, dropping older versions.

        States older than the last published version are ignored.

        Returns:
            Number of subscribers notified
        """
        previous = self._latest.get(game_id)
        if previous is not None and previous.get("version", 0) > state.get("version", 0):
            return 0
        self._latest[game_id] = state

        notified = 0
        for queue in self._subscribers.get(game_id, set()):
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(state)
            notified += 1
        return notified

    def subscriber_count(self, game_id: str) -> int:
        """Get the number of subscribers for a game."""
        return len(self._subscribers.get(game_id, ()))
