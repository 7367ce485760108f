"""Redis publisher service for game updates.

When several API instances serve the same games, each committed game state
is broadcast through Redis so every instance can refresh its local
subscribers.
"""

import asyncio
import contextlib
import json
import logging
import time
import uuid
from collections.abc import Callable, Coroutine
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from callbridge.config import Settings, settings as default_settings
from callbridge.constants import REDIS_PUBLISH_TIMEOUT

logger = logging.getLogger(__name__)

# Type for event handlers
EventHandler = Callable[[str, str, dict[str, Any]], Coroutine[Any, Any, None]]

GAME_EVENTS_PATTERN = "game_events:*"


class PublisherService:
    """Publishes and subscribes to game events via Redis pub/sub.

    Without a reachable Redis every call is a quiet no-op, so a single
    instance works without it.
    """

    def __init__(self, config: Settings | None = None) -> None:
        """Initialize publisher service."""
        self.settings = config or default_settings
        self.redis_client: redis.Redis | None = None
        self.pubsub: redis.client.PubSub | None = None
        self._handlers: dict[str, list[EventHandler]] = {}
        self._subscriber_task: asyncio.Task[None] | None = None
        self._running = False
        self._instance_id = f"instance_{uuid.uuid4().hex[:8]}"

    async def connect(self) -> None:
        """Connect to Redis and verify connection."""
        try:
            self.redis_client = redis.from_url(
                self.settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            await self.redis_client.ping()
            logger.info("Connected to Redis (instance: %s)", self._instance_id)
        except (RedisError, TimeoutError, OSError):
            logger.warning("Redis not available, running without pub/sub")
            self.redis_client = None

    async def publish(self, channel: str, message: dict[str, Any]) -> bool:
        """Publish message to Redis channel.

        Args:
            channel: Channel name
            message: Message payload

        Returns:
            True if successful

        """
        if not self.redis_client:
            return False

        try:
            # Tag with our instance id so we can skip our own echoes
            payload = json.dumps({**message, "_instance_id": self._instance_id})
            await asyncio.wait_for(
                self.redis_client.publish(channel, payload), timeout=REDIS_PUBLISH_TIMEOUT
            )
            logger.debug("Published message to channel %s", channel)
        except (RedisError, TypeError, TimeoutError):
            logger.exception("Error publishing message")
            return False
        else:
            return True

    async def publish_game_event(
        self,
        event_type: str,
        game_id: str,
        data: dict[str, Any],
    ) -> bool:
        """Publish a game event to Redis.

        Args:
            event_type: Type of event (e.g. "game_updated")
            game_id: Game identifier
            data: Event data

        Returns:
            True if successful
        """
        message = {
            "event": event_type,
            "game_id": game_id,
            "data": data,
            "timestamp": time.time(),
        }
        return await self.publish(f"game_events:{game_id}", message)

    async def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Register a handler for a channel pattern.

        Args:
            pattern: Channel pattern (e.g. "game_events:*")
            handler: ``async def handler(event_type, game_id, data)``
        """
        self._handlers.setdefault(pattern, []).append(handler)
        logger.info("Registered handler for pattern: %s", pattern)

    async def start_subscriber(self) -> None:
        """Start the background subscriber task."""
        if not self.redis_client or self._running:
            return

        self._running = True
        self.pubsub = self.redis_client.pubsub()

        for pattern in self._handlers:
            await self.pubsub.psubscribe(pattern)
            logger.info("Subscribed to pattern: %s", pattern)

        self._subscriber_task = asyncio.create_task(self._subscriber_loop())
        logger.info("Redis subscriber started")

    async def _subscriber_loop(self) -> None:
        """Background loop processing incoming messages."""
        while self._running and self.pubsub:
            try:
                message = await self.pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )
                if message and message["type"] == "pmessage":
                    await self._handle_message(message)

            except asyncio.CancelledError:
                break
            except (RedisError, ConnectionError):
                logger.warning("Redis connection lost, retrying in 5s")
                await asyncio.sleep(5)
            except Exception:
                logger.exception("Error in subscriber loop")
                await asyncio.sleep(1)

    async def _handle_message(self, message: dict[str, Any]) -> None:
        """Dispatch one pub/sub message to the handlers of its pattern.

        Args:
            message: Redis pub/sub message
        """
        try:
            data = json.loads(message.get("data") or "{}")
        except json.JSONDecodeError:
            logger.warning("Invalid JSON in pub/sub message")
            return

        if data.get("_instance_id") == self._instance_id:
            return

        pattern = message.get("pattern", "")
        event_type = data.get("event", "unknown")
        game_id = data.get("game_id", "")
        logger.debug("Received event %s for game %s", event_type, game_id)

        for handler in self._handlers.get(pattern, []):
            try:
                await handler(event_type, game_id, data.get("data", {}))
            except Exception:
                logger.exception("Error in event handler")

    async def stop_subscriber(self) -> None:
        """Stop the background subscriber task."""
        self._running = False

        if self._subscriber_task:
            self._subscriber_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._subscriber_task
            self._subscriber_task = None

        if self.pubsub:
            await self.pubsub.aclose()
            self.pubsub = None

    async def close(self) -> None:
        """Close Redis connection."""
        await self.stop_subscriber()

        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("Redis connection closed")

    @property
    def is_connected(self) -> bool:
        """Check if Redis is connected."""
        return self.redis_client is not None
