"""WebSocket change feed for watching a game."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import WebSocket, WebSocketDisconnect

from callbridge.errors import GameNotFound

if TYPE_CHECKING:
    from callbridge.services.game_service import GameService

logger = logging.getLogger(__name__)

# Close code when the game does not exist
CLOSE_GAME_NOT_FOUND = 4004


async def watch_game(websocket: WebSocket, service: GameService, game_id: str) -> None:
    """Stream public game states to a client until it disconnects.

    The current state is sent first, then every newer committed state.
    Clients may send ``{"command": "PING"}`` and receive a PONG.

    Args:
        websocket: WebSocket connection
        service: Game service owning the feed
        game_id: Game to watch

    """
    # Must accept before closing to avoid HTTP 403
    await websocket.accept()
    try:
        current = await service.get_public_state(game_id)
    except GameNotFound:
        await websocket.close(code=CLOSE_GAME_NOT_FOUND, reason="Game not found")
        return

    queue = service.feed.subscribe(game_id)
    if queue.empty():
        queue.put_nowait(current)
    sender = asyncio.create_task(_send_states(websocket, queue))
    logger.info("Watcher connected to game %s", game_id)

    try:
        while True:
            data = await websocket.receive_text()
            message = json.loads(data)
            if isinstance(message, dict) and message.get("command") == "PING":
                await websocket.send_json({"command": "PONG"})

    except WebSocketDisconnect:
        logger.info("Watcher disconnected from game %s", game_id)

    except (RuntimeError, ConnectionError, OSError, json.JSONDecodeError) as e:
        logger.warning("Error handling watcher message for game %s: %s", game_id, e)

    finally:
        service.feed.unsubscribe(game_id, queue)
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender


async def _send_states(websocket: WebSocket, queue: asyncio.Queue[dict[str, Any]]) -> None:
    """Forward queued states to the client."""
    while True:
        state = await queue.get()
        try:
            await websocket.send_json({"command": "GAME_STATE", "content": state})
        except (WebSocketDisconnect, RuntimeError, ConnectionError, OSError):
            return
