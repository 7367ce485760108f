"""FastAPI main application."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from callbridge import __version__
from callbridge.api.routes import router
from callbridge.config import settings
from callbridge.repositories.base import GameStore
from callbridge.repositories.game_repository import GameRepository
from callbridge.repositories.memory_store import InMemoryGameStore
from callbridge.services.game_feed import GameFeed
from callbridge.services.game_service import GameService
from callbridge.services.publisher_service import GAME_EVENTS_PATTERN, PublisherService

# Configure logging for the app (must be after imports but before app usage)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)
logging.getLogger("callbridge").setLevel(logging.INFO)
logger = logging.getLogger(__name__)


async def open_store() -> GameStore:
    """Connect to MongoDB, falling back to in-memory storage."""
    if settings.use_mongodb:
        repository = GameRepository(settings)
        try:
            await repository.connect()
        except (ConnectionError, TimeoutError, OSError, PyMongoError):
            # Catch MongoDB connection errors (ServerSelectionTimeoutError, etc.)
            logger.warning("MongoDB not available, using in-memory storage")
        else:
            return repository
    return InMemoryGameStore()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown events.

    Handles:
    - Game store connection (MongoDB or in-memory)
    - Redis connection and cross-instance subscription
    - Cleanup on shutdown
    """
    # Startup
    store = await open_store()
    publisher: PublisherService | None = None
    if settings.use_redis:
        publisher = PublisherService(settings)
        await publisher.connect()

    feed = GameFeed()
    service = GameService(
        store, feed, publisher if publisher and publisher.is_connected else None, settings
    )
    app.state.game_service = service

    # Setup Redis pub/sub for cross-instance events
    if publisher and publisher.is_connected:
        await publisher.subscribe(GAME_EVENTS_PATTERN, service.handle_remote_event)
        await publisher.start_subscriber()

    yield

    # Shutdown
    await service.close()
    if publisher:
        await publisher.close()
    await store.disconnect()


# Create FastAPI app
app = FastAPI(
    title="Call Bridge API",
    description="Four-player call bridge: online trick play and offline scoring history",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "callbridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info",
    )


if __name__ == "__main__":
    main()
