"""Pytest configuration for API tests."""

import random
from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from callbridge.api.routes import router
from callbridge.config import Settings
from callbridge.services.game_service import GameService


@pytest.fixture
def game_service(store, feed):
    """Service without external backends; follow-ups wait for explicit calls."""
    config = Settings(
        use_mongodb=False,
        use_redis=False,
        next_trick_delay_seconds=60,
        bot_think_seconds=60,
        _env_file=None,
    )
    return GameService(store, feed, config=config, rng=random.Random(3))


@pytest.fixture
def test_app(game_service):
    """Create a test FastAPI app without database or Redis dependencies."""

    @asynccontextmanager
    async def lifespan(_app):
        yield
        await game_service.close()

    app = FastAPI(lifespan=lifespan)
    app.include_router(router)
    app.state.game_service = game_service
    return app


@pytest.fixture
def client(test_app):
    """Create a test client."""
    with TestClient(test_app, raise_server_exceptions=False) as client:
        yield client
