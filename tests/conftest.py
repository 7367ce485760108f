"""Shared pytest fixtures."""

import random

import pytest

from callbridge.config import Settings
from callbridge.models.game import OnlineGame
from callbridge.models.player import OnlinePlayer
from callbridge.repositories.memory_store import InMemoryGameStore
from callbridge.services.game_feed import GameFeed
from callbridge.services.game_service import GameService


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def players():
    """Four unseated human players."""
    return [OnlinePlayer(uid=f"p{i}", name=f"Player {i}") for i in range(4)]


@pytest.fixture
def full_game(players):
    """A waiting game with four seated players, host at seat 0."""
    game = OnlineGame(host_id="p0")
    for player in players:
        game.assign_seat(player)
    return game


@pytest.fixture
def dealt_game(full_game):
    """A started game dealt with a fixed seed."""
    full_game.deal_and_assign("p0", random.Random(42))
    return full_game


@pytest.fixture
def fast_settings():
    """Settings with no pauses and no external backends."""
    return Settings(
        use_mongodb=False,
        use_redis=False,
        next_trick_delay_seconds=0,
        bot_think_seconds=0,
        _env_file=None,
    )


@pytest.fixture
def store():
    """Empty in-memory game store."""
    return InMemoryGameStore()


@pytest.fixture
def feed():
    """Empty game feed."""
    return GameFeed()


@pytest.fixture
def service(store, feed, fast_settings):
    """Game service over in-memory storage with no delays."""
    return GameService(store, feed, config=fast_settings, rng=random.Random(7))

