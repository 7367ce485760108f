"""Tests for the in-process change feed."""

import pytest

from callbridge.services.game_feed import GameFeed

pytestmark = pytest.mark.anyio


async def test_subscriber_receives_published_state():
    """A published state reaches every subscriber of the game."""
    feed = GameFeed()
    first = feed.subscribe("g1")
    second = feed.subscribe("g1")
    other = feed.subscribe("g2")

    assert feed.publish("g1", {"id": "g1", "version": 1}) == 2
    assert (await first.get())["version"] == 1
    assert (await second.get())["version"] == 1
    assert other.empty()


async def test_late_subscriber_gets_latest_state():
    """Subscribing after a commit delivers that commit at once."""
    feed = GameFeed()
    feed.publish("g1", {"version": 3})
    queue = feed.subscribe("g1")
    assert queue.get_nowait() == {"version": 3}


async def test_slow_subscriber_keeps_only_latest():
    """Unread states are replaced by newer ones."""
    feed = GameFeed()
    queue = feed.subscribe("g1")
    for version in range(1, 5):
        feed.publish("g1", {"version": version})
    assert queue.qsize() == 1
    assert queue.get_nowait() == {"version": 4}


async def test_older_versions_are_dropped():
    """A stale state never overwrites a newer one."""
    feed = GameFeed()
    queue = feed.subscribe("g1")
    feed.publish("g1", {"version": 5})
    assert feed.publish("g1", {"version": 4}) == 0
    assert queue.get_nowait() == {"version": 5}


async def test_unsubscribe():
    """Removed subscribers stop receiving states."""
    feed = GameFeed()
    queue = feed.subscribe("g1")
    assert feed.subscriber_count("g1") == 1
    feed.unsubscribe("g1", queue)
    feed.unsubscribe("g1", queue)
    assert feed.subscriber_count("g1") == 0
    assert feed.publish("g1", {"version": 1}) == 0
