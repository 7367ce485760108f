"""Tests for the online game lifecycle service."""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from callbridge.config import Settings
from callbridge.errors import (
    AlreadyStarted,
    CardNotInHand,
    GameFull,
    GameNotFound,
    NotHost,
    NotSeated,
    NotYourTurn,
)
from callbridge.models.enums import GameStatus
from callbridge.models.game import OnlineGame
from callbridge.models.player import OnlinePlayer
from callbridge.services.game_service import GameService

pytestmark = pytest.mark.anyio


def _player(uid: str, name: str = "") -> OnlinePlayer:
    return OnlinePlayer(uid=uid, name=name or uid.title())


@pytest.fixture
def slow_service(store, feed):
    """A service whose scheduled work never runs during a test."""
    config = Settings(
        use_mongodb=False,
        use_redis=False,
        next_trick_delay_seconds=60,
        bot_think_seconds=60,
        _env_file=None,
    )
    return GameService(store, feed, config=config, rng=random.Random(11))


async def _full_game(service: GameService) -> str:
    game_id = await service.create_game(_player("p0"))
    for i in range(1, 4):
        await service.join_game(game_id, _player(f"p{i}"))
    return game_id


async def _play_trick(service: GameService, game_id: str) -> OnlineGame:
    game = await service.get_game(game_id)
    for _ in range(4):
        uid = game.get_player_by_seat(game.current_turn_seat).uid
        game = await service.play_card(game_id, uid, game.legal_cards_for(uid)[0])
    return game


class TestCreateAndJoin:
    """Tests for creating and joining games."""

    async def test_create_public_game(self, service, store, feed):
        """The host sits at seat 0 and the game is listed in the lobby."""
        game_id = await service.create_game(_player("p0", "Host"))

        game = await service.get_game(game_id)
        assert game.status == GameStatus.WAITING
        assert game.host_id == "p0"
        assert game.get_player("p0").seat == 0
        assert game.settings.winning_score == 50
        assert await store.find_open_lobby() == game_id
        assert feed.subscribe(game_id).get_nowait()["id"] == game_id

    async def test_create_private_game_skips_lobby(self, service, store):
        """Private games are only reachable by id."""
        await service.create_game(_player("p0"), is_private=True, winning_score=30)
        assert await store.find_open_lobby() is None

    async def test_blank_name_gets_default(self, service):
        """Players without a name are shown as Anonymous."""
        game_id = await service.create_game(OnlinePlayer(uid="p0", name="  "))
        assert (await service.get_game(game_id)).players[0].name == "Anonymous"

    async def test_join_fills_seats_and_lobby_count(self, service, store):
        """Joining players take the next seats; a full game leaves the lobby search."""
        game_id = await service.create_game(_player("p0"))
        seats = [await service.join_game(game_id, _player(f"p{i}")) for i in range(1, 4)]

        assert seats == [1, 2, 3]
        assert await store.find_open_lobby() is None

    async def test_rejoin_is_noop(self, service):
        """Joining twice returns the same seat and writes nothing."""
        game_id = await service.create_game(_player("p0"))
        await service.join_game(game_id, _player("p1"))
        version = (await service.get_game(game_id)).version

        assert await service.join_game(game_id, _player("p1")) == 1
        assert (await service.get_game(game_id)).version == version

    async def test_join_errors(self, service):
        """Unknown and full games cannot be joined."""
        with pytest.raises(GameNotFound):
            await service.join_game("missing", _player("p1"))

        game_id = await _full_game(service)
        with pytest.raises(GameFull):
            await service.join_game(game_id, _player("p4"))

    async def test_quick_join_creates_then_joins(self, service):
        """The first player creates a public game, the next one joins it."""
        first = await service.find_and_join_public_game(_player("a"))
        second = await service.find_and_join_public_game(_player("b"))

        assert first == second
        game = await service.get_game(first)
        assert [p.uid for p in game.players] == ["a", "b"]

    async def test_quick_join_skips_stale_lobby_entry(self, service, store):
        """A lobby entry for a game that can no longer be joined is dropped."""
        game_id = await _full_game(service)
        await store.upsert_lobby(game_id, 3)

        joined = await service.find_and_join_public_game(_player("late"))
        assert joined != game_id
        assert (await service.get_game(joined)).host_id == "late"


class TestDealAndStart:
    """Tests for starting games."""

    async def test_only_host_can_start(self, service):
        """Other players cannot deal."""
        game_id = await _full_game(service)
        with pytest.raises(NotHost):
            await service.deal_and_start(game_id, "p1")
        assert (await service.get_game(game_id)).status == GameStatus.WAITING

    async def test_start_deals_and_leaves_lobby(self, service, store):
        """Starting deals 13 cards each and removes the lobby entry."""
        game_id = await service.create_game(_player("p0"))
        await store.upsert_lobby("other", 1)
        for i in range(1, 4):
            await service.join_game(game_id, _player(f"p{i}"))
        await store.upsert_lobby(game_id, 3)

        game = await service.deal_and_start(game_id, "p0")

        assert game.status == GameStatus.PLAYING
        assert game.current_turn_seat == 0
        assert all(len(game.hand_of(p.uid)) == 13 for p in game.players)
        assert await store.find_open_lobby() == "other"
        with pytest.raises(AlreadyStarted):
            await service.deal_and_start(game_id, "p0")


class TestPlay:
    """Tests for trick play through the service."""

    async def test_rejected_play_writes_nothing(self, service):
        """Rule violations leave the stored game unchanged."""
        game_id = await _full_game(service)
        game = await service.deal_and_start(game_id, "p0")
        version = game.version

        with pytest.raises(NotYourTurn):
            await service.play_card(game_id, "p1", game.hand_of("p1")[0])
        with pytest.raises(CardNotInHand):
            await service.play_card(game_id, "p0", game.hand_of("p1")[0])
        with pytest.raises(NotSeated):
            await service.play_card(game_id, "ghost", game.hand_of("p0")[0])

        assert (await service.get_game(game_id)).version == version

    async def test_completed_trick_advances_after_delay(self, service):
        """The server clears a scored trick on its own."""
        game_id = await _full_game(service)
        await service.deal_and_start(game_id, "p0")

        game = await _play_trick(service, game_id)
        assert game.status == GameStatus.TRICK_SCORING

        await service.wait_idle()
        game = await service.get_game(game_id)
        assert game.status == GameStatus.PLAYING
        assert game.current_trick == 2
        assert game.cards_on_table == []
        assert game.current_turn_seat == game.last_trick_winner_seat

    async def test_next_trick_is_idempotent(self, slow_service):
        """A second request to clear the table does nothing."""
        game_id = await _full_game(slow_service)
        await slow_service.deal_and_start(game_id, "p0")
        await _play_trick(slow_service, game_id)

        assert await slow_service.start_next_trick(game_id) is True
        version = (await slow_service.get_game(game_id)).version
        assert await slow_service.start_next_trick(game_id) is False
        assert (await slow_service.get_game(game_id)).version == version
        await slow_service.close()

    async def test_get_hand(self, service):
        """Players see their own hand and the cards they may play."""
        game_id = await _full_game(service)
        await service.deal_and_start(game_id, "p0")

        hand, legal = await service.get_hand(game_id, "p0")
        assert len(hand) == 13
        assert legal == hand
        with pytest.raises(NotSeated):
            await service.get_hand(game_id, "ghost")

    async def test_public_state_hides_hands(self, service):
        """The public view never carries hands."""
        game_id = await _full_game(service)
        await service.deal_and_start(game_id, "p0")
        state = await service.get_public_state(game_id)
        assert "hands" not in state
        assert state["status"] == "playing"


class TestBots:
    """Tests for games against bots."""

    async def test_create_with_bots_deals_immediately(self, slow_service):
        """The host faces three bots and leads the first trick."""
        game_id = await slow_service.create_game_with_bots(_player("host", "Hana"))

        game = await slow_service.get_game(game_id)
        assert game.status == GameStatus.PLAYING
        assert game.settings.is_private
        assert game.current_turn_seat == 0
        assert [p.is_bot for p in game.players] == [False, True, True, True]
        assert [p.uid for p in game.players[1:]] == ["bot-1", "bot-2", "bot-3"]
        assert all(len(game.hand_of(p.uid)) == 13 for p in game.players)
        await slow_service.close()

    async def test_bots_play_a_whole_round(self, service):
        """Bots answer every human move until the round is over."""
        game_id = await service.create_game_with_bots(_player("host"))

        for _ in range(13):
            game = await service.get_game(game_id)
            if game.status == GameStatus.ROUND_SCORING:
                break
            assert game.status == GameStatus.PLAYING
            assert game.current_turn_seat == 0
            await service.play_card(game_id, "host", game.legal_cards_for("host")[0])
            await service.wait_idle()

        game = await service.get_game(game_id)
        assert game.status == GameStatus.ROUND_SCORING
        assert game.cards_in_play() == 0
        assert sum(p.tricks_won for p in game.players) == 13

    async def test_bot_turn_ignores_human_seat(self, slow_service):
        """No bot moves while a human holds the turn."""
        game_id = await slow_service.create_game_with_bots(_player("host"))
        assert await slow_service.play_bot_turn(game_id) is False
        await slow_service.close()


class TestNotifications:
    """Tests for change fan-out."""

    async def test_commits_are_published(self, store, feed, fast_settings):
        """Every commit goes to the feed and to Redis."""
        publisher = MagicMock()
        publisher.publish_game_event = AsyncMock(return_value=True)
        service = GameService(store, feed, publisher, fast_settings)

        game_id = await service.create_game(_player("p0"))
        queue = feed.subscribe(game_id)
        await service.join_game(game_id, _player("p1"))

        state = queue.get_nowait()
        assert [p["uid"] for p in state["players"]] == ["p0", "p1"]
        assert publisher.publish_game_event.await_count == 2
        event, published_id, data = publisher.publish_game_event.call_args.args
        assert event == "game_updated"
        assert published_id == game_id
        assert "hands" not in data["game"]

    async def test_remote_event_reaches_local_feed(self, service, feed):
        """States committed elsewhere are relayed to local watchers."""
        queue = feed.subscribe("g9")
        state = {"id": "g9", "version": 3}
        await service.handle_remote_event("game_updated", "g9", {"game": state})
        assert queue.get_nowait()["version"] == 3

        await service.handle_remote_event("something_else", "g9", {"game": {"version": 4}})
        assert queue.empty()

    async def test_close_cancels_scheduled_work(self, slow_service):
        """Pending follow-ups are dropped on shutdown."""
        game_id = await _full_game(slow_service)
        await slow_service.deal_and_start(game_id, "p0")
        await _play_trick(slow_service, game_id)

        await slow_service.close()
        await slow_service.wait_idle()
        assert (await slow_service.get_game(game_id)).status == GameStatus.TRICK_SCORING
