"""Game lifecycle: creating, joining, starting and playing online games."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

from callbridge.bots import BOT_NAMES, RandomBot
from callbridge.config import Settings, settings as default_settings
from callbridge.errors import AlreadyStarted, GameError, GameFull, GameNotFound
from callbridge.models.card import Card
from callbridge.models.enums import GameStatus
from callbridge.models.game import GameSettings, OnlineGame
from callbridge.models.player import OnlinePlayer
from callbridge.models.trick import PlayedCard
from callbridge.repositories.base import GameStore
from callbridge.services.game_feed import GameFeed
from callbridge.services.game_serializer import serialize_public_game
from callbridge.services.publisher_service import PublisherService
from callbridge.services.transaction import run_transaction

logger = logging.getLogger(__name__)

GAME_UPDATED = "game_updated"
DEFAULT_PLAYER_NAME = "Anonymous"


class GameService:
    """Runs every online game action as a store transaction.

    After each commit the new public state goes to the local feed and,
    when connected, to Redis. Follow-up work (clearing a finished trick,
    bot moves) runs as background tasks owned by the service.
    """

    def __init__(
        self,
        store: GameStore,
        feed: GameFeed,
        publisher: PublisherService | None = None,
        config: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Game store
            feed: Local change feed
            publisher: Optional Redis publisher
            config: Settings, defaults to the global settings
            rng: Random source for deals and bots, system randomness if None

        """
        self.store = store
        self.feed = feed
        self.publisher = publisher
        self.settings = config or default_settings
        self.rng = rng
        self._bot_rng = rng or random.Random()  # noqa: S311
        self._tasks: set[asyncio.Task[None]] = set()

    # Creating & joining

    async def create_game(
        self,
        host: OnlinePlayer,
        is_private: bool = False,
        winning_score: int | None = None,
    ) -> str:
        """Create a game with the host at seat 0.

        Public games are listed in the lobby until they start.
        """
        _clean_name(host)
        game = OnlineGame(
            host_id=host.uid,
            settings=GameSettings(
                is_private=is_private,
                winning_score=winning_score or self.settings.default_winning_score,
            ),
        )
        game.assign_seat(host)
        await self.store.insert(game)
        if not is_private:
            await self.store.upsert_lobby(game.id, len(game.players))

        logger.info(
            "Game %s created by %s (%s)", game.id, host.name, "private" if is_private else "public"
        )
        await self._committed(game)
        return game.id

    async def create_game_with_bots(self, host: OnlinePlayer) -> str:
        """Create a private game against three bots and deal at once."""
        _clean_name(host)
        game = OnlineGame(host_id=host.uid, settings=GameSettings(is_private=True))
        game.assign_seat(host)
        for i, name in enumerate(BOT_NAMES, start=1):
            game.assign_seat(OnlinePlayer(uid=f"bot-{i}", name=name, is_bot=True))
        game.deal_and_assign(host.uid, self.rng)
        await self.store.insert(game)

        logger.info("Game %s created by %s against bots", game.id, host.name)
        await self._committed(game)
        return game.id

    async def join_game(self, game_id: str, player: OnlinePlayer) -> int:
        """Seat a player in a waiting game.

        Returns:
            The player's seat; the existing one if already seated

        Raises:
            GameNotFound, GameFull, AlreadyStarted

        """
        _clean_name(player)
        already_seated = False

        def mutate(game: OnlineGame) -> int | bool:
            nonlocal already_seated
            existing = game.get_player(player.uid)
            if existing is not None:
                already_seated = True
                return False
            return game.assign_seat(player)

        game, seat = await run_transaction(
            self.store, game_id, mutate, self.settings.max_transaction_retries
        )
        if already_seated:
            return game.require_player(player.uid).seat

        # Runs after the commit; the store keeps the highest count it has seen
        if not game.settings.is_private:
            await self.store.upsert_lobby(game.id, len(game.players))
        logger.info("Player %s joined game %s at seat %d", player.name, game.id, seat)
        await self._committed(game)
        return seat

    async def find_and_join_public_game(self, player: OnlinePlayer) -> str:
        """Join an open public game, or create one if none is waiting."""
        while (game_id := await self.store.find_open_lobby()) is not None:
            try:
                await self.join_game(game_id, player)
            except (GameFull, AlreadyStarted, GameNotFound) as e:
                # Stale lobby entry
                logger.info("Lobby entry %s is stale: %s", game_id, e.message)
                await self.store.delete_lobby(game_id)
                continue
            return game_id
        return await self.create_game(player, is_private=False)

    # Play

    async def deal_and_start(self, game_id: str, caller_uid: str) -> OnlineGame:
        """Deal the cards and start play. Only the host may do this.

        Raises:
            GameNotFound, NotHost, InsufficientPlayers, AlreadyStarted

        """
        game, _ = await run_transaction(
            self.store,
            game_id,
            lambda g: g.deal_and_assign(caller_uid, self.rng),
            self.settings.max_transaction_retries,
        )
        if not game.settings.is_private:
            await self.store.delete_lobby(game.id)
        logger.info("Game %s started", game.id)
        await self._committed(game)
        return game

    async def play_card(self, game_id: str, uid: str, card: Card) -> OnlineGame:
        """Play a card for a seated player.

        Raises:
            GameNotFound, NotSeated, InvalidPhase, NotYourTurn,
            CardNotInHand, MustFollowSuit, ConcurrencyConflict

        """
        game, winning = await run_transaction(
            self.store,
            game_id,
            lambda g: g.play_card(uid, card),
            self.settings.max_transaction_retries,
        )
        self._log_play(game, uid, card, winning)
        await self._committed(game)
        return game

    async def start_next_trick(self, game_id: str) -> bool:
        """Clear a scored trick. Does nothing unless the game is in trick scoring.

        Returns:
            True if the game moved on

        """
        game, advanced = await run_transaction(
            self.store,
            game_id,
            lambda g: g.start_next_trick(),
            self.settings.max_transaction_retries,
        )
        if not advanced:
            return False

        if game.status == GameStatus.ROUND_SCORING:
            logger.info("Game %s: round %d over", game.id, game.current_round)
        await self._committed(game)
        return True

    async def play_bot_turn(self, game_id: str) -> bool:
        """Play a random legal card if a bot holds the turn.

        Returns:
            True if a bot played

        """
        played: dict[str, Any] = {}

        def mutate(game: OnlineGame) -> PlayedCard | bool | None:
            if game.status != GameStatus.PLAYING:
                return False
            seat_player = game.get_player_by_seat(game.current_turn_seat)
            if seat_player is None or not seat_player.is_bot:
                return False
            card = RandomBot(seat_player.uid, self._bot_rng).choose(game)
            if card is None:
                return False
            played["uid"], played["card"] = seat_player.uid, card
            return game.play_card(seat_player.uid, card)

        game, winning = await run_transaction(
            self.store, game_id, mutate, self.settings.max_transaction_retries
        )
        if winning is False:
            return False

        self._log_play(game, played["uid"], played["card"], winning)
        await self._committed(game)
        return True

    # Reads

    async def get_game(self, game_id: str) -> OnlineGame:
        """Load a game.

        Raises:
            GameNotFound: The game does not exist

        """
        game = await self.store.get(game_id)
        if game is None:
            raise GameNotFound("Game not found!")
        return game

    async def get_public_state(self, game_id: str) -> dict[str, Any]:
        """Public view of a game, without hands."""
        return serialize_public_game(await self.get_game(game_id))

    async def get_hand(self, game_id: str, uid: str) -> tuple[list[Card], list[Card]]:
        """A seated player's hand and the cards they may play now.

        Raises:
            GameNotFound, NotSeated

        """
        game = await self.get_game(game_id)
        game.require_player(uid)
        return list(game.hand_of(uid)), game.legal_cards_for(uid)

    # Change notification

    async def handle_remote_event(
        self, event_type: str, game_id: str, data: dict[str, Any]
    ) -> None:
        """Relay a state committed on another instance to local subscribers."""
        if event_type == GAME_UPDATED and "game" in data:
            self.feed.publish(game_id, data["game"])

    async def _committed(self, game: OnlineGame) -> None:
        """Fan out a committed state and schedule follow-up work."""
        state = serialize_public_game(game)
        self.feed.publish(game.id, state)
        if self.publisher is not None:
            await self.publisher.publish_game_event(GAME_UPDATED, game.id, {"game": state})

        if game.status == GameStatus.TRICK_SCORING:
            self._schedule(self.settings.next_trick_delay_seconds, self.start_next_trick, game.id)
        elif game.status == GameStatus.PLAYING:
            turn = game.get_player_by_seat(game.current_turn_seat)
            if turn is not None and turn.is_bot:
                self._schedule(self.settings.bot_think_seconds, self.play_bot_turn, game.id)

    def _log_play(
        self, game: OnlineGame, uid: str, card: Card, winning: PlayedCard | None
    ) -> None:
        player = game.get_player(uid)
        logger.info("Player %s played %s in game %s", player.name if player else uid, card, game.id)
        if winning is not None:
            winner = game.get_player_by_seat(winning.seat)
            logger.info(
                "%s won trick %d in game %s with %s",
                winner.name if winner else f"Seat {winning.seat}",
                game.current_trick,
                game.id,
                winning.card,
            )

    # Background tasks

    def _schedule(
        self, delay: float, action: Callable[[str], Awaitable[Any]], game_id: str
    ) -> None:
        task = asyncio.create_task(self._run_later(delay, action, game_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_later(
        self, delay: float, action: Callable[[str], Awaitable[Any]], game_id: str
    ) -> None:
        await asyncio.sleep(delay)
        try:
            await action(game_id)
        except GameError as e:
            logger.warning("%s skipped for game %s: %s", action.__name__, game_id, e.message)
        except Exception:
            logger.exception("Background %s failed for game %s", action.__name__, game_id)

    async def wait_idle(self) -> None:
        """Wait until no scheduled work is left, including work it schedules."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Cancel scheduled work."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()


def _clean_name(player: OnlinePlayer) -> None:
    player.name = (player.name or "").strip() or DEFAULT_PLAYER_NAME
