"""Game repository for MongoDB persistence."""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from callbridge.config import Settings, settings as default_settings
from callbridge.constants import NUM_SEATS
from callbridge.errors import ConcurrencyConflict, GameNotFound
from callbridge.models.game import OnlineGame
from callbridge.repositories.base import GameStore
from callbridge.services.game_serializer import deserialize_game, serialize_game

logger = logging.getLogger(__name__)


class GameRepository(GameStore):
    """Repository for game persistence using MongoDB.

    Collections:
    - games: one document per online game, private hands included
    - lobby: open-seat counters of public games
    - history: archived finished offline games

    Writes use a version guard in the replace filter so concurrent
    actions on the same game cannot both commit.
    """

    def __init__(self, config: Settings | None = None) -> None:
        """Initialize repository."""
        self.settings = config or default_settings
        self.client: AsyncIOMotorClient[dict[str, Any]] | None = None
        self.db: AsyncIOMotorDatabase[dict[str, Any]] | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and create indexes."""
        try:
            self.client = AsyncIOMotorClient(
                self.settings.mongodb_uri,
                serverSelectionTimeoutMS=2000,  # 2 second timeout
            )
            self.db = self.client[self.settings.mongodb_database]

            # Verify connection
            await self.client.admin.command("ping")
            logger.info("Connected to MongoDB: %s", self.settings.mongodb_database)

            await self._create_indexes()

        except PyMongoError:
            logger.warning("MongoDB not available")
            raise

    async def _create_indexes(self) -> None:
        """Create indexes for efficient queries."""
        if self.db is None:
            return

        try:
            # Index on status for finding active games
            await self.db.games.create_index("status")

            # Lobby lookups by free seats
            await self.db.lobby.create_index([("playerCount", ASCENDING)])

            # History listing, newest first
            await self.db.history.create_index([("finishedAt", DESCENDING)])

            logger.info("MongoDB indexes created successfully")
        except PyMongoError:
            logger.exception("Error creating indexes")

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def _database(self) -> AsyncIOMotorDatabase[dict[str, Any]]:
        if self.db is None:
            raise RuntimeError("GameRepository is not connected")
        return self.db

    async def get(self, game_id: str) -> OnlineGame | None:
        """Find and restore a game by ID.

        Args:
            game_id: Game identifier

        Returns:
            Restored OnlineGame instance or None
        """
        try:
            result = await self._database().games.find_one({"_id": game_id})
        except PyMongoError:
            logger.exception("Error finding game %s", game_id)
            raise
        if result:
            return deserialize_game(result)
        return None

    async def insert(self, game: OnlineGame) -> None:
        """Save a new game to the database.

        Args:
            game: Game instance to save

        """
        game.version = 0
        try:
            await self._database().games.insert_one(serialize_game(game))
        except DuplicateKeyError as e:
            raise ConcurrencyConflict(f"Game {game.id} already exists.") from e
        except PyMongoError:
            logger.exception("Error saving game %s", game.id)
            raise
        logger.debug("Game %s saved to database", game.id)

    async def compare_and_set(self, game: OnlineGame, expected_version: int) -> None:
        """Replace a game only if its stored version is ``expected_version``.

        Args:
            game: Updated game instance
            expected_version: Version the update was computed from

        """
        db = self._database()
        new_version = expected_version + 1
        document = serialize_game(game)
        document["version"] = new_version

        try:
            result = await db.games.replace_one(
                {"_id": game.id, "version": expected_version},
                document,
            )
            if result.matched_count == 0:
                exists = await db.games.count_documents({"_id": game.id}, limit=1)
                if not exists:
                    raise GameNotFound("Game not found.")
                raise ConcurrencyConflict(f"Game {game.id} changed since version {expected_version}.")
        except PyMongoError:
            logger.exception("Error updating game %s", game.id)
            raise

        game.version = new_version

    async def upsert_lobby(self, game_id: str, player_count: int) -> None:
        """Create or update an open-seat counter.

        Writes from joins that committed earlier may arrive late, so the
        stored count only moves up.

        Args:
            game_id: Game identifier
            player_count: Players currently seated

        """
        try:
            await self._database().lobby.update_one(
                {"_id": game_id},
                {"$set": {"gameId": game_id}, "$max": {"playerCount": player_count}},
                upsert=True,
            )
        except PyMongoError:
            logger.exception("Error updating lobby for game %s", game_id)

    async def delete_lobby(self, game_id: str) -> None:
        """Remove a game from the lobby."""
        try:
            await self._database().lobby.delete_one({"_id": game_id})
        except PyMongoError:
            logger.exception("Error removing game %s from lobby", game_id)

    async def find_open_lobby(self) -> str | None:
        """Return the id of a public game with a free seat, if any."""
        try:
            result = await self._database().lobby.find_one({"playerCount": {"$lt": NUM_SEATS}})
        except PyMongoError:
            logger.exception("Error searching lobby")
            return None
        return result["gameId"] if result else None

    async def archive_result(self, result: dict[str, Any]) -> str:
        """Store a finished offline game.

        Args:
            result: Serialized finished scoresheet

        Returns:
            History document id
        """
        try:
            inserted = await self._database().history.insert_one(dict(result))
        except PyMongoError:
            logger.exception("Error archiving game %s", result.get("id"))
            raise
        logger.info("Game result saved with ID: %s", inserted.inserted_id)
        return str(inserted.inserted_id)

    async def list_results(self, limit: int = 10) -> list[dict[str, Any]]:
        """Find the most recently finished offline games.

        Args:
            limit: Maximum number of games to return

        Returns:
            Archived results, newest first
        """
        try:
            cursor = self._database().history.find({}).sort("finishedAt", DESCENDING).limit(limit)
            results = []
            async for doc in cursor:
                doc["_id"] = str(doc["_id"])
                results.append(doc)
        except PyMongoError:
            logger.exception("Error listing game history")
            return []
        else:
            return results
