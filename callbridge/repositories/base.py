"""Store interface shared by the in-memory and MongoDB game stores."""

from abc import ABC, abstractmethod
from typing import Any

from callbridge.models.game import OnlineGame


class GameStore(ABC):
    """Versioned document store for online games.

    Every game document carries a ``version``. Writers read a game, change
    a copy and hand it back to ``compare_and_set`` with the version they
    read; the write only lands if nobody else committed in between.
    Games returned by the store are private copies.
    """

    async def connect(self) -> None:
        """Open the backing connection, if any."""

    async def disconnect(self) -> None:
        """Close the backing connection, if any."""

    @abstractmethod
    async def get(self, game_id: str) -> OnlineGame | None:
        """Load a game by id."""

    @abstractmethod
    async def insert(self, game: OnlineGame) -> None:
        """Store a new game at version 0.

        Raises:
            ConcurrencyConflict: A game with this id already exists

        """

    @abstractmethod
    async def compare_and_set(self, game: OnlineGame, expected_version: int) -> None:
        """Replace a game if its stored version still equals ``expected_version``.

        On success ``game.version`` is bumped to the stored version.

        Raises:
            GameNotFound: The game does not exist
            ConcurrencyConflict: Another write committed first

        """

    # Lobby of open public games

    @abstractmethod
    async def upsert_lobby(self, game_id: str, player_count: int) -> None:
        """Create or update an open-seat counter, keeping the larger count."""

    @abstractmethod
    async def delete_lobby(self, game_id: str) -> None:
        """Remove a game from the lobby."""

    @abstractmethod
    async def find_open_lobby(self) -> str | None:
        """Return the id of a public game with a free seat, if any."""

    # Archived offline results

    @abstractmethod
    async def archive_result(self, result: dict[str, Any]) -> str:
        """Store a finished offline game and return its history id."""

    @abstractmethod
    async def list_results(self, limit: int = 10) -> list[dict[str, Any]]:
        """Most recently finished offline games first."""
