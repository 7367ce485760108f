"""Offline scorekeeping session persisted to the local store."""

import logging
from collections.abc import Sequence
from typing import Any

from callbridge.constants import (
    DEFAULT_WINNING_SCORE,
    LOCAL_STATE_KEY,
    TOTAL_ROUNDS,
    UNARCHIVED_KEY,
)
from callbridge.models.enums import Outcome
from callbridge.models.scoresheet import Scoresheet
from callbridge.repositories.base import GameStore
from callbridge.services.game_serializer import (
    deserialize_scoresheet,
    serialize_result,
    serialize_scoresheet,
)
from callbridge.services.local_store import LocalStore

logger = logging.getLogger(__name__)


class ScoresheetSession:
    """One device's offline game.

    The active sheet is saved after every change and restored when a new
    session is opened on the same store. A finished sheet moves to a local
    queue of unarchived results and stays there until the game store has
    accepted it.
    """

    def __init__(self, local_store: LocalStore, game_store: GameStore | None = None) -> None:
        """Initialize the session, restoring a saved game if there is one."""
        self.local_store = local_store
        self.game_store = game_store
        data = local_store.get(UNARCHIVED_KEY) or {}
        self.pending_results: list[dict[str, Any]] = data.get("results", [])
        self.sheet = self._load()

    def _load(self) -> Scoresheet:
        data = self.local_store.get(LOCAL_STATE_KEY)
        if not data:
            return Scoresheet.reset_game()
        sheet = deserialize_scoresheet(data)
        if sheet.is_game_active and not sheet.is_finished():
            logger.info("Restored offline game %s at round %d", sheet.id, sheet.round)
            return sheet
        return Scoresheet.reset_game()

    def _persist(self) -> None:
        """Save an active sheet, or queue its result once the game is over."""
        if self.sheet.is_finished():
            self.pending_results.append(serialize_result(self.sheet))
            self._save_pending()
            self.local_store.delete(LOCAL_STATE_KEY)
        elif self.sheet.is_game_active:
            self.local_store.set(LOCAL_STATE_KEY, serialize_scoresheet(self.sheet))

    def _save_pending(self) -> None:
        if self.pending_results:
            self.local_store.set(UNARCHIVED_KEY, {"results": self.pending_results})
        else:
            self.local_store.delete(UNARCHIVED_KEY)

    def start_game(
        self,
        names: Sequence[str],
        winning_score: int = DEFAULT_WINNING_SCORE,
        tag: str | None = None,
        total_rounds: int = TOTAL_ROUNDS,
    ) -> Scoresheet:
        """Start a new game, replacing any saved one."""
        self.sheet = Scoresheet.start_game(names, winning_score, tag, total_rounds)
        self._persist()
        return self.sheet

    def submit_calls(self, calls: Sequence[int]) -> Scoresheet:
        """Record the round's calls."""
        self.sheet.submit_calls(calls)
        self._persist()
        return self.sheet

    def submit_made(self, made: Sequence[int]) -> Scoresheet:
        """Record tricks made in round 1."""
        self.sheet.submit_made(made)
        self._persist()
        return self.sheet

    def submit_outcomes(self, outcomes: Sequence[Outcome | str]) -> Scoresheet:
        """Record won/lost for each player."""
        self.sheet.submit_outcomes(outcomes)
        self._persist()
        return self.sheet

    def reset_game(self) -> Scoresheet:
        """Discard the current game."""
        self.sheet = Scoresheet.reset_game()
        self.local_store.delete(LOCAL_STATE_KEY)
        logger.info("Offline game reset")
        return self.sheet

    async def archive(self) -> list[str]:
        """Send queued finished games to the shared history.

        Each result leaves the local queue only once the game store has
        stored it. A store error stops the run and propagates, leaving the
        remaining results queued.

        Returns:
            History ids of the games archived by this call

        """
        if self.game_store is None:
            return []
        archived = []
        while self.pending_results:
            result = self.pending_results[0]
            history_id = await self.game_store.archive_result(result)
            logger.info("Archived offline game %s as %s", result.get("id"), history_id)
            self.pending_results.pop(0)
            self._save_pending()
            archived.append(history_id)
        return archived

    async def history(self, limit: int = 10) -> list[dict[str, Any]]:
        """Recently finished games, newest first."""
        if self.game_store is None:
            return []
        return await self.game_store.list_results(limit)
