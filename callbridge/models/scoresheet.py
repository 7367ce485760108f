"""Offline scoresheet: the single-device scoring state machine."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from callbridge.constants import (
    DEFAULT_WINNING_SCORE,
    MIN_CALL,
    MIN_CALL_TOTAL,
    NUM_PLAYERS,
    SLAM_CALL,
    SLAM_SCORE,
    TOTAL_ROUNDS,
    TRICKS_PER_ROUND,
)
from callbridge.errors import InvalidPhase, ValidationError
from callbridge.models.enums import Outcome, Phase
from callbridge.models.player import ScorePlayer

logger = logging.getLogger(__name__)


def round_score(tricks: int) -> int:
    """Score for making ``tricks``. A made 8 is worth 13."""
    return SLAM_SCORE if tricks == SLAM_CALL else tricks


def _require_ints(values: Sequence[int], what: str, minimum: int) -> list[int]:
    if len(values) != NUM_PLAYERS:
        raise ValidationError(f"Expected {NUM_PLAYERS} {what}, got {len(values)}.")
    if any(isinstance(v, bool) or not isinstance(v, int) for v in values):
        raise ValidationError(f"All {what} must be whole numbers.")
    if any(v < minimum for v in values):
        raise ValidationError(f"Minimum {what[:-1]} for any player is {minimum}.")
    return list(values)


@dataclass
class Scoresheet:
    """Represents one offline game, scored round by round.

    Round 1 has no calling phase: players report the tricks they made.
    From round 2 on, players call first and then report won or lost.
    The game ends when someone reaches ``winning_score`` or after
    ``total_rounds`` rounds.

    Attributes:
        id: Game identifier (empty while inactive)
        tag: Optional label for the game
        players: The four players in seat order
        round: Current round, 1 to total_rounds + 1
        dealer_index: Dealer seat, rotates every round
        phase: Current phase
        is_game_active: False only for the pristine, reset sheet
        total_rounds: Number of rounds in a full game
        winning_score: Total that ends the game early
        finished_at: ISO timestamp set when the game finishes

    """

    id: str = ""
    tag: str | None = None
    players: list[ScorePlayer] = field(default_factory=list)
    round: int = 1
    dealer_index: int = 0
    phase: Phase = Phase.CALLING
    is_game_active: bool = False
    total_rounds: int = TOTAL_ROUNDS
    winning_score: int = DEFAULT_WINNING_SCORE
    finished_at: str | None = None

    @classmethod
    def start_game(
        cls,
        names: Sequence[str],
        winning_score: int = DEFAULT_WINNING_SCORE,
        tag: str | None = None,
        total_rounds: int = TOTAL_ROUNDS,
    ) -> "Scoresheet":
        """Start a fresh game.

        Raises:
            ValidationError: Names are not 4 unique non-empty strings, or
                the winning score is not positive.

        """
        trimmed = [name.strip() if isinstance(name, str) else "" for name in names]
        if len(trimmed) != NUM_PLAYERS or any(not name for name in trimmed):
            raise ValidationError("All four player names are required.")
        if len(set(trimmed)) != NUM_PLAYERS:
            raise ValidationError("Player names must be unique.")
        if isinstance(winning_score, bool) or not isinstance(winning_score, int) or winning_score <= 0:
            raise ValidationError("Winning score must be a positive number.")

        sheet = cls(
            id=str(int(datetime.now(UTC).timestamp() * 1000)),
            tag=(tag or "").strip() or None,
            players=[ScorePlayer.fresh(i, name, total_rounds) for i, name in enumerate(trimmed)],
            round=1,
            dealer_index=0,
            phase=Phase.MAKING,
            is_game_active=True,
            total_rounds=total_rounds,
            winning_score=winning_score,
        )
        logger.info("Started offline game %s for %s", sheet.id, ", ".join(trimmed))
        return sheet

    @property
    def round_index(self) -> int:
        """Zero-based index of the current round."""
        return self.round - 1

    def _require_phase(self, phase: Phase) -> None:
        if not self.is_game_active:
            raise InvalidPhase("No game in progress.")
        if self.phase != phase:
            raise InvalidPhase(f"Not in {phase.value} phase.")

    def submit_calls(self, calls: Sequence[int]) -> None:
        """Record every player's call for the current round.

        Each call must be at least 2 and the calls must total 13 or more.
        """
        self._require_phase(Phase.CALLING)
        values = _require_ints(calls, "calls", MIN_CALL)
        if sum(values) < MIN_CALL_TOTAL:
            raise ValidationError(f"Total calls must be {MIN_CALL_TOTAL} or more.")

        for player, call in zip(self.players, values, strict=True):
            player.calls[self.round_index] = call
        self.phase = Phase.MAKING
        logger.info("Round %d calls: %s", self.round, values)

    def submit_made(self, made: Sequence[int]) -> None:
        """Record tricks made in round 1. The tricks must total exactly 13."""
        self._require_phase(Phase.MAKING)
        if self.round != 1:
            raise InvalidPhase("Tricks made are only entered in round 1.")
        values = _require_ints(made, "tricks", 0)
        if sum(values) != TRICKS_PER_ROUND:
            raise ValidationError(f"Total tricks made must be exactly {TRICKS_PER_ROUND}.")

        for player, tricks in zip(self.players, values, strict=True):
            player.record(self.round_index, round_score(tricks), tricks)
        self._finish_round()

    def submit_outcomes(self, outcomes: Sequence[Outcome | str]) -> None:
        """Record whether each player made their call (rounds 2 and later).

        A won call scores the call, a lost call scores minus the call.
        The exact number of tricks is not tracked on a loss.
        """
        self._require_phase(Phase.MAKING)
        if self.round == 1:
            raise InvalidPhase("Round 1 is scored by tricks made.")
        if len(outcomes) != NUM_PLAYERS:
            raise ValidationError(f"Expected {NUM_PLAYERS} outcomes, got {len(outcomes)}.")
        try:
            parsed = [Outcome(o) for o in outcomes]
        except ValueError as e:
            raise ValidationError("Outcomes must be 'won' or 'lost'.") from e

        for player in self.players:
            if player.calls[self.round_index] is None:
                raise InvalidPhase(f"{player.name} has no call this round.")

        for player, outcome in zip(self.players, parsed, strict=True):
            call = player.calls[self.round_index] or 0
            if outcome == Outcome.WON:
                player.record(self.round_index, round_score(call), call)
            else:
                player.record(self.round_index, -call, None)
        self._finish_round()

    def _finish_round(self) -> None:
        """Rotate the dealer and move to the next round or finish."""
        next_round = self.round + 1
        self.dealer_index = (self.dealer_index + 1) % len(self.players)

        reached = [p.name for p in self.players if p.total_score >= self.winning_score]
        if reached or next_round > self.total_rounds:
            self.phase = Phase.FINISHED
            self.finished_at = datetime.now(UTC).isoformat()
            logger.info(
                "Offline game %s finished after round %d (winning score reached by: %s)",
                self.id,
                self.round,
                ", ".join(reached) or "nobody",
            )
        else:
            self.phase = Phase.CALLING
            logger.info("Round %d scored, starting round %d", self.round, next_round)
        self.round = next_round

    def is_finished(self) -> bool:
        """Check if the game is over."""
        return self.phase == Phase.FINISHED

    def winners(self) -> list[ScorePlayer]:
        """Players sharing the highest total."""
        if not self.players:
            return []
        best = max(p.total_score for p in self.players)
        return [p for p in self.players if p.total_score == best]

    @classmethod
    def reset_game(cls) -> "Scoresheet":
        """Return the pristine, inactive sheet."""
        return cls()

    def __str__(self) -> str:
        """Return string representation."""
        return f"Scoresheet {self.id or '-'}: Round {self.round}, Phase: {self.phase.value}"
