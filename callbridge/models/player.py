"""Player models."""

from dataclasses import dataclass, field

from callbridge.constants import TOTAL_ROUNDS


@dataclass
class OnlinePlayer:
    """Represents a seated player in an online game.

    Attributes:
        uid: Unique player identifier
        name: Player's display name
        photo_url: Avatar URL, if any
        is_bot: Whether the seat is played by a bot
        seat: Turn-order position (0-3), fixed once joined
        score: Current total score
        tricks_won: Number of tricks won this round

    """

    uid: str
    name: str
    photo_url: str | None = None
    is_bot: bool = False
    seat: int = 0
    score: int = 0
    tricks_won: int = 0

    def __str__(self) -> str:
        """Return string representation."""
        bot_str = " (Bot)" if self.is_bot else ""
        return f"{self.name}{bot_str} - Seat {self.seat}"


def _round_slots(total_rounds: int = TOTAL_ROUNDS) -> list[int | None]:
    return [None] * total_rounds


@dataclass
class ScorePlayer:
    """A player on an offline scoresheet.

    ``calls``, ``made`` and ``scores`` hold one slot per round.
    ``total_score`` is always the sum of ``scores``.
    """

    id: str
    name: str
    calls: list[int | None] = field(default_factory=_round_slots)
    made: list[int | None] = field(default_factory=_round_slots)
    scores: list[int] = field(default_factory=lambda: [0] * TOTAL_ROUNDS)
    total_score: int = 0

    @classmethod
    def fresh(cls, index: int, name: str, total_rounds: int = TOTAL_ROUNDS) -> "ScorePlayer":
        """Create a player with empty round slots."""
        return cls(
            id=f"player-{index + 1}",
            name=name,
            calls=_round_slots(total_rounds),
            made=_round_slots(total_rounds),
            scores=[0] * total_rounds,
        )

    def record(self, round_index: int, score: int, made: int | None) -> None:
        """Record a round's outcome and recompute the total."""
        self.scores[round_index] = score
        self.made[round_index] = made
        self.total_score = sum(self.scores)
