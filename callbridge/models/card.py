"""Card model and trick-winner logic."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from callbridge.models.enums import TRUMP_SUIT, Rank, Suit

if TYPE_CHECKING:
    from callbridge.models.trick import PlayedCard

RANKS: list[Rank] = list(Rank)
SUITS: list[Suit] = list(Suit)

# Display sort priority only, has no effect on legality
SUIT_VALUES: dict[Suit, int] = {
    Suit.SPADES: 4,
    Suit.HEARTS: 3,
    Suit.DIAMONDS: 2,
    Suit.CLUBS: 1,
}


@dataclass(frozen=True)
class Card:
    """Represents a standard playing card.

    Attributes:
        suit: Card suit
        rank: Card rank
        value: Rank strength, 2 to 14 (ace high)
        suit_value: Suit priority used when sorting a hand for display

    Equality and hashing only look at rank and suit.

    """

    suit: Suit
    rank: Rank
    value: int = field(init=False)
    suit_value: int = field(init=False)

    def __post_init__(self) -> None:
        """Derive the values from suit and rank."""
        object.__setattr__(self, "suit", Suit(self.suit))
        object.__setattr__(self, "rank", Rank(self.rank))
        object.__setattr__(self, "value", RANKS.index(self.rank) + 2)
        object.__setattr__(self, "suit_value", SUIT_VALUES[self.suit])

    def __eq__(self, other: object) -> bool:
        """Compare by rank and suit."""
        if not isinstance(other, Card):
            return NotImplemented
        return self.suit == other.suit and self.rank == other.rank

    def __hash__(self) -> int:
        """Hash by rank and suit."""
        return hash((self.suit, self.rank))

    def is_trump(self) -> bool:
        """Check if card belongs to the trump suit."""
        return self.suit == TRUMP_SUIT

    def __str__(self) -> str:
        """Return string representation of card."""
        return f"{self.rank.value} of {self.suit.value}"


def build_deck() -> list[Card]:
    """Build all 52 cards, one per suit and rank."""
    return [Card(suit, rank) for suit in SUITS for rank in RANKS]


def hand_sort_key(card: Card) -> tuple[int, int]:
    """Sort key for display: suit priority, then rank, both descending."""
    return (-card.suit_value, -card.value)


def determine_winner(played: "list[PlayedCard]", trick_suit: Suit | None) -> "PlayedCard | None":
    """Determine the winner of a trick given the cards played.

    Args:
        played: Cards played so far, in order
        trick_suit: The suit led. Defaults to the suit of the first card.

    Returns:
        The winning played card, or None if nothing was played

    Rules:
        1. If any trump (spade) was played, the highest trump wins
        2. Otherwise the highest card of the led suit wins
        3. Off-suit cards never win

    """
    if not played:
        return None

    led = trick_suit or played[0].card.suit

    trumps = [pc for pc in played if pc.card.is_trump()]
    if trumps:
        return max(trumps, key=lambda pc: pc.card.value)

    return max((pc for pc in played if pc.card.suit == led), key=lambda pc: pc.card.value)
