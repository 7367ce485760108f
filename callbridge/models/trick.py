"""Trick model for the cards on the table."""

from dataclasses import dataclass, field

from callbridge.constants import NUM_SEATS
from callbridge.models.card import Card, determine_winner
from callbridge.models.enums import Suit


@dataclass
class PlayedCard:
    """Represents a card played by a seat in a trick."""

    seat: int
    card: Card


def legal_cards(hand: list[Card], trick_suit: Suit | None) -> list[Card]:
    """Get the cards that can be played from the hand.

    - If leading (no suit led yet), any card can be played
    - If following, must follow the led suit if possible
    - Holding none of the led suit, any card can be played
    """
    if trick_suit is None:
        return list(hand)

    following = [card for card in hand if card.suit == trick_suit]
    return following or list(hand)


@dataclass
class Trick:
    """The trick in progress.

    The first card sets the led suit. A trick is complete once every seat
    has played.

    Attributes:
        cards: Cards played so far, in order
        trick_suit: The led suit, None until the first card

    """

    cards: list[PlayedCard] = field(default_factory=list)
    trick_suit: Suit | None = None

    def add_card(self, seat: int, card: Card) -> None:
        """Append a played card, setting the led suit on the first play."""
        self.cards.append(PlayedCard(seat, card))
        if self.trick_suit is None:
            self.trick_suit = card.suit

    def is_complete(self, num_seats: int = NUM_SEATS) -> bool:
        """Check if all seats have played."""
        return len(self.cards) == num_seats

    def winner(self) -> PlayedCard | None:
        """Return the winning played card, or None for an empty trick."""
        return determine_winner(self.cards, self.trick_suit)

    def clear(self) -> None:
        """Clear the table for the next trick."""
        self.cards = []
        self.trick_suit = None

    def __str__(self) -> str:
        """Return string representation of the trick."""
        led = self.trick_suit.value if self.trick_suit else "none"
        return f"Trick: {len(self.cards)} cards played, led {led}"
