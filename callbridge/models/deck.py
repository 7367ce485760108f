"""Deck model for shuffling and dealing cards."""

import random
from typing import List, Optional

from callbridge.models.card import Card, build_deck, hand_sort_key


def shuffle(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Shuffle a deck in place with Fisher-Yates.

    Walks from the last position down, swapping each position ``i`` with a
    uniformly chosen ``j`` in ``[0, i]``, so every permutation is equally
    likely.

    Args:
        deck: Cards to shuffle
        rng: Optional random source for reproducible shuffles

    Returns:
        The same list, shuffled

    """
    rng = rng or random.SystemRandom()
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randint(0, i)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def sort_hand(cards: List[Card]) -> List[Card]:
    """Return a hand sorted for stable display. Cosmetic only."""
    return sorted(cards, key=hand_sort_key)


class Deck:
    """
    Represents a standard 52-card deck.

    The deck contains one card per suit and rank. It is filled, shuffled
    and dealt out once per round; no card outlives the deal.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        """Initialize an empty deck."""
        self.cards: List[Card] = []
        self.rng = rng

    def fill(self) -> None:
        """Fill the deck with all 52 cards."""
        self.cards = build_deck()

    def shuffle(self) -> None:
        """Fill and shuffle the deck."""
        self.fill()
        shuffle(self.cards, self.rng)

    def deal(self, num_hands: int) -> List[List[Card]]:
        """
        Deal the whole deck round-robin.

        Card ``i`` goes to hand ``i % num_hands``.

        Args:
            num_hands: Number of hands to deal to

        Returns:
            List of hands, where hand ``n`` belongs to seat ``n``

        """
        if not self.cards:
            self.shuffle()

        hands: List[List[Card]] = [[] for _ in range(num_hands)]
        for index, card in enumerate(self.cards):
            hands[index % num_hands].append(card)

        self.cards = []
        return hands
