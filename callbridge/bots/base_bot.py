"""Base class for all bot strategies."""

from abc import ABC, abstractmethod

from callbridge.models.card import Card
from callbridge.models.game import OnlineGame


class BaseBot(ABC):
    """Abstract base class for bots that fill empty seats.

    Bots never call; they only pick a card when their seat holds the turn.
    """

    def __init__(self, player_id: str) -> None:
        """Initialize the bot.

        Args:
            player_id: uid of the seat this bot controls

        """
        self.player_id = player_id

    @abstractmethod
    def pick_card(self, game: OnlineGame, hand: list[Card], valid_cards: list[Card]) -> Card:
        """Pick a card to play in the current trick.

        Args:
            game: Current game state
            hand: Bot's remaining cards
            valid_cards: Cards the rules allow right now

        Returns:
            Card to play

        """

    def choose(self, game: OnlineGame) -> Card | None:
        """Pick a card for this bot's seat, or None if it cannot play now."""
        hand = game.hand_of(self.player_id)
        if not hand:
            return None
        valid = game.legal_cards_for(self.player_id)
        if not valid:
            return None
        return self.pick_card(game, hand, valid)

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.__class__.__name__}({self.player_id})"
