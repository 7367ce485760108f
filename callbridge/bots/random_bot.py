"""Random bot that plays a random legal card."""

import random

from callbridge.bots.base_bot import BaseBot
from callbridge.models.card import Card
from callbridge.models.game import OnlineGame


class RandomBot(BaseBot):
    """Bot that plays a uniformly random legal card."""

    def __init__(self, player_id: str, rng: random.Random | None = None) -> None:
        """Initialize random bot."""
        super().__init__(player_id)
        self.rng = rng or random.Random()  # noqa: S311

    def pick_card(self, _game: OnlineGame, hand: list[Card], valid_cards: list[Card]) -> Card:
        """Pick a random valid card.

        Args:
            _game: Current game state
            hand: Bot's remaining cards
            valid_cards: Cards the rules allow right now

        Returns:
            Random card from valid choices

        """
        playable = valid_cards or hand
        return self.rng.choice(playable)
