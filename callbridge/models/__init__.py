"""Game domain models."""

from callbridge.models.card import Card, build_deck, determine_winner
from callbridge.models.deck import Deck, shuffle, sort_hand
from callbridge.models.enums import GameStatus, Outcome, Phase, Rank, Suit
from callbridge.models.game import GameSettings, OnlineGame
from callbridge.models.player import OnlinePlayer, ScorePlayer
from callbridge.models.scoresheet import Scoresheet
from callbridge.models.trick import PlayedCard, Trick, legal_cards

__all__ = [
    "Card",
    "Deck",
    "GameSettings",
    "GameStatus",
    "OnlineGame",
    "OnlinePlayer",
    "Outcome",
    "Phase",
    "PlayedCard",
    "Rank",
    "ScorePlayer",
    "Scoresheet",
    "Suit",
    "Trick",
    "build_deck",
    "determine_winner",
    "legal_cards",
    "shuffle",
    "sort_hand",
]
