"""Enums for the game."""

from enum import Enum


class Suit(str, Enum):
    """Card suits. Spades are trump."""

    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"


class Rank(str, Enum):
    """Card ranks, low to high."""

    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"


TRUMP_SUIT = Suit.SPADES


class Phase(str, Enum):
    """Phases of an offline scoresheet."""

    CALLING = "calling"
    MAKING = "making"
    FINISHED = "finished"


class Outcome(str, Enum):
    """Whether a player made their call in a round."""

    WON = "won"
    LOST = "lost"


class GameStatus(str, Enum):
    """Online game states during the lifecycle."""

    WAITING = "waiting"
    PLAYING = "playing"
    CALLING = "calling"
    TRICK_SCORING = "trick_scoring"
    ROUND_SCORING = "round_scoring"
    FINISHED = "finished"

