"""Request and response models."""

from typing import Any

from pydantic import BaseModel, Field

from callbridge.errors import ErrorCode
from callbridge.models.card import Card
from callbridge.models.enums import Rank, Suit
from callbridge.models.player import OnlinePlayer

__all__ = [
    "CardModel",
    "CreateGameRequest",
    "ErrorCode",
    "GameIdResponse",
    "HandResponse",
    "HistoryResponse",
    "JoinGameResponse",
    "NextTrickResponse",
    "PlayCardRequest",
    "PlayerRequest",
    "StartGameRequest",
]


class CardModel(BaseModel):
    """A card as sent by clients."""

    suit: Suit
    rank: Rank

    def to_card(self) -> Card:
        """Convert to the domain card."""
        return Card(self.suit, self.rank)

    @classmethod
    def from_card(cls, card: Card) -> "CardModel":
        """Build from a domain card."""
        return cls(suit=card.suit, rank=card.rank)


class PlayerRequest(BaseModel):
    """Identity of the player making a request."""

    uid: str = Field(min_length=1)
    name: str = ""
    photo_url: str | None = None

    def to_player(self) -> OnlinePlayer:
        """Convert to an unseated online player."""
        return OnlinePlayer(uid=self.uid, name=self.name, photo_url=self.photo_url)


class CreateGameRequest(PlayerRequest):
    """Request to create a new game."""

    is_private: bool = False
    winning_score: int | None = Field(default=None, gt=0)


class StartGameRequest(BaseModel):
    """Request to deal and start a game."""

    uid: str = Field(min_length=1)


class PlayCardRequest(BaseModel):
    """Request to play a card."""

    uid: str = Field(min_length=1)
    card: CardModel


class GameIdResponse(BaseModel):
    """Response carrying a game id."""

    game_id: str


class JoinGameResponse(BaseModel):
    """Response for joining a game."""

    game_id: str
    seat: int


class HandResponse(BaseModel):
    """A player's private hand."""

    game_id: str
    uid: str
    hand: list[CardModel]
    legal_cards: list[CardModel]


class NextTrickResponse(BaseModel):
    """Response for advancing to the next trick."""

    advanced: bool


class HistoryResponse(BaseModel):
    """Recently finished offline games."""

    games: list[dict[str, Any]]
    count: int
