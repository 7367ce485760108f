"""Online game model: seating, dealing and trick play."""

import random
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from callbridge.constants import CARDS_PER_HAND, DEFAULT_WINNING_SCORE, NUM_SEATS, TRICKS_PER_ROUND
from callbridge.errors import (
    AlreadyStarted,
    CardNotInHand,
    GameFull,
    InsufficientPlayers,
    InvalidPhase,
    MustFollowSuit,
    NotHost,
    NotSeated,
    NotYourTurn,
)
from callbridge.models.card import Card
from callbridge.models.deck import Deck, sort_hand
from callbridge.models.enums import GameStatus, Suit
from callbridge.models.player import OnlinePlayer
from callbridge.models.trick import PlayedCard, Trick, legal_cards


def _utc_now_iso() -> str:
    """Return current UTC time as an ISO string."""
    return datetime.now(UTC).isoformat()


@dataclass
class GameSettings:
    """Per-game options chosen by the host."""

    is_private: bool = False
    winning_score: int = DEFAULT_WINNING_SCORE


@dataclass
class OnlineGame:
    """Represents a four-seat online game.

    Every rules method either applies its whole change or raises before
    touching anything, so a failed action never leaves partial state.

    Attributes:
        id: Unique game identifier
        host_id: uid of the player who created the game
        status: Current game status
        players: Seated players, in join order
        settings: Privacy and winning score
        current_round: Current round (1-13)
        current_trick: Current trick within the round (1-13)
        current_turn_seat: Seat whose turn it is
        trick: Cards on the table and the led suit
        last_trick_winner_seat: Winner of the previous trick
        calls: Per-player calls, kept for document compatibility
        hands: Private hands keyed by uid, never part of public views
        version: Store version, bumped on every committed write
        created_at: Timestamp when game was created

    """

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    host_id: str = ""
    status: GameStatus = GameStatus.WAITING
    players: list[OnlinePlayer] = field(default_factory=list)
    settings: GameSettings = field(default_factory=GameSettings)
    current_round: int = 1
    current_trick: int = 1
    current_turn_seat: int = 0
    trick: Trick = field(default_factory=Trick)
    last_trick_winner_seat: int | None = None
    calls: dict[str, int | None] = field(default_factory=dict)
    hands: dict[str, list[Card]] = field(default_factory=dict)
    version: int = 0
    created_at: str = field(default_factory=_utc_now_iso)

    # Lookups

    def get_player(self, uid: str) -> OnlinePlayer | None:
        """Get a player by uid."""
        for player in self.players:
            if player.uid == uid:
                return player
        return None

    def get_player_by_seat(self, seat: int) -> OnlinePlayer | None:
        """Get a player by their seat."""
        for player in self.players:
            if player.seat == seat:
                return player
        return None

    def require_player(self, uid: str) -> OnlinePlayer:
        """Get a seated player or raise NotSeated."""
        player = self.get_player(uid)
        if player is None:
            raise NotSeated("Player not found in this game.")
        return player

    def hand_of(self, uid: str) -> list[Card]:
        """Get a player's current hand."""
        return self.hands.get(uid, [])

    def is_full(self) -> bool:
        """Check if all seats are taken."""
        return len(self.players) >= NUM_SEATS

    @property
    def cards_on_table(self) -> list[PlayedCard]:
        """Cards played in the current trick."""
        return self.trick.cards

    @property
    def trick_suit(self) -> Suit | None:
        """The led suit of the current trick."""
        return self.trick.trick_suit

    # Seating & dealing

    def assign_seat(self, player: OnlinePlayer) -> int:
        """Seat a joining player at the next free seat.

        Joining twice is a no-op that returns the existing seat.

        Raises:
            GameFull: All four seats are taken
            AlreadyStarted: The game is no longer waiting for players

        """
        existing = self.get_player(player.uid)
        if existing is not None:
            return existing.seat
        if self.is_full():
            raise GameFull("Game is full!")
        if self.status != GameStatus.WAITING:
            raise AlreadyStarted("Game has already started!")

        taken = {p.seat for p in self.players}
        player.seat = min(seat for seat in range(NUM_SEATS) if seat not in taken)
        player.score = 0
        player.tricks_won = 0
        self.players.append(player)
        return player.seat

    def deal_and_assign(self, caller_uid: str, rng: random.Random | None = None) -> None:
        """Shuffle a fresh deck and deal 13 cards to each seat.

        Raises:
            NotHost: The caller did not create the game
            InsufficientPlayers: Fewer than four players are seated
            AlreadyStarted: The game has already been dealt

        """
        if caller_uid != self.host_id:
            raise NotHost("Only the host can start the game.")
        if len(self.players) != NUM_SEATS:
            raise InsufficientPlayers(f"Need {NUM_SEATS} players to start.")
        if self.status != GameStatus.WAITING:
            raise AlreadyStarted("Game has already started.")
        self.deal(rng)

    def deal(self, rng: random.Random | None = None) -> None:
        """Deal a shuffled deck round-robin by seat and start play."""
        deck = Deck(rng)
        deck.shuffle()
        hands = deck.deal(NUM_SEATS)

        dealt: dict[str, list[Card]] = {}
        for seat, hand in enumerate(hands):
            player = self.get_player_by_seat(seat)
            if player is None:
                raise InsufficientPlayers(f"Seat {seat} is empty.")
            dealt[player.uid] = sort_hand(hand)

        self.hands = dealt
        self.status = GameStatus.PLAYING
        self.current_turn_seat = 0
        self.trick.clear()

    # Trick play

    def legal_cards_for(self, uid: str) -> list[Card]:
        """Cards the player may play right now, empty unless it is their turn."""
        player = self.get_player(uid)
        if (
            player is None
            or self.status != GameStatus.PLAYING
            or self.current_turn_seat != player.seat
        ):
            return []
        return legal_cards(self.hand_of(uid), self.trick.trick_suit)

    def play_card(self, uid: str, card: Card) -> PlayedCard | None:
        """Play a card for a player.

        Returns:
            The winning played card when this play completed the trick,
            otherwise None

        Raises:
            NotSeated, InvalidPhase, NotYourTurn, CardNotInHand, MustFollowSuit

        """
        player = self.require_player(uid)
        if self.status != GameStatus.PLAYING:
            raise InvalidPhase("Not in playing phase.")
        if self.current_turn_seat != player.seat:
            raise NotYourTurn("Not your turn.")

        hand = self.hand_of(uid)
        if card not in hand:
            raise CardNotInHand("Card not in hand.")

        led = self.trick.trick_suit
        if led is not None and card.suit != led and any(c.suit == led for c in hand):
            raise MustFollowSuit("Must follow suit if you can.")

        played = hand[hand.index(card)]
        self.hands[uid] = [c for c in hand if c != played]
        self.trick.add_card(player.seat, played)
        self.current_turn_seat = (player.seat + 1) % NUM_SEATS

        if not self.trick.is_complete():
            return None

        winning = self.trick.winner()
        winner = self.get_player_by_seat(winning.seat)
        self.status = GameStatus.TRICK_SCORING
        self.last_trick_winner_seat = winning.seat
        self.current_turn_seat = winning.seat
        winner.tricks_won += 1
        return winning

    def start_next_trick(self) -> bool:
        """Clear the table and move to the next trick.

        Returns:
            False without changing anything unless the game is in
            trick scoring, True otherwise

        """
        if self.status != GameStatus.TRICK_SCORING:
            return False

        self.trick.clear()
        self.current_trick += 1
        if self.current_trick > TRICKS_PER_ROUND:
            # TODO: score the round and move to calling or finished once
            # round-level scoring rules for online play are defined
            self.status = GameStatus.ROUND_SCORING
        else:
            self.status = GameStatus.PLAYING
        return True

    def cards_in_play(self) -> int:
        """Count cards in hands and on the table."""
        return sum(len(hand) for hand in self.hands.values()) + len(self.trick.cards)

    def __str__(self) -> str:
        """Return string representation."""
        return (
            f"Game {self.id}: {len(self.players)} players, "
            f"Trick {self.current_trick}/{CARDS_PER_HAND}, Status: {self.status.value}"
        )
