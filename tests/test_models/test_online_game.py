"""Tests for seating, dealing and trick play in online games."""

import random

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

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
from callbridge.models.card import Card, build_deck
from callbridge.models.enums import GameStatus
from callbridge.models.game import OnlineGame
from callbridge.models.player import OnlinePlayer


def _c(text: str) -> Card:
    suits = {"S": "spades", "H": "hearts", "D": "diamonds", "C": "clubs"}
    return Card(suits[text[-1]], text[:-1])


def _set_hands(game: OnlineGame, hands: dict[int, list[str]]) -> None:
    for seat, cards in hands.items():
        game.hands[game.get_player_by_seat(seat).uid] = [_c(c) for c in cards]


def _uid(game: OnlineGame, seat: int) -> str:
    return game.get_player_by_seat(seat).uid


class TestSeating:
    """Tests for assign_seat."""

    def test_seats_fill_in_order(self, full_game):
        """Players take seats 0 to 3 in join order."""
        assert [p.seat for p in full_game.players] == [0, 1, 2, 3]
        assert full_game.is_full()

    def test_rejoin_returns_existing_seat(self, full_game):
        """Joining twice is a no-op."""
        again = OnlinePlayer(uid="p2", name="Player 2 again")
        assert full_game.assign_seat(again) == 2
        assert len(full_game.players) == 4

    def test_full_game_rejects_fifth_player(self, full_game):
        """Only four seats exist."""
        with pytest.raises(GameFull):
            full_game.assign_seat(OnlinePlayer(uid="p4", name="Late"))

    def test_started_game_rejects_new_player(self):
        """Seats only open while waiting."""
        game = OnlineGame(host_id="p0", status=GameStatus.PLAYING)
        with pytest.raises(AlreadyStarted):
            game.assign_seat(OnlinePlayer(uid="p1", name="Late"))

    def test_takes_lowest_free_seat(self):
        """A gap left in the seating is filled first."""
        game = OnlineGame(host_id="p0")
        game.assign_seat(OnlinePlayer(uid="p0", name="Host"))
        game.players.append(OnlinePlayer(uid="p2", name="Two", seat=2))
        assert game.assign_seat(OnlinePlayer(uid="p1", name="One")) == 1


class TestDeal:
    """Tests for deal_and_assign."""

    def test_only_host_may_deal(self, full_game):
        """Other players cannot start the game."""
        with pytest.raises(NotHost):
            full_game.deal_and_assign("p1")
        assert full_game.status == GameStatus.WAITING
        assert full_game.hands == {}

    def test_needs_four_players(self):
        """Three players are not enough."""
        game = OnlineGame(host_id="p0")
        for i in range(3):
            game.assign_seat(OnlinePlayer(uid=f"p{i}", name=f"P{i}"))
        with pytest.raises(InsufficientPlayers):
            game.deal_and_assign("p0")

    def test_cannot_deal_twice(self, dealt_game):
        """A started game is not dealt again."""
        with pytest.raises(AlreadyStarted):
            dealt_game.deal_and_assign("p0")

    def test_deal_starts_play(self, dealt_game):
        """Every seat gets 13 sorted cards and seat 0 leads."""
        assert dealt_game.status == GameStatus.PLAYING
        assert dealt_game.current_turn_seat == 0
        assert dealt_game.trick_suit is None
        for player in dealt_game.players:
            hand = dealt_game.hand_of(player.uid)
            assert len(hand) == 13
            keys = [(-c.suit_value, -c.value) for c in hand]
            assert keys == sorted(keys)

    @given(seed=st.integers(0, 100000))
    @settings(max_examples=25)
    def test_hands_partition_the_deck(self, seed):
        """The four hands are disjoint and together form the deck."""
        game = OnlineGame(host_id="p0")
        for i in range(4):
            game.assign_seat(OnlinePlayer(uid=f"p{i}", name=f"P{i}"))
        game.deal_and_assign("p0", random.Random(seed))

        cards = [c for hand in game.hands.values() for c in hand]
        assert len(cards) == 52
        assert set(cards) == set(build_deck())


class TestPlayCard:
    """Tests for trick play."""

    def test_unknown_player_rejected(self, dealt_game):
        """Only seated players can play."""
        with pytest.raises(NotSeated):
            dealt_game.play_card("stranger", _c("AS"))

    def test_waiting_game_rejects_play(self, full_game):
        """No card can be played before the deal."""
        with pytest.raises(InvalidPhase):
            full_game.play_card("p0", _c("AS"))

    def test_out_of_turn_rejected(self, dealt_game):
        """Seat 1 cannot lead when seat 0 holds the turn."""
        card = dealt_game.hand_of("p1")[0]
        with pytest.raises(NotYourTurn):
            dealt_game.play_card("p1", card)
        assert len(dealt_game.hand_of("p1")) == 13

    def test_card_not_in_hand_rejected(self, dealt_game):
        """A card held by someone else cannot be played."""
        card = dealt_game.hand_of("p1")[0]
        with pytest.raises(CardNotInHand):
            dealt_game.play_card("p0", card)

    def test_must_follow_suit(self, dealt_game):
        """Holding the led suit forbids an off-suit card."""
        _set_hands(dealt_game, {0: ["5H"], 1: ["9H", "AC"]})
        dealt_game.play_card(_uid(dealt_game, 0), _c("5H"))
        with pytest.raises(MustFollowSuit):
            dealt_game.play_card(_uid(dealt_game, 1), _c("AC"))
        assert dealt_game.hand_of(_uid(dealt_game, 1)) == [_c("9H"), _c("AC")]
        assert len(dealt_game.cards_on_table) == 1

    def test_void_may_discard(self, dealt_game):
        """Without the led suit any card is allowed."""
        _set_hands(dealt_game, {0: ["5H"], 1: ["AC", "2D"]})
        dealt_game.play_card(_uid(dealt_game, 0), _c("5H"))
        dealt_game.play_card(_uid(dealt_game, 1), _c("2D"))
        assert dealt_game.current_turn_seat == 2

    def test_table_holds_the_dealt_card(self, dealt_game):
        """The card on the table is the one taken from the hand."""
        _set_hands(dealt_game, {0: ["4C"], 1: ["KC"], 2: ["9C"], 3: ["JC"]})
        dealt = dealt_game.hand_of(_uid(dealt_game, 0))[0]

        winning = None
        for seat, text in enumerate(["4C", "KC", "9C", "JC"]):
            winning = dealt_game.play_card(_uid(dealt_game, seat), _c(text))

        assert dealt_game.cards_on_table[0].card is dealt
        assert [pc.card.value for pc in dealt_game.cards_on_table] == [4, 13, 9, 11]
        assert winning.seat == 1

    def test_legal_cards_only_for_turn_holder(self, dealt_game):
        """Only the seat to move has playable cards."""
        _set_hands(dealt_game, {0: ["5H"], 1: ["KH", "3C"], 2: ["2H"], 3: ["AH"]})
        assert dealt_game.legal_cards_for(_uid(dealt_game, 1)) == []
        assert dealt_game.legal_cards_for("nobody") == []

        dealt_game.play_card(_uid(dealt_game, 0), _c("5H"))
        assert dealt_game.legal_cards_for(_uid(dealt_game, 1)) == [_c("KH")]

        for seat, text in [(1, "KH"), (2, "2H"), (3, "AH")]:
            dealt_game.play_card(_uid(dealt_game, seat), _c(text))
        assert dealt_game.status == GameStatus.TRICK_SCORING
        assert dealt_game.legal_cards_for(_uid(dealt_game, 3)) == []

    def test_turn_cycles_and_winner_leads(self, dealt_game):
        """Turns go 0, 1, 2, 3; the trick winner then holds the turn."""
        _set_hands(
            dealt_game,
            {0: ["5H", "2C"], 1: ["KH", "3C"], 2: ["2S", "4C"], 3: ["AH", "5C"]},
        )
        turns = []
        winning = None
        for seat, text in enumerate(["5H", "KH", "2S", "AH"]):
            turns.append(dealt_game.current_turn_seat)
            winning = dealt_game.play_card(_uid(dealt_game, seat), _c(text))

        assert turns == [0, 1, 2, 3]
        assert winning.seat == 2
        assert dealt_game.status == GameStatus.TRICK_SCORING
        assert dealt_game.last_trick_winner_seat == 2
        assert dealt_game.current_turn_seat == 2
        assert dealt_game.get_player_by_seat(2).tricks_won == 1

        assert dealt_game.start_next_trick() is True
        assert dealt_game.status == GameStatus.PLAYING
        assert dealt_game.current_trick == 2
        assert dealt_game.current_turn_seat == 2
        assert dealt_game.cards_on_table == []
        assert dealt_game.trick_suit is None

    def test_no_play_during_trick_scoring(self, dealt_game):
        """The table must be cleared before the next lead."""
        _set_hands(dealt_game, {0: ["5H", "2C"], 1: ["KH"], 2: ["2H"], 3: ["AH"]})
        for seat, text in enumerate(["5H", "KH", "2H", "AH"]):
            dealt_game.play_card(_uid(dealt_game, seat), _c(text))
        with pytest.raises(InvalidPhase):
            dealt_game.play_card(_uid(dealt_game, 3), _c("2C"))


class TestStartNextTrick:
    """Tests for clearing a scored trick."""

    def test_is_noop_unless_trick_scoring(self, dealt_game):
        """Nothing happens while a trick is in progress."""
        assert dealt_game.start_next_trick() is False
        assert dealt_game.current_trick == 1

    def test_second_call_is_noop(self, dealt_game):
        """Two calls in a row only advance once."""
        _set_hands(dealt_game, {0: ["5H"], 1: ["KH"], 2: ["2H"], 3: ["AH"]})
        for seat, text in enumerate(["5H", "KH", "2H", "AH"]):
            dealt_game.play_card(_uid(dealt_game, seat), _c(text))

        assert dealt_game.start_next_trick() is True
        assert dealt_game.start_next_trick() is False
        assert dealt_game.current_trick == 2

    def test_round_ends_after_thirteen_tricks(self, dealt_game):
        """Playing out every hand ends in round scoring."""
        for _ in range(13):
            for _ in range(4):
                uid = _uid(dealt_game, dealt_game.current_turn_seat)
                dealt_game.play_card(uid, dealt_game.legal_cards_for(uid)[0])
            assert dealt_game.start_next_trick() is True

        assert dealt_game.status == GameStatus.ROUND_SCORING
        assert dealt_game.cards_in_play() == 0
        assert sum(p.tricks_won for p in dealt_game.players) == 13
        assert dealt_game.start_next_trick() is False
