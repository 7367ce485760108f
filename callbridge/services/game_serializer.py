"""Game serialization for the document stores.

Handles conversion between model objects and JSON-ready documents. Field
names follow the document model shared with the web clients (camelCase).
"""

from typing import Any

from callbridge.models.card import Card
from callbridge.models.enums import GameStatus, Phase, Suit
from callbridge.models.game import GameSettings, OnlineGame
from callbridge.models.player import OnlinePlayer, ScorePlayer
from callbridge.models.scoresheet import Scoresheet
from callbridge.models.trick import PlayedCard, Trick


def serialize_card(card: Card) -> dict[str, Any]:
    """Serialize a Card to a dictionary."""
    return {
        "suit": card.suit.value,
        "rank": card.rank.value,
        "value": card.value,
        "suitValue": card.suit_value,
    }


def deserialize_card(data: dict[str, Any]) -> Card:
    """Deserialize a Card from a dictionary. Only suit and rank are required."""
    return Card(suit=data["suit"], rank=data["rank"])


def serialize_player(player: OnlinePlayer) -> dict[str, Any]:
    """Serialize an OnlinePlayer to a dictionary."""
    return {
        "uid": player.uid,
        "name": player.name,
        "photoURL": player.photo_url,
        "isBot": player.is_bot,
        "seat": player.seat,
        "score": player.score,
        "tricksWon": player.tricks_won,
    }


def deserialize_player(data: dict[str, Any]) -> OnlinePlayer:
    """Deserialize an OnlinePlayer from a dictionary."""
    return OnlinePlayer(
        uid=data["uid"],
        name=data.get("name", "Anonymous"),
        photo_url=data.get("photoURL"),
        is_bot=data.get("isBot", False),
        seat=data.get("seat", 0),
        score=data.get("score", 0),
        tricks_won=data.get("tricksWon", 0),
    )


def serialize_played_card(played: PlayedCard) -> dict[str, Any]:
    """Serialize a PlayedCard to a dictionary."""
    return {"seat": played.seat, "card": serialize_card(played.card)}


def deserialize_played_card(data: dict[str, Any]) -> PlayedCard:
    """Deserialize a PlayedCard from a dictionary."""
    return PlayedCard(seat=data["seat"], card=deserialize_card(data["card"]))


def serialize_public_game(game: OnlineGame) -> dict[str, Any]:
    """Serialize the public part of a game.

    This is what every client may see: hands are left out.
    """
    data: dict[str, Any] = {
        "id": game.id,
        "hostId": game.host_id,
        "status": game.status.value,
        "players": [serialize_player(p) for p in game.players],
        "settings": {
            "isPrivate": game.settings.is_private,
            "winningScore": game.settings.winning_score,
        },
        "currentRound": game.current_round,
        "currentTrick": game.current_trick,
        "currentTurnSeat": game.current_turn_seat,
        "trickSuit": game.trick.trick_suit.value if game.trick.trick_suit else None,
        "cardsOnTable": [serialize_played_card(pc) for pc in game.trick.cards],
        "calls": dict(game.calls),
        "version": game.version,
        "createdAt": game.created_at,
    }
    if game.last_trick_winner_seat is not None:
        data["lastTrickWinnerSeat"] = game.last_trick_winner_seat
    return data


def serialize_game(game: OnlineGame) -> dict[str, Any]:
    """Serialize a complete game, private hands included, to a store document.

    Args:
        game: Game instance to serialize

    Returns:
        Dictionary suitable for document storage
    """
    data = serialize_public_game(game)
    data["_id"] = game.id
    data["hands"] = {
        uid: [serialize_card(c) for c in hand] for uid, hand in game.hands.items()
    }
    return data


def deserialize_game(data: dict[str, Any]) -> OnlineGame:
    """Deserialize a complete game from a store document.

    Args:
        data: Store document

    Returns:
        Restored OnlineGame instance
    """
    settings_data = data.get("settings", {})
    trick_suit = data.get("trickSuit")
    return OnlineGame(
        id=data.get("id") or data["_id"],
        host_id=data.get("hostId", ""),
        status=GameStatus(data.get("status", GameStatus.WAITING.value)),
        players=[deserialize_player(p) for p in data.get("players", [])],
        settings=GameSettings(
            is_private=settings_data.get("isPrivate", False),
            winning_score=settings_data.get("winningScore", GameSettings.winning_score),
        ),
        current_round=data.get("currentRound", 1),
        current_trick=data.get("currentTrick", 1),
        current_turn_seat=data.get("currentTurnSeat", 0),
        trick=Trick(
            cards=[deserialize_played_card(pc) for pc in data.get("cardsOnTable", [])],
            trick_suit=Suit(trick_suit) if trick_suit else None,
        ),
        last_trick_winner_seat=data.get("lastTrickWinnerSeat"),
        calls=dict(data.get("calls", {})),
        hands={
            uid: [deserialize_card(c) for c in hand]
            for uid, hand in data.get("hands", {}).items()
        },
        version=data.get("version", 0),
        created_at=data.get("createdAt", ""),
    )


def serialize_score_player(player: ScorePlayer) -> dict[str, Any]:
    """Serialize a ScorePlayer to a dictionary."""
    return {
        "id": player.id,
        "name": player.name,
        "calls": list(player.calls),
        "made": list(player.made),
        "scores": list(player.scores),
        "totalScore": player.total_score,
    }


def deserialize_score_player(data: dict[str, Any]) -> ScorePlayer:
    """Deserialize a ScorePlayer from a dictionary."""
    scores = list(data.get("scores", []))
    return ScorePlayer(
        id=data["id"],
        name=data["name"],
        calls=list(data.get("calls", [])),
        made=list(data.get("made", [])),
        scores=scores,
        total_score=sum(scores),
    )


def serialize_scoresheet(sheet: Scoresheet) -> dict[str, Any]:
    """Serialize an offline Scoresheet to a dictionary."""
    data: dict[str, Any] = {
        "id": sheet.id,
        "players": [serialize_score_player(p) for p in sheet.players],
        "round": sheet.round,
        "dealerIndex": sheet.dealer_index,
        "phase": sheet.phase.value,
        "isGameActive": sheet.is_game_active,
        "totalRounds": sheet.total_rounds,
        "winningScore": sheet.winning_score,
    }
    if sheet.tag:
        data["tag"] = sheet.tag
    if sheet.finished_at:
        data["finishedAt"] = sheet.finished_at
    return data


def deserialize_scoresheet(data: dict[str, Any]) -> Scoresheet:
    """Deserialize an offline Scoresheet from a dictionary."""
    return Scoresheet(
        id=data.get("id", ""),
        tag=data.get("tag"),
        players=[deserialize_score_player(p) for p in data.get("players", [])],
        round=data.get("round", 1),
        dealer_index=data.get("dealerIndex", 0),
        phase=Phase(data.get("phase", Phase.CALLING.value)),
        is_game_active=data.get("isGameActive", False),
        total_rounds=data.get("totalRounds", Scoresheet.total_rounds),
        winning_score=data.get("winningScore", Scoresheet.winning_score),
        finished_at=data.get("finishedAt"),
    )


def serialize_result(sheet: Scoresheet) -> dict[str, Any]:
    """Serialize a finished sheet for the shared history collection."""
    data = serialize_scoresheet(sheet)
    data.pop("isGameActive", None)
    data["winners"] = [p.name for p in sheet.winners()]
    return data
