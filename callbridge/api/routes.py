"""API routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, WebSocket

from callbridge.api.responses import (
    CardModel,
    CreateGameRequest,
    GameIdResponse,
    HandResponse,
    HistoryResponse,
    JoinGameResponse,
    NextTrickResponse,
    PlayCardRequest,
    PlayerRequest,
    StartGameRequest,
)
from callbridge.api.websocket import watch_game
from callbridge.errors import (
    AuthorizationError,
    ConcurrencyConflict,
    GameError,
    NotFoundError,
    RuleViolation,
    ValidationError,
)
from callbridge.services.game_serializer import serialize_public_game
from callbridge.services.game_service import GameService

router = APIRouter()

# Checked in order, so subclasses must come before their bases
_STATUS_CODES: list[tuple[type[GameError], int]] = [
    (ValidationError, 422),
    (RuleViolation, 409),
    (ConcurrencyConflict, 409),
    (NotFoundError, 404),
    (AuthorizationError, 403),
]


def http_error(error: GameError) -> HTTPException:
    """Map a game error to an HTTP error with a ``{code, message}`` body."""
    status_code = next((code for cls, code in _STATUS_CODES if isinstance(error, cls)), 400)
    return HTTPException(status_code=status_code, detail=error.to_dict())


def get_game_service(request: Request) -> GameService:
    """Get the game service created at startup."""
    return request.app.state.game_service


Service = Annotated[GameService, Depends(get_game_service)]


@router.post("/games")
async def create_game(body: CreateGameRequest, service: Service) -> GameIdResponse:
    """Create a new game with the caller at seat 0."""
    try:
        game_id = await service.create_game(body.to_player(), body.is_private, body.winning_score)
    except GameError as e:
        raise http_error(e) from e
    return GameIdResponse(game_id=game_id)


@router.post("/games/bots")
async def create_game_with_bots(body: PlayerRequest, service: Service) -> GameIdResponse:
    """Create a private game against three bots. Play starts immediately."""
    try:
        game_id = await service.create_game_with_bots(body.to_player())
    except GameError as e:
        raise http_error(e) from e
    return GameIdResponse(game_id=game_id)


@router.post("/games/quick-join")
async def quick_join(body: PlayerRequest, service: Service) -> GameIdResponse:
    """Join an open public game, creating one if none is waiting."""
    try:
        game_id = await service.find_and_join_public_game(body.to_player())
    except GameError as e:
        raise http_error(e) from e
    return GameIdResponse(game_id=game_id)


@router.post("/games/{game_id}/join")
async def join_game(game_id: str, body: PlayerRequest, service: Service) -> JoinGameResponse:
    """Take the next free seat in a waiting game."""
    try:
        seat = await service.join_game(game_id, body.to_player())
    except GameError as e:
        raise http_error(e) from e
    return JoinGameResponse(game_id=game_id, seat=seat)


@router.post("/games/{game_id}/start")
async def start_game(game_id: str, body: StartGameRequest, service: Service) -> dict[str, Any]:
    """Deal the cards and start play (host only)."""
    try:
        game = await service.deal_and_start(game_id, body.uid)
    except GameError as e:
        raise http_error(e) from e
    return serialize_public_game(game)


@router.post("/games/{game_id}/play")
async def play_card(game_id: str, body: PlayCardRequest, service: Service) -> dict[str, Any]:
    """Play a card from the caller's hand."""
    try:
        game = await service.play_card(game_id, body.uid, body.card.to_card())
    except GameError as e:
        raise http_error(e) from e
    return serialize_public_game(game)


@router.post("/games/{game_id}/next-trick")
async def next_trick(game_id: str, service: Service) -> NextTrickResponse:
    """Clear a scored trick now instead of waiting for the server."""
    try:
        advanced = await service.start_next_trick(game_id)
    except GameError as e:
        raise http_error(e) from e
    return NextTrickResponse(advanced=advanced)


@router.get("/games/{game_id}")
async def get_game(game_id: str, service: Service) -> dict[str, Any]:
    """Get the public state of a game."""
    try:
        return await service.get_public_state(game_id)
    except GameError as e:
        raise http_error(e) from e


@router.get("/games/{game_id}/hand/{uid}")
async def get_hand(game_id: str, uid: str, service: Service) -> HandResponse:
    """Get a seated player's hand and the cards they may play."""
    try:
        hand, legal = await service.get_hand(game_id, uid)
    except GameError as e:
        raise http_error(e) from e
    return HandResponse(
        game_id=game_id,
        uid=uid,
        hand=[CardModel.from_card(c) for c in hand],
        legal_cards=[CardModel.from_card(c) for c in legal],
    )


@router.get("/history")
async def get_history(
    service: Service, limit: Annotated[int, Query(ge=1, le=50)] = 10
) -> HistoryResponse:
    """Recently finished offline games, newest first."""
    games = await service.store.list_results(limit)
    for game in games:
        game["historyId"] = game.pop("_id", None)
    return HistoryResponse(games=games, count=len(games))


@router.websocket("/games/{game_id}/watch")
async def watch(websocket: WebSocket, game_id: str) -> None:
    """Push the public game state on every commit."""
    await watch_game(websocket, websocket.app.state.game_service, game_id)
