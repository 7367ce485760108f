"""Exceptions raised by the rules engine and the services around it."""

from enum import StrEnum


class ErrorCode(StrEnum):
    """Error codes returned to clients."""

    # Input errors
    INVALID_INPUT = "error.invalidInput"

    # Game state errors
    GAME_NOT_FOUND = "error.gameNotFound"
    GAME_IS_FULL = "error.gameIsFull"
    GAME_ALREADY_STARTED = "error.gameAlreadyStarted"
    NOT_ENOUGH_PLAYERS = "error.notEnoughPlayers"
    INVALID_PHASE = "error.invalidPhase"

    # Player errors
    NOT_HOST = "error.notHost"
    NOT_SEATED = "error.notSeated"
    NOT_YOUR_TURN = "error.notYourTurn"

    # Card errors
    CARD_NOT_IN_HAND = "error.cardNotInHand"
    MUST_FOLLOW_SUIT = "error.mustFollowSuit"

    # Store errors
    CONFLICT = "error.conflict"


class GameError(Exception):
    """Base exception for game-related errors."""

    code: ErrorCode = ErrorCode.INVALID_INPUT

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        """Create the error with a client-facing message."""
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Convert to a dictionary for API error bodies."""
        return {"code": self.code.value, "message": self.message}


class ValidationError(GameError):
    """Bad local input. Nothing was changed."""

    code = ErrorCode.INVALID_INPUT


class RuleViolation(GameError):
    """An action the game rules do not allow right now."""

    code = ErrorCode.INVALID_PHASE


class InvalidPhase(RuleViolation):
    code = ErrorCode.INVALID_PHASE


class NotYourTurn(RuleViolation):
    code = ErrorCode.NOT_YOUR_TURN


class CardNotInHand(RuleViolation):
    code = ErrorCode.CARD_NOT_IN_HAND


class MustFollowSuit(RuleViolation):
    code = ErrorCode.MUST_FOLLOW_SUIT


class GameFull(RuleViolation):
    code = ErrorCode.GAME_IS_FULL


class AlreadyStarted(RuleViolation):
    code = ErrorCode.GAME_ALREADY_STARTED


class InsufficientPlayers(RuleViolation):
    code = ErrorCode.NOT_ENOUGH_PLAYERS


class ConcurrencyConflict(GameError):
    """Another writer committed first. Safe to retry."""

    code = ErrorCode.CONFLICT


class NotFoundError(GameError):
    code = ErrorCode.GAME_NOT_FOUND


class GameNotFound(NotFoundError):
    code = ErrorCode.GAME_NOT_FOUND


class AuthorizationError(GameError):
    """The caller may not perform this action."""

    code = ErrorCode.NOT_SEATED


class NotHost(AuthorizationError):
    code = ErrorCode.NOT_HOST


class NotSeated(AuthorizationError):
    code = ErrorCode.NOT_SEATED
