"""Errors raised by the game services."""


class GameError(Exception):
    """Base class for game errors."""

    code = "GAME_ERROR"
    default_message = "Game operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UserInputError(GameError):
    """A user-correctable error, safe to show to the caller."""

    code = "BAD_USER_INPUT"
    default_message = "Invalid request"


class AlreadyDrewError(UserInputError):
    code = "ALREADY_DREW_CARD"
    default_message = "You already drew a card today"


class DrawLimitExceededError(UserInputError):
    code = "DRAW_LIMIT_REACHED"
    default_message = "Maximum card draws reached for today"


class NotEnoughCardsError(UserInputError):
    code = "VOTING_NOT_READY"
    default_message = "Both partners must draw cards before voting"


class AlreadyVotedError(UserInputError):
    code = "ALREADY_VOTED"
    default_message = "You already voted"


class InvalidCardSelectionError(UserInputError):
    code = "INVALID_CARD"
    default_message = "Invalid card selection"


class NoActivitySelectedError(UserInputError):
    code = "ACTIVITY_NOT_SELECTED"
    default_message = "No activity selected"


class AlreadyCompletedError(UserInputError):
    code = "ACTIVITY_ALREADY_COMPLETED"
    default_message = "Activity already completed"


class InvalidRatingError(UserInputError):
    code = "INVALID_RATING"
    default_message = "Rating must be between 1 and 5"


class InvalidNotesError(UserInputError):
    code = "INVALID_NOTES"
    default_message = "Notes too long"


class AuthenticationError(GameError):
    code = "UNAUTHORIZED"
    default_message = "You must be logged in to perform this action"


class NotInCoupleError(GameError):
    code = "COUPLE_REQUIRED"
    default_message = "You must be in a couple to perform this action"


class ConflictError(GameError):
    """A concurrent write changed the record; the caller may retry."""

    code = "CONFLICT"
    default_message = "The game session changed, please retry"


class NotFoundError(GameError):
    code = "NOT_FOUND"
    default_message = "Resource not found"


class CoupleNotFoundError(NotFoundError):
    code = "COUPLE_NOT_FOUND"
    default_message = "Couple not found"


class NoCardsAvailableError(GameError):
    code = "NO_CARDS_AVAILABLE"
    default_message = "No available cards to draw"


SURFACED_ERRORS: tuple[type[GameError], ...] = (
    UserInputError,
    AuthenticationError,
    NotInCoupleError,
    ConflictError,
)
