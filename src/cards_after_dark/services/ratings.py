"""Card rating service."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from cards_after_dark.domain.cards import Rating
from cards_after_dark.domain.errors import InvalidRatingError

MIN_RATING = 1
MAX_RATING = 5


class RatingRepository(Protocol):
    """Persistence interface for card ratings."""

    def save_rating(self, rating: Rating) -> Rating:
        """Insert or replace the rating for (user_id, card_id)."""

    def list_user_ratings(self, user_id: UUID, limit: int) -> list[Rating]:
        """Return a user's most recent ratings."""


def validate_rating(rating: int) -> int:
    """Return the rating if it is within range, else raise."""
    if isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRatingError
    return rating


@dataclass
class RatingService:
    """Service for rating cards outside of a game session."""

    repository: RatingRepository
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def rate_card(self, user_id: UUID, card_id: str, rating: int) -> Rating:
        """Store a rating for a card."""
        return self.repository.save_rating(
            Rating(
                user_id=user_id,
                card_id=card_id,
                rating=validate_rating(rating),
                created_at=self.clock(),
            )
        )

    def update_rating(self, user_id: UUID, card_id: str, rating: int) -> Rating:
        """Set the rating for a card, creating it if the user never rated it.

        Same upsert as ``rate_card``; both mutations share one record per
        user and card.
        """
        return self.rate_card(user_id, card_id, rating)

    def recent_ratings(self, user_id: UUID, limit: int = 50) -> list[Rating]:
        """Return the user's latest ratings."""
        return self.repository.list_user_ratings(user_id, limit)
