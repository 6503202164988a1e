"""Supabase-backed rating repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cards_after_dark.adapters.serialization import parse_timestamp
from cards_after_dark.domain.cards import Rating
from cards_after_dark.services.ratings import RatingRepository


@dataclass
class SupabaseRatingRepository(RatingRepository):
    """Supabase implementation for card ratings."""

    client: Client

    def save_rating(self, rating: Rating) -> Rating:
        """Upsert a rating keyed by user and card."""
        payload: dict[str, object] = {
            "user_id": str(rating.user_id),
            "card_id": rating.card_id,
            "rating": rating.rating,
        }
        if rating.created_at is not None:
            payload["created_at"] = rating.created_at.isoformat()
        response = (
            self.client.table("ratings")
            .upsert(payload, on_conflict="user_id,card_id")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save rating")
        return _rating_from_row(response.data[0])

    def list_user_ratings(self, user_id: UUID, limit: int) -> list[Rating]:
        """Return a user's most recent ratings."""
        response = (
            self.client.table("ratings")
            .select("user_id, card_id, rating, created_at")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_rating_from_row(row) for row in response.data or []]


def _rating_from_row(row: dict[str, object]) -> Rating:
    return Rating(
        user_id=UUID(str(row["user_id"])),
        card_id=str(row["card_id"]),
        rating=int(row["rating"]),
        created_at=(
            parse_timestamp(row["created_at"]) if row.get("created_at") else None
        ),
    )
