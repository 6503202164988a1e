"""Row conversions shared by the Supabase repositories."""

from datetime import datetime
from uuid import UUID

from cards_after_dark.domain.cards import Card, CardCategory, CouplePreferences
from cards_after_dark.domain.sessions import DrawnCard, Vote


def card_to_json(card: Card) -> dict[str, object]:
    return {
        "id": card.id,
        "title": card.title,
        "description": card.description,
        "kink_factor": card.kink_factor,
        "category": card.category.value,
        "tags": list(card.tags),
    }


def card_from_json(data: dict[str, object]) -> Card:
    return Card(
        id=str(data["id"]),
        title=str(data["title"]),
        description=str(data["description"]),
        kink_factor=int(data["kink_factor"]),
        category=CardCategory(data["category"]),
        tags=tuple(str(tag) for tag in data.get("tags") or []),
    )


def drawn_card_to_json(drawn: DrawnCard) -> dict[str, object]:
    return {
        "user_id": str(drawn.user_id),
        "card": card_to_json(drawn.card),
        "drawn_at": drawn.drawn_at.isoformat(),
    }


def drawn_card_from_json(data: dict[str, object]) -> DrawnCard:
    return DrawnCard(
        user_id=UUID(str(data["user_id"])),
        card=card_from_json(data["card"]),
        drawn_at=parse_timestamp(data["drawn_at"]),
    )


def vote_to_json(vote: Vote) -> dict[str, object]:
    return {
        "user_id": str(vote.user_id),
        "card_id": vote.card_id,
        "voted_at": vote.voted_at.isoformat(),
    }


def vote_from_json(data: dict[str, object]) -> Vote:
    return Vote(
        user_id=UUID(str(data["user_id"])),
        card_id=str(data["card_id"]),
        voted_at=parse_timestamp(data["voted_at"]),
    )


def preferences_to_json(preferences: CouplePreferences) -> dict[str, object]:
    return {
        "categories": [category.value for category in preferences.categories],
        "max_kink_factor": preferences.max_kink_factor,
        "excluded_tags": list(preferences.excluded_tags),
        "notification_time": preferences.notification_time,
        "timezone": preferences.timezone,
    }


def preferences_from_json(data: dict[str, object] | None) -> CouplePreferences | None:
    if not data:
        return None
    return CouplePreferences(
        categories=tuple(CardCategory(value) for value in data.get("categories") or []),
        max_kink_factor=int(data.get("max_kink_factor") or 2),
        excluded_tags=tuple(str(tag) for tag in data.get("excluded_tags") or []),
        notification_time=str(data.get("notification_time") or "19:00"),
        timezone=data.get("timezone"),
    )


def parse_timestamp(value: object) -> datetime:
    """Parse an ISO timestamp as returned by PostgREST."""
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
