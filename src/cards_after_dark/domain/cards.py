"""Domain models for activity cards."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class CardCategory(StrEnum):
    """Activity categories a card can belong to."""

    ROMANCE = "romance"
    SENSUAL = "sensual"
    DATE_NIGHT = "date_night"
    PLAYFUL = "playful"
    INTIMATE = "intimate"
    ADVENTURE = "adventure"


@dataclass(frozen=True)
class Card:
    """A single proposed activity."""

    id: str
    title: str
    description: str
    kink_factor: int
    category: CardCategory
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class CouplePreferences:
    """Constraints a couple applies to recommended cards."""

    categories: tuple[CardCategory, ...] = ()
    max_kink_factor: int = 2
    excluded_tags: tuple[str, ...] = ()
    notification_time: str = "19:00"
    timezone: str | None = None


@dataclass(frozen=True)
class Rating:
    """A user's rating of a card."""

    user_id: UUID
    card_id: str
    rating: int
    created_at: datetime | None = None


@dataclass(frozen=True)
class RecommendationRequest:
    """Context passed to the card recommender."""

    couple_id: UUID
    preferences: CouplePreferences | None
    recent_history: list[Card] = field(default_factory=list)
    user_ratings: list[Rating] = field(default_factory=list)


@dataclass(frozen=True)
class RecommendationResult:
    """Cards proposed by the recommender."""

    cards: list[Card]
    reasoning: str | None = None
