"""Domain models for couples."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from cards_after_dark.domain.cards import CouplePreferences

POINTS_PER_LEVEL = 1000


@dataclass(frozen=True)
class CoupleProfile:
    """Points and streak aggregate shared by two partners."""

    id: UUID
    user_ids: tuple[UUID, ...]
    total_points: int = 0
    streak_days: int = 0
    preferences: CouplePreferences | None = None
    created_at: datetime | None = None

    @property
    def level(self) -> int:
        return self.total_points // POINTS_PER_LEVEL + 1

    @property
    def points_for_next_level(self) -> int:
        return self.level * POINTS_PER_LEVEL - self.total_points


@dataclass(frozen=True)
class CoupleUpdate:
    """Partial update for a couple row; ``None`` leaves a field unchanged."""

    total_points: int | None = None
    streak_days: int | None = None
    preferences: CouplePreferences | None = None
