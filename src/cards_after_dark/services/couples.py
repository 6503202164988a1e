"""Couple aggregate: points, streaks and preferences."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from cards_after_dark.domain.cards import CouplePreferences
from cards_after_dark.domain.couples import CoupleProfile, CoupleUpdate
from cards_after_dark.domain.errors import CoupleNotFoundError


class CoupleRepository(Protocol):
    """Persistence interface for couples."""

    def get_couple(self, couple_id: UUID) -> CoupleProfile | None:
        """Return a couple by id, if present."""

    def update_couple(self, couple_id: UUID, update: CoupleUpdate) -> CoupleProfile:
        """Apply a partial update and return the stored couple."""


@dataclass
class CoupleService:
    """Service for reading and updating the couple aggregate."""

    repository: CoupleRepository

    def get_couple(self, couple_id: UUID) -> CoupleProfile:
        """Return the couple or raise if it does not exist."""
        couple = self.repository.get_couple(couple_id)
        if couple is None:
            raise CoupleNotFoundError
        return couple

    def record_completion(self, couple_id: UUID, points: int) -> CoupleProfile:
        """Add earned points and extend the streak by one day.

        The streak is not reset when a day is skipped.
        """
        couple = self.get_couple(couple_id)
        return self.repository.update_couple(
            couple_id,
            CoupleUpdate(
                total_points=couple.total_points + points,
                streak_days=couple.streak_days + 1,
            ),
        )

    def update_preferences(
        self, couple_id: UUID, preferences: CouplePreferences
    ) -> CoupleProfile:
        """Replace the couple's card preferences."""
        self.get_couple(couple_id)
        return self.repository.update_couple(
            couple_id, CoupleUpdate(preferences=preferences)
        )

    def revert_completion(self, couple_id: UUID, points: int) -> CoupleProfile:
        """Undo ``record_completion`` when the session could not be saved."""
        couple = self.get_couple(couple_id)
        return self.repository.update_couple(
            couple_id,
            CoupleUpdate(
                total_points=max(0, couple.total_points - points),
                streak_days=max(0, couple.streak_days - 1),
            ),
        )
