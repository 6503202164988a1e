"""User-related business logic."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from cards_after_dark.domain.errors import AuthenticationError, NotInCoupleError
from cards_after_dark.domain.models import UserRecord


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user with the given id, if present."""

    def list_couple_members(self, couple_id: UUID) -> list[UserRecord]:
        """Return the users belonging to a couple."""


@dataclass
class UserService:
    """Application service for resolving the acting user."""

    repository: UserRepository

    def require_user(self, user_id: UUID | None) -> UserRecord:
        """Return the authenticated user or raise."""
        if user_id is None:
            raise AuthenticationError
        user = self.repository.get_user(user_id)
        if user is None:
            raise AuthenticationError
        return user

    def require_couple(self, user_id: UUID | None) -> tuple[UserRecord, UUID]:
        """Return the authenticated user and their couple id."""
        user = self.require_user(user_id)
        if user.couple_id is None:
            raise NotInCoupleError
        return user, user.couple_id

    def partners_of(self, couple_id: UUID, user_id: UUID) -> list[UserRecord]:
        """Return the other members of a couple."""
        return [
            member
            for member in self.repository.list_couple_members(couple_id)
            if member.id != user_id
        ]
