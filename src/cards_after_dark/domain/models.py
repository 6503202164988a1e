"""Domain models for users."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: UUID
    phone_number: str
    first_name: str | None = None
    couple_id: UUID | None = None
    push_token: str | None = None
