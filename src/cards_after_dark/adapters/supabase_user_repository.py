"""Supabase-backed user repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cards_after_dark.domain.models import UserRecord
from cards_after_dark.services.users import UserRepository

_COLUMNS = "id, phone_number, first_name, couple_id, push_token"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user lookups."""

    client: Client

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user for an id, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _user_from_row(response.data[0])
        return None

    def list_couple_members(self, couple_id: UUID) -> list[UserRecord]:
        """Return the users linked to a couple."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("couple_id", str(couple_id))
            .execute()
        )
        return [_user_from_row(row) for row in response.data or []]


def _user_from_row(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=UUID(str(row["id"])),
        phone_number=str(row["phone_number"]),
        first_name=row.get("first_name"),
        couple_id=UUID(str(row["couple_id"])) if row.get("couple_id") else None,
        push_token=row.get("push_token"),
    )
