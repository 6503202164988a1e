"""Supabase-backed couple repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cards_after_dark.adapters.serialization import (
    parse_timestamp,
    preferences_from_json,
    preferences_to_json,
)
from cards_after_dark.domain.couples import CoupleProfile, CoupleUpdate
from cards_after_dark.services.couples import CoupleRepository

_COLUMNS = "id, user_ids, total_points, streak_days, preferences, created_at"


@dataclass
class SupabaseCoupleRepository(CoupleRepository):
    """Supabase implementation for couples."""

    client: Client

    def get_couple(self, couple_id: UUID) -> CoupleProfile | None:
        """Return a couple by id, if present."""
        response = (
            self.client.table("couples")
            .select(_COLUMNS)
            .eq("id", str(couple_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _couple_from_row(response.data[0])

    def update_couple(self, couple_id: UUID, update: CoupleUpdate) -> CoupleProfile:
        """Apply the non-empty fields of the update."""
        payload = _update_payload(update)
        if payload:
            self.client.table("couples").update(payload).eq(
                "id", str(couple_id)
            ).execute()
        couple = self.get_couple(couple_id)
        if couple is None:
            raise RuntimeError("Couple disappeared during update")
        return couple


def _update_payload(update: CoupleUpdate) -> dict[str, object]:
    payload: dict[str, object] = {}
    if update.total_points is not None:
        payload["total_points"] = update.total_points
    if update.streak_days is not None:
        payload["streak_days"] = update.streak_days
    if update.preferences is not None:
        payload["preferences"] = preferences_to_json(update.preferences)
    return payload


def _couple_from_row(row: dict[str, object]) -> CoupleProfile:
    return CoupleProfile(
        id=UUID(str(row["id"])),
        user_ids=tuple(UUID(str(user_id)) for user_id in row.get("user_ids") or []),
        total_points=int(row.get("total_points") or 0),
        streak_days=int(row.get("streak_days") or 0),
        preferences=preferences_from_json(row.get("preferences")),
        created_at=(
            parse_timestamp(row["created_at"]) if row.get("created_at") else None
        ),
    )
