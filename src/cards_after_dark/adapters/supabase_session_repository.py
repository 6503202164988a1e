"""Supabase-backed game session repository."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from cards_after_dark.adapters.serialization import (
    drawn_card_from_json,
    drawn_card_to_json,
    parse_timestamp,
    vote_from_json,
    vote_to_json,
)
from cards_after_dark.domain.sessions import GameSession, SessionStatus
from cards_after_dark.services.game import SessionRepository

_COLUMNS = (
    "id, couple_id, date, user_cards, votes, selected_card, points, completed, "
    "status, notes, version, created_at, completed_at"
)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for daily game sessions."""

    client: Client

    def get_session(self, couple_id: UUID, day: date) -> GameSession | None:
        """Return the session for a couple and day, if present."""
        response = (
            self.client.table("game_sessions")
            .select(_COLUMNS)
            .eq("couple_id", str(couple_id))
            .eq("date", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _session_from_row(response.data[0])

    def create_session(self, session: GameSession) -> GameSession:
        """Insert the session unless the (couple_id, date) key already exists."""
        self.client.table("game_sessions").upsert(
            _session_to_row(session),
            on_conflict="couple_id,date",
            ignore_duplicates=True,
        ).execute()
        stored = self.get_session(session.couple_id, session.date)
        if stored is None:
            raise RuntimeError("Failed to create game session")
        return stored

    def update_session_if_unchanged(
        self, session: GameSession, expected_version: int
    ) -> bool:
        """Update the row only while its version still matches."""
        row = _session_to_row(session)
        for key in ("id", "couple_id", "date", "created_at"):
            row.pop(key)
        response = (
            self.client.table("game_sessions")
            .update(row)
            .eq("couple_id", str(session.couple_id))
            .eq("date", session.date.isoformat())
            .eq("version", expected_version)
            .execute()
        )
        return bool(response.data)

    def list_sessions(self, couple_id: UUID, limit: int) -> list[GameSession]:
        """Return a couple's sessions, most recent first."""
        response = (
            self.client.table("game_sessions")
            .select(_COLUMNS)
            .eq("couple_id", str(couple_id))
            .order("date", desc=True)
            .limit(limit)
            .execute()
        )
        return [_session_from_row(row) for row in response.data or []]


def _session_to_row(session: GameSession) -> dict[str, object]:
    return {
        "id": str(session.id),
        "couple_id": str(session.couple_id),
        "date": session.date.isoformat(),
        "user_cards": [drawn_card_to_json(drawn) for drawn in session.user_cards],
        "votes": [vote_to_json(vote) for vote in session.votes],
        "selected_card": (
            drawn_card_to_json(session.selected_card)
            if session.selected_card
            else None
        ),
        "points": session.points,
        "completed": session.completed,
        "status": session.status.value,
        "notes": session.notes,
        "version": session.version,
        "created_at": session.created_at.isoformat(),
        "completed_at": (
            session.completed_at.isoformat() if session.completed_at else None
        ),
    }


def _session_from_row(row: dict[str, object]) -> GameSession:
    return GameSession(
        id=UUID(str(row["id"])),
        couple_id=UUID(str(row["couple_id"])),
        date=date.fromisoformat(str(row["date"])),
        created_at=parse_timestamp(row["created_at"]),
        user_cards=tuple(drawn_card_from_json(item) for item in row.get("user_cards") or []),
        votes=tuple(vote_from_json(item) for item in row.get("votes") or []),
        selected_card=(
            drawn_card_from_json(row["selected_card"])
            if row.get("selected_card")
            else None
        ),
        points=int(row.get("points") or 0),
        completed=bool(row.get("completed")),
        status=SessionStatus(row.get("status") or SessionStatus.WAITING),
        completed_at=(
            parse_timestamp(row["completed_at"]) if row.get("completed_at") else None
        ),
        notes=row.get("notes"),
        version=int(row.get("version") or 0),
    )
